"""HIDE command line interface."""
