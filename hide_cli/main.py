#!/usr/bin/env python3
"""
HIDE Command Line Interface

Hides a file inside a lossless image and recovers it again.

Usage:
    hide encode -i IMAGE -e EMBED -o OUTPUT [-l LEVEL]
    hide decode -i IMAGE [-o OUTPUT]
    hide capacity -i IMAGE
    hide --version
    hide --help
"""

import argparse
import logging
import sys
from typing import Optional

from hide_core import __version__
from hide_core.config import StegoConfig
from hide_core.stego import image as imageio
from hide_core.stego.capacity import EncodingLevel, format_size, max_payload_bytes
from hide_core.stego.codec import Embedder, Extractor
from hide_core.stego.container import display_name
from hide_core.stego.errors import StegoError

logger = logging.getLogger(__name__)

LEVEL_CHOICES = [level.name.lower() for level in EncodingLevel]


class HideCLI:
    """Main CLI application for HIDE."""

    def __init__(self, random_source=None):
        self.random_source = random_source

    def run(self, args: list) -> int:
        """Run the CLI with given arguments."""
        parser = self.create_parser()
        parsed = parser.parse_args(args)

        logging.basicConfig(
            level=logging.DEBUG if parsed.verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )

        if hasattr(parsed, 'func'):
            try:
                return parsed.func(parsed)
            except StegoError as e:
                logger.debug("Operation failed", exc_info=True)
                print(f"ERROR: {e.message}", file=sys.stderr)
                return 1
        else:
            parser.print_help()
            return 0

    def create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser."""
        parser = argparse.ArgumentParser(
            prog="hide",
            description="Hide a file inside the pixels of an image",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
    hide encode -i cover.png -e secret.pdf -o stego.png
    hide encode -i cover.png -e secret.pdf -o stego.png --level high
    hide decode -i stego.png -o secret.pdf
    hide capacity -i cover.png
            """
        )

        parser.add_argument(
            '--version',
            action='version',
            version=f'HIDE Steganography v{__version__}'
        )
        parser.add_argument('--verbose', '-v', action='store_true',
                            help='Verbose output')

        subparsers = parser.add_subparsers(title='commands', dest='command')

        self.add_encode_command(subparsers)
        self.add_decode_command(subparsers)
        self.add_capacity_command(subparsers)

        return parser

    def add_encode_command(self, subparsers):
        """Add encode command to parser."""
        cmd = subparsers.add_parser('encode', help='Embed a file into an image')
        cmd.add_argument('--input', '-i', required=True, help='Carrier image')
        cmd.add_argument('--embed', '-e', required=True, help='File to hide')
        cmd.add_argument('--output', '-o', required=True,
                         help='Output image (.png, .tif, .tga)')
        cmd.add_argument('--level', '-l', default='low', choices=LEVEL_CHOICES,
                         help='Encoding level (bits per channel: low=1, medium=2, high=4)')
        cmd.add_argument('--no-verify', action='store_true',
                         help='Skip re-reading the payload before saving')
        cmd.set_defaults(func=self.handle_encode)

    def add_decode_command(self, subparsers):
        """Add decode command to parser."""
        cmd = subparsers.add_parser('decode', help='Recover a file from an image')
        cmd.add_argument('--input', '-i', required=True, help='Stego image')
        cmd.add_argument('--output', '-o',
                         help='Output file or directory (default: embedded name)')
        cmd.set_defaults(func=self.handle_decode)

    def add_capacity_command(self, subparsers):
        """Add capacity command to parser."""
        cmd = subparsers.add_parser('capacity', help='Show embed capacity per level')
        cmd.add_argument('--input', '-i', required=True, help='Carrier image')
        cmd.set_defaults(func=self.handle_capacity)

    # Command handlers

    def handle_encode(self, args):
        """Handle encode command."""
        config = StegoConfig.from_dict({
            'level': args.level,
            'verify_after_embed': not args.no_verify,
        })
        imageio.image_format_for(args.output)
        buffer = imageio.load(args.input)
        level = config.level
        max_size = max_payload_bytes(buffer.width, buffer.height, buffer.channels, level)

        print(f"* Image size: {buffer.width}x{buffer.height} pixels")
        print(f"* Encoding level: {level.label}")
        print(f"* Max embed size: {format_size(max_size)}")

        embedder = Embedder(random_source=self.random_source, config=config)
        result = embedder.embed_into(buffer, args.embed, args.output)

        print(f"* Embed size: {format_size(result.payload_size)}")
        print(f"* Embedded {display_name(result.header.name)} into image")
        print(f"* Successfully wrote to {display_name(str(args.output))}")
        return 0

    def handle_decode(self, args):
        """Handle decode command."""
        path, result = Extractor().extract_file(args.input, args.output)
        print(f"* Detected embed {display_name(result.filename)}")
        print(f"* Encoding level: {result.level.label}")
        print(f"* Successfully wrote to {display_name(str(path))}")
        return 0

    def handle_capacity(self, args):
        """Handle capacity command."""
        buffer = imageio.load(args.input)
        print(f"* Image size: {buffer.width}x{buffer.height} pixels")
        for level in EncodingLevel:
            size = max_payload_bytes(buffer.width, buffer.height, buffer.channels, level)
            print(f"* {level.label}: {format_size(size)}")
        return 0


def main(argv: Optional[list] = None):
    """Main entry point."""
    cli = HideCLI()
    sys.exit(cli.run(sys.argv[1:] if argv is None else argv))


if __name__ == "__main__":
    main()
