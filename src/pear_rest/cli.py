"""
CLI commands for decoding PEAR channel REST documents.
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from .decode import DOCUMENT_KINDS, decode_file, get_available_kinds
from .errors import DecodeError
from .tree import DecodeConfig
from .urls import default_channel_url, rest_url

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level_name = "DEBUG" if verbose else os.getenv("PEAR_REST_LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

def cmd_decode(args):
    """Decode an XML file and print the record as JSON."""
    setup_logging(args.verbose)

    config = DecodeConfig(strict_text=args.strict_text)
    try:
        record = decode_file(args.kind, Path(args.file), config=config)
    except DecodeError as e:
        logger.debug(f"Decode failure details: {e.to_dict()}")
        print(f"✗ Failed to decode {args.kind} document {args.file}: {e}", file=sys.stderr)
        if isinstance(e.__cause__, DecodeError):
            print(f"  caused by: {e.__cause__}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"✗ Failed to read {args.file}: {e}", file=sys.stderr)
        return 1

    print(json.dumps(record.to_dict(), indent=2, ensure_ascii=False))
    return 0

def cmd_kinds(args):
    """List supported document kinds."""
    print("Supported document kinds:")
    for name, kind in DOCUMENT_KINDS.items():
        print(f"  {name:<14} <{kind.root}> → {kind.record}: {kind.description}")
    return 0

def cmd_url(args):
    """Print the REST URL of a document."""
    try:
        print(rest_url(args.channel, args.kind, package=args.package, version=args.version))
    except ValueError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1
    return 0

def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="PEAR channel REST document decoder",
        prog="pear-rest"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands"
    )

    # Decode command
    decode_parser = subparsers.add_parser(
        "decode",
        help="Decode a REST XML document and print it as JSON"
    )
    decode_parser.add_argument(
        "kind",
        choices=get_available_kinds(),
        help="Document kind"
    )
    decode_parser.add_argument(
        "file",
        help="Path to the XML document"
    )
    decode_parser.add_argument(
        "--strict-text",
        action="store_true",
        help="Reject stray non-whitespace text between fields"
    )
    decode_parser.set_defaults(func=cmd_decode)

    # Kinds command
    kinds_parser = subparsers.add_parser(
        "kinds",
        help="List supported document kinds"
    )
    kinds_parser.set_defaults(func=cmd_kinds)

    # URL command
    url_parser = subparsers.add_parser(
        "url",
        help="Print the REST URL of a document"
    )
    url_parser.add_argument(
        "kind",
        choices=get_available_kinds(),
        help="Document kind"
    )
    url_parser.add_argument(
        "--channel",
        default=default_channel_url(),
        help="Channel base URL (default: $PEAR_CHANNEL_URL or https://pecl.php.net/)"
    )
    url_parser.add_argument("--package", help="Package name")
    url_parser.add_argument("--version", help="Release version")
    url_parser.set_defaults(func=cmd_url)

    args = parser.parse_args(argv)

    if not hasattr(args, 'func'):
        parser.print_help()
        return 1

    return args.func(args)

if __name__ == "__main__":
    sys.exit(main())
