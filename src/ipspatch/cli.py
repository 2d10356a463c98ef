#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
IPS Patcher - Command line entry point

    ips-patcher PATCH FILE [--output PATH] [--list] [--config PATH]
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import PatcherConfig, apply_env_overrides, load_config
from .exceptions import ConfigurationError, PatchError
from .logging_config import setup_logging
from .patching import Patcher, iter_records
from .version import load_version

USAGE = "Usage: ips-patcher {patch} {file}"

logger = logging.getLogger(__name__)


class UsageError(Exception):
    """Raised instead of exiting when the command line cannot be parsed."""


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    """Builds the command line parser."""
    parser = _Parser(
        prog="ips-patcher",
        description="Apply an IPS patch to a file in place",
        usage="%(prog)s {patch} {file} [options]",
    )
    parser.add_argument("paths", nargs="*", metavar="PATH", help="Patch file followed by the file to patch")
    parser.add_argument("-o", "--output", help="Write the patched copy here and leave FILE untouched")
    parser.add_argument("--list", action="store_true", help="List the records of the patch instead of applying it")
    parser.add_argument("--config", metavar="PATH", help="YAML or JSON configuration file")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: from config, INFO)",
    )
    parser.add_argument("--log-json", action="store_true", help="Emit structured JSON log lines")
    parser.add_argument("--version", action="store_true", help="Show version information")
    return parser


def _resolve_config(args: argparse.Namespace) -> PatcherConfig:
    config = apply_env_overrides(load_config(args.config))
    updates = {}
    if args.log_level:
        updates["log_level"] = args.log_level
    if args.log_json:
        updates["log_json"] = True
    if updates:
        config = config.model_copy(update=updates)
    return config


def list_records(patch_path: str, config: PatcherConfig) -> int:
    """Prints one line per record of the patch."""
    total = 0
    written = 0
    try:
        with open(patch_path, "rb") as source:
            for record in iter_records(source, chunk_size=config.chunk_size):
                kind = "rle" if record.is_rle else "literal"
                line = f"0x{record.offset:06X}  {kind:<7}  {record.size:>5}"
                if record.is_rle:
                    line += f"  fill=0x{record.fill_value:02X}"
                print(line)
                total += 1
                written += record.size
    except (PatchError, OSError) as e:
        logger.error("Listing %s failed: %s", patch_path, e)
        print(f"Listing failed: {e}", file=sys.stderr)
        return 1

    print(f"{total} records, {written} bytes")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main function."""
    try:
        args = build_parser().parse_intermixed_args(argv)
    except UsageError as e:
        logger.debug("Rejected command line: %s", e)
        print(USAGE)
        return 0

    if args.version:
        print(f"IPS Patcher v{load_version()}")
        return 0

    if len(args.paths) != 2:
        print(USAGE)
        return 0

    patch_path, target_path = args.paths

    try:
        config = _resolve_config(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(config.log_level, json_output=config.log_json, log_file=config.log_file)

    if args.list:
        return list_records(patch_path, config)

    result = Patcher(config).apply(target_path, patch_path, args.output)
    if not result.success:
        print(f"Patch failed: {result.error}", file=sys.stderr)
        return 1

    print(
        f"Patched {result.output_path}: {result.records_applied} records, "
        f"{result.bytes_written} bytes written ({result.original_size} -> {result.patched_size} bytes)"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
