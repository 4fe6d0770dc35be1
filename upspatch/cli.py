#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
UPS Patch Toolkit - command line interface

    upspatch create ORIGINAL MODIFIED PATCH
    upspatch apply ROM PATCH [-o OUTPUT] [--strict]
    upspatch inspect PATCH [--json]
    upspatch match DIRECTORY
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config import PatcherConfig, load_config, validate_config
from .exceptions import ConfigurationError, FileOperationError, PatchError
from .logging_config import get_logger, setup_logging
from .patching import PatchMatcher, Patcher
from .patching.checksum import format_crc32
from .version import load_version

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2

logger = get_logger("cli")


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parses command line arguments."""
    parser = argparse.ArgumentParser(prog="upspatch", description="UPS Patch Toolkit")
    parser.add_argument("--config", help="JSON or YAML configuration file")
    parser.add_argument("--log-level", help="Override the configured log level")
    parser.add_argument("--log-json", action="store_true", help="Emit JSON log lines")
    parser.add_argument("--version", action="version", version=f"%(prog)s {load_version()}")

    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Create a patch from two files")
    create.add_argument("original", help="Unmodified file")
    create.add_argument("modified", help="Modified file")
    create.add_argument("patch", help="Patch file to write (.ups)")
    create.add_argument("--overwrite", action="store_true", help="Replace an existing patch file")

    apply_cmd = sub.add_parser("apply", help="Apply a patch (direction is detected)")
    apply_cmd.add_argument("rom", help="Original or modified file")
    apply_cmd.add_argument("patch", help="Patch file (.ups)")
    apply_cmd.add_argument("-o", "--output", help="Output file")
    apply_cmd.add_argument("--strict", action="store_true", help="Do not write output that fails its checksum")
    apply_cmd.add_argument("--overwrite", action="store_true", help="Replace an existing output file")

    inspect = sub.add_parser("inspect", help="Show patch sizes and checksums")
    inspect.add_argument("patch", help="Patch file (.ups)")
    inspect.add_argument("--json", action="store_true", help="Print as JSON")

    match = sub.add_parser("match", help="Pair patches with ROMs in a directory")
    match.add_argument("directory", help="Directory holding ROMs and .ups patches")

    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> PatcherConfig:
    config = load_config(args.config)
    updates = {}
    if args.log_level:
        updates["log_level"] = args.log_level
    if args.log_json:
        updates["log_json"] = True
    if getattr(args, "strict", False):
        updates["strict_output_verification"] = True
    if getattr(args, "overwrite", False):
        updates["overwrite"] = True
    if updates:
        config = validate_config({**config.model_dump(), **updates})
    return config


def _run_inspect(patcher: Patcher, args: argparse.Namespace) -> int:
    try:
        summary = patcher.inspect(args.patch)
    except (PatchError, FileOperationError) as e:
        logger.error("%s", e, extra={"error": e.to_dict()})
        return EXIT_FAILURE

    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        for key, value in summary.items():
            print(f"{key:>14}: {value}")
    return EXIT_OK


def _run_match(config: PatcherConfig, args: argparse.Namespace) -> int:
    try:
        report = PatchMatcher(chunk_size=config.chunk_size).scan(args.directory)
    except OSError as e:
        logger.error("Cannot scan %s: %s", args.directory, e)
        return EXIT_FAILURE

    for match in report.matches:
        print(f"{match.patch_path.name} + {match.rom_path.name} -> {match.target_path.name} ({match.direction.value})")
    for header in report.unmatched:
        print(f"{header.path.name}: no ROM with CRC32 {format_crc32(header.input_crc)} or {format_crc32(header.output_crc)}")
    for path in report.invalid:
        print(f"{path.name}: invalid patch")
    return EXIT_OK if report.matches else EXIT_FAILURE


def main(argv: Optional[List[str]] = None) -> int:
    """Main function of the command line tool."""
    args = parse_arguments(argv)

    try:
        config = _build_config(args)
    except ConfigurationError as e:
        setup_logging(logging.INFO, json_format=args.log_json)
        logger.error("%s", e, extra={"error": e.to_dict()})
        return EXIT_CONFIG_ERROR

    setup_logging(config.log_level, json_format=config.log_json, log_file=config.log_file)
    patcher = Patcher(config)

    if args.command == "create":
        result = patcher.create(args.original, args.modified, args.patch)
        return EXIT_OK if result.success else EXIT_FAILURE

    if args.command == "apply":
        result = patcher.apply(args.rom, args.patch, args.output)
        if not result.success:
            return EXIT_FAILURE
        if not result.checksum_valid:
            logger.warning("Output %s failed checksum verification", result.output_path)
            return EXIT_FAILURE
        print(f"{result.output_path} ({result.direction.value})")
        return EXIT_OK

    if args.command == "inspect":
        return _run_inspect(patcher, args)

    if args.command == "match":
        return _run_match(config, args)

    return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
