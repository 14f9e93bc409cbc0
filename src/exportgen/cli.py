"""Command-line entry point for generating import descriptors from a plan."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .compiler import ExportDescriptorGenerator
from .errors import ExportError
from .plan import read_plan
from .results import write_manifest


def cmd_generate(args: argparse.Namespace) -> int:
    plan = read_plan(args.plan)
    generator = ExportDescriptorGenerator(
        registry=plan.registry,
        output_dir=Path(args.output_dir),
        settings=plan.settings,
    )
    installations = plan.registry.installations
    if args.installation:
        installations = tuple(
            item for item in installations if item.export_set in args.installation
        )
    results = generator.generate_all(installations, fail_fast=args.fail_fast)

    for result in results:
        if result.ok:
            print(f"{result.export_set}: {result.main_file}")
            continue
        for error in result.errors:
            print(f"error: {error}", file=sys.stderr)

    if args.log:
        generator.logger.to_json_lines(args.log)
    if args.manifest:
        write_manifest(results, args.manifest, fmt=args.manifest_format)
    return 0 if all(result.ok for result in results) else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="exportgen",
        description="Generate import descriptors for installed export sets",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    generate_p = sub.add_parser("generate", help="Generate descriptors from an install plan")
    generate_p.add_argument("plan", help="Path to the install plan JSON")
    generate_p.add_argument("--output-dir", required=True, help="Staging directory for output")
    generate_p.add_argument(
        "--installation",
        action="append",
        metavar="EXPORT_SET",
        help="Only generate installations of this export set (repeatable)",
    )
    generate_p.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop after the first installation that fails",
    )
    generate_p.add_argument("--log", help="Write structured logs as JSON lines")
    generate_p.add_argument("--manifest", help="Write the generation manifest")
    generate_p.add_argument(
        "--manifest-format",
        choices=("json", "cbor"),
        default="json",
        help="Manifest encoding",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        if args.command == "generate":
            return cmd_generate(args)
    except ExportError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 1
