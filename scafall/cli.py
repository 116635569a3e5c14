"""Command-line entry point.

Usage::

    python -m scafall https://github.com/org/templates -o ./my-project
    python -m scafall ./templates/python -o ./my-project --override project=demo
    python -m scafall ./collection -o ./out --collection-prompt "Pick a stack"
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from scafall.config import ScaffoldConfig, parse_key_values
from scafall.errors import ScaffoldError
from scafall.prompts.asker import DefaultsAsker, RichAsker
from scafall.scaffolder.orchestrator import ScaffoldResult, Scaffolder
from scafall.utils import console, print_error, print_success, print_summary_table


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scafall",
        description="Scafall -- create a new project from a project template",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  scafall https://github.com/org/templates -o ./my-project\n"
            "  scafall ./template -o ./demo --override project=demo\n"
        ),
    )
    parser.add_argument("url", help="Local template directory or git URL")
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Directory to create; must not exist (default: SCAFALL_OUTPUT_DIR)",
    )
    parser.add_argument(
        "--override",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Value that skips its prompt (repeatable)",
    )
    parser.add_argument(
        "--default",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Value offered as the prompt default (repeatable)",
    )
    parser.add_argument(
        "--reserved",
        action="append",
        default=[],
        metavar="NAME",
        help="Variable name templates may not declare (repeatable)",
    )
    parser.add_argument(
        "--sub-path",
        default=None,
        help="Use the template in this subdirectory of the source",
    )
    parser.add_argument(
        "--collection-prompt",
        default=None,
        help="Treat the source as a collection and ask with this label",
    )
    parser.add_argument(
        "--no-input",
        action="store_true",
        help="Do not prompt; accept defaults",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``python -m scafall``."""
    args = build_parser().parse_args(argv)

    try:
        overrides = parse_key_values(args.override)
        defaults = parse_key_values(args.default)
        config = ScaffoldConfig.from_env()
    except ValueError as exc:
        print_error(f"Error: {exc}")
        sys.exit(2)

    config = config.model_copy(
        update={
            "overrides": {**config.overrides, **overrides},
            "defaults": {**config.defaults, **defaults},
            "reserved_names": [*config.reserved_names, *args.reserved],
        }
    )
    output_dir = Path(args.output) if args.output else config.output_dir
    if output_dir is None:
        print_error("Error: no output directory given (use --output or SCAFALL_OUTPUT_DIR)")
        sys.exit(2)

    asker = DefaultsAsker() if args.no_input else RichAsker(console)
    scaffolder = Scaffolder.from_config(config, asker=asker)

    try:
        if args.collection_prompt:
            result = asyncio.run(
                scaffolder.scaffold_collection(
                    args.url, args.collection_prompt, output_dir, sub_path=args.sub_path
                )
            )
        else:
            result = asyncio.run(
                scaffolder.scaffold(args.url, output_dir, sub_path=args.sub_path)
            )
    except ScaffoldError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)

    _print_result(result)


def _print_result(result: ScaffoldResult) -> None:
    summary = {
        "Output": str(result.output_dir),
        "Files": str(len(result.files)),
    }
    if result.choice:
        summary["Template"] = result.choice
    for name, value in result.bindings.items():
        summary[name] = value
    print_summary_table(summary, title="Scaffold")
    print_success("Project created successfully!")


if __name__ == "__main__":
    main()
