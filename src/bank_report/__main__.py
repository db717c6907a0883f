from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from .runner import PIPELINE_ORDER, PipelineRunner


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render the bank telemarketing model report")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to report YAML (default: bank_report/config/report.yaml)",
    )
    parser.add_argument(
        "--stages",
        type=str,
        nargs="*",
        default=None,
        help="Specific stages to run (default: full report order)",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List available stages and exit",
    )
    parser.add_argument(
        "--workdir",
        type=Path,
        default=None,
        help="Directory that relative input/output paths resolve against (default: current directory)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Override the HTML output path",
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Continue running remaining stages even if a stage fails",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    runner = PipelineRunner.from_file(args.config, workdir=args.workdir)

    if args.list:
        print("Available stages:")
        for name in runner.available_stages():
            prefix = " *" if name in PIPELINE_ORDER else "  "
            print(f"{prefix} {name}")
        return 0

    overrides = {"render": {"output": args.output}} if args.output else None
    results = runner.run(
        stages=args.stages,
        overrides=overrides,
        stop_on_failure=not args.keep_going,
    )

    failed = False
    print("=" * 60)
    for result in results:
        status = result.status.upper()
        print(f"{status:>8}  {result.name}")
        if result.details:
            print(f"    {result.details}")
        if result.outputs:
            for key, value in result.outputs.items():
                print(f"    - {key}: {value}")
        failed = failed or result.status == "failed"

    print("=" * 60)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
