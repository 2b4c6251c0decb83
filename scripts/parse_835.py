#!/usr/bin/env python3
"""Parse an 835 remittance file and print its payment posting report.

Usage:
    python scripts/parse_835.py path/to/remit.835 [--json]

Prints diagnostics followed by one text report per transaction set, or the
parsed remittance and summaries as JSON with --json.

Exit status:
- 0: Parsed without fatal diagnostics
- 1: File missing, unreadable, or the 835 failed validation
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from edi_backend.remittance import format_payment_report, summarize_remittance  # noqa: E402
from edi_backend.x12 import parse_835  # noqa: E402


def main():
    """Main entry point."""
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    as_json = "--json" in sys.argv[1:]
    logging.basicConfig(
        level=logging.DEBUG if "--verbose" in sys.argv[1:] else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args:
        print("Usage: parse_835.py <file.835> [--json] [--verbose]")
        return 1

    source_path = Path(args[0])
    if not source_path.exists():
        print(f"Error: File not found: {source_path}")
        return 1

    try:
        content = source_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: Could not read {source_path}: {e}")
        return 1

    result = parse_835(content)
    summaries = summarize_remittance(result)

    if as_json:
        output = result.to_dict()
        output["summaries"] = [s.to_dict() for s in summaries]
        print(json.dumps(output, indent=2))
    else:
        for diagnostic in result.diagnostics:
            location = (
                f" (position {diagnostic.position})"
                if diagnostic.position is not None
                else ""
            )
            print(f"{diagnostic.severity.value.upper()}: {diagnostic.message}{location}")
        for summary in summaries:
            print(format_payment_report(summary))
            print()

    return 0 if result.is_valid else 1


if __name__ == "__main__":
    exit(main())
