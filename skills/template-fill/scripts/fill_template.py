#!/usr/bin/env python3
"""
ABOUTME: Command-line front end for DOCX template segment extraction and filling
ABOUTME: Works on an unpacked word/document.xml; packaging stays with the caller
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from docx_structure import (
    TemplateBlueprint,
    ProfileCounts,
    apply_structured_fills,
    duplicate_blocks_in_xml,
    extract_structured_segments,
)
from docx_structure.xml_utils import check_well_formed


def print_error(title: str, details: str, solution: str):
    """
    Print a friendly, formatted error message.

    Args:
        title: Error title
        details: Detailed error information
        solution: Suggested solution steps
    """
    print("\n" + "=" * 80, file=sys.stderr)
    print(f"ERROR: {title}", file=sys.stderr)
    print("=" * 80, file=sys.stderr)
    print(f"\n{details}", file=sys.stderr)
    print("\nSOLUTION:", file=sys.stderr)
    print(solution, file=sys.stderr)
    print("\n" + "=" * 80 + "\n", file=sys.stderr)


def read_text(path: str) -> str:
    return Path(path).read_text(encoding='utf-8')


def read_json(path: str):
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def write_output(xml: str, output: str, verify: bool) -> bool:
    """Write xml to output, optionally refusing output that does not parse"""
    if verify:
        error = check_well_formed(xml)
        if error:
            print_error(
                "Output is not well-formed XML",
                error,
                "Check the input document and fill values; nothing was written.",
            )
            return False
    Path(output).write_text(xml, encoding='utf-8')
    print(f"Output written to: {output}")
    return True


def cmd_extract(args) -> int:
    result = extract_structured_segments(read_text(args.input), verbose=args.verbose)

    if args.map_only:
        print(result.template_map)
        return 0

    payload = json.dumps(result.to_dict(include_xml=args.include_xml), ensure_ascii=False, indent=2)
    if args.output:
        Path(args.output).write_text(payload, encoding='utf-8')
        print(f"Segments: {len(result.segments)}, tables: {len(result.tables)}, "
              f"merge groups: {len(result.merge_groups)}")
        print(f"Output written to: {args.output}")
    else:
        print(payload)
    return 0


def cmd_fill(args) -> int:
    fills = read_json(args.fills)
    if not isinstance(fills, dict):
        raise ValueError("Fills file must contain a JSON object of segment ID -> text")

    result = extract_structured_segments(read_text(args.input), verbose=args.verbose)
    unknown = sorted(sid for sid in fills if result.segment_by_id(sid) is None)
    if unknown:
        print(f"[Warning] {len(unknown)} fill ID(s) match no segment: {', '.join(unknown)}")

    xml = apply_structured_fills(
        result.processed_xml, fills, result.segments, result.merge_groups, verbose=args.verbose
    )
    return 0 if write_output(xml, args.output, args.verify) else 1


def cmd_duplicate(args) -> int:
    blueprint = TemplateBlueprint.from_dict(read_json(args.blueprint))
    counts = ProfileCounts(
        work_experience=args.work_experience,
        education=args.education,
        languages=args.languages,
        skills=args.skills,
    )

    result = extract_structured_segments(read_text(args.input), verbose=args.verbose)
    duplication = duplicate_blocks_in_xml(
        result.processed_xml, blueprint, result.segments, result.tables, counts, verbose=args.verbose
    )

    for line in duplication.details:
        print(f"  - {line}")
    if not duplication.duplicated:
        print("No blocks duplicated")
    return 0 if write_output(duplication.xml, args.output, args.verify) else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract, fill and duplicate segments of a DOCX document.xml"
    )
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Verbose output')
    subparsers = parser.add_subparsers(dest='command', required=True)

    extract = subparsers.add_parser('extract', help='Extract segments and the template map')
    extract.add_argument('input', help='Path to document.xml')
    extract.add_argument('-o', '--output', help='Write extraction JSON to this file')
    extract.add_argument('--map-only', action='store_true',
                         help='Print only the template map')
    extract.add_argument('--include-xml', action='store_true',
                         help='Include the processed XML in the JSON output')
    extract.set_defaults(func=cmd_extract)

    fill = subparsers.add_parser('fill', help='Apply a segment ID -> text map')
    fill.add_argument('input', help='Path to document.xml')
    fill.add_argument('fills', help='JSON file with segment ID -> text')
    fill.add_argument('-o', '--output', required=True, help='Output document.xml path')
    fill.add_argument('--verify', action='store_true',
                      help='Refuse to write output that is not well-formed XML')
    fill.set_defaults(func=cmd_fill)

    duplicate = subparsers.add_parser('duplicate', help='Duplicate repeating blocks')
    duplicate.add_argument('input', help='Path to document.xml')
    duplicate.add_argument('blueprint', help='Blueprint JSON file')
    duplicate.add_argument('-o', '--output', required=True, help='Output document.xml path')
    duplicate.add_argument('--work-experience', type=int, default=0,
                           help='Target number of work experience entries (default: 0)')
    duplicate.add_argument('--education', type=int, default=0,
                           help='Target number of education entries (default: 0)')
    duplicate.add_argument('--languages', type=int, default=0,
                           help='Target number of language entries (default: 0)')
    duplicate.add_argument('--skills', type=int, default=0,
                           help='Target number of skill entries (default: 0)')
    duplicate.add_argument('--verify', action='store_true',
                           help='Refuse to write output that is not well-formed XML')
    duplicate.set_defaults(func=cmd_duplicate)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        return args.func(args)
    except json.JSONDecodeError as e:
        print_error("Invalid JSON input", str(e), "Check the JSON file passed on the command line.")
        return 1
    except OSError as e:
        print_error("Cannot read or write file", str(e),
                    "Check that the input paths exist and the output directory is writable.")
        return 1
    except (TypeError, ValueError) as e:
        print_error("Invalid input data", str(e), "Check the fills or blueprint JSON against the expected shape.")
        return 1


if __name__ == '__main__':
    sys.exit(main())
