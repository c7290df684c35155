#!/usr/bin/env python3
"""
partlint CLI - Pre-export checks for MeshPart assets.

Usage:
    partlint lint Prop_Crate.glb
    partlint lint assets/ --profile studio.json --strict
    partlint info Prop_Crate.glb
    partlint rules
    partlint convert 2.8 --from meters --to studs
    partlint profile --output studio.json
    partlint check-level lobby.json
"""

import argparse
import sys
import json
from pathlib import Path

from partlint.units import UNIT_SCALE


def _known_rules():
    from partlint.rules import REGISTRY
    from partlint.level import LEVEL_CHECKS

    return list(REGISTRY) + LEVEL_CHECKS


def _load_profile(args):
    """Profile from --profile, with command-line overrides applied."""
    from partlint.profile import make_profile, load_profile

    if args.profile:
        profile = load_profile(args.profile, known_rules=_known_rules())
    else:
        profile = make_profile()

    if getattr(args, "units", None):
        profile.source_units = args.units
    for rule_id in getattr(args, "disable", None) or []:
        if rule_id not in _known_rules():
            raise ValueError(f"Unknown rule id: {rule_id}")
        profile.disabled_rules.append(rule_id)

    return profile


def _print_reports(reports, as_json):
    if as_json:
        print(json.dumps({
            "passed": all(r.passed for r in reports),
            "reports": [r.to_dict() for r in reports],
        }, indent=2))
        return

    for report in reports:
        print(report.format_text())
    failed = sum(1 for r in reports if not r.passed)
    print(f"\n{len(reports)} MeshPart(s) checked, {failed} failed")


def cmd_lint(args):
    """Lint geometry files and directories."""
    from partlint.linter import lint_paths

    try:
        profile = _load_profile(args)
        reports = lint_paths(args.paths, profile, strict=args.strict, verbose=args.verbose)
        _print_reports(reports, args.json)
        return 0 if all(r.passed for r in reports) else 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_info(args):
    """Show the mesh description of each MeshPart in a file."""
    from partlint.mesh_summary import load_summaries
    from partlint.units import format_studs

    try:
        summaries = load_summaries(args.file, units=args.units)

        if args.json:
            print(json.dumps([s.to_dict() for s in summaries], indent=2))
            return 0

        for s in summaries:
            print(f"{s.name}")
            print(f"  Triangles: {s.triangle_count}  Vertices: {s.vertex_count}  Bodies: {s.body_count}")
            print("  Size: " + " x ".join(format_studs(round(v, 2)) for v in s.extent))
            print(f"  Pivot offset: {format_studs(round(s.origin_offset, 2))}")
            print(f"  Bounding box fill: {s.bbox_fill:.1%}")
            print(f"  Watertight: {s.is_watertight}  UV: {s.has_uv}  Vertex colors: {s.has_vertex_colors}")
            if s.materials:
                print(f"  Materials: {', '.join(s.materials)}")
            for kind, path in sorted(s.textures.items()):
                print(f"  {kind}: {path}")

        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_rules(args):
    """List every rule."""
    from partlint.rules import all_rules

    for r in all_rules():
        print(f"{r.id:32} {r.severity:8} {r.description}")
    return 0


def cmd_convert(args):
    """Convert a length between units."""
    from partlint.units import convert

    try:
        result = convert(args.value, args.from_units, args.to_units)
        print(f"{args.value:g} {args.from_units} = {result:.4g} {args.to_units}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_profile(args):
    """Write the default profile JSON."""
    from partlint.profile import make_profile

    try:
        content = make_profile().to_json()
        if args.output:
            Path(args.output).write_text(content + "\n", encoding="utf-8")
            print(f"Profile written to: {args.output}")
        else:
            print(content)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_check_level(args):
    """Check a level layout against the dimension table."""
    from partlint.level import load_layout, lint_layout

    try:
        profile = _load_profile(args)
        layout = load_layout(args.layout)
        report = lint_layout(layout, profile, strict=args.strict)
        _print_reports([report], args.json)
        return 0 if report.passed else 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="partlint - Pre-export checklist for MeshPart assets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  partlint lint Prop_Crate.glb
  partlint lint assets/ --profile studio.json --strict
  partlint info Prop_Crate.glb
  partlint convert 2.8 --from meters --to studs
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")
    units = sorted(UNIT_SCALE)

    # lint
    lint_parser = subparsers.add_parser(
        "lint",
        help="Lint geometry files or directories",
    )
    lint_parser.add_argument("paths", nargs="+", help="Geometry files, JSON mesh descriptions, or directories")
    lint_parser.add_argument("--profile", "-p", help="Profile JSON file")
    lint_parser.add_argument("--units", choices=units, help="Source units (overrides profile)")
    lint_parser.add_argument("--disable", action="append", metavar="RULE", help="Skip a rule (repeatable)")
    lint_parser.add_argument("--strict", action="store_true", help="Fail on warnings")
    lint_parser.add_argument("--json", action="store_true", help="Print reports as JSON")
    lint_parser.add_argument("--verbose", "-v", action="store_true", help="Print progress")
    lint_parser.set_defaults(func=cmd_lint)

    # info
    info_parser = subparsers.add_parser(
        "info",
        help="Show mesh measurements",
    )
    info_parser.add_argument("file", help="Geometry file or JSON mesh description")
    info_parser.add_argument("--units", choices=units, default="meters", help="Source units (default: meters)")
    info_parser.add_argument("--json", action="store_true", help="Print as JSON")
    info_parser.set_defaults(func=cmd_info)

    # rules
    rules_parser = subparsers.add_parser(
        "rules",
        help="List rules",
    )
    rules_parser.set_defaults(func=cmd_rules)

    # convert
    convert_parser = subparsers.add_parser(
        "convert",
        help="Convert lengths between studs and metric units",
    )
    convert_parser.add_argument("value", type=float, help="Length to convert")
    convert_parser.add_argument("--from", dest="from_units", choices=units, default="studs", help="Input units (default: studs)")
    convert_parser.add_argument("--to", dest="to_units", choices=units, default="meters", help="Output units (default: meters)")
    convert_parser.set_defaults(func=cmd_convert)

    # profile
    profile_parser = subparsers.add_parser(
        "profile",
        help="Print or write the default profile",
    )
    profile_parser.add_argument("--output", "-o", help="Write to file instead of stdout")
    profile_parser.set_defaults(func=cmd_profile)

    # check-level
    level_parser = subparsers.add_parser(
        "check-level",
        help="Check a level layout",
    )
    level_parser.add_argument("layout", help="Level layout JSON file")
    level_parser.add_argument("--profile", "-p", help="Profile JSON file")
    level_parser.add_argument("--strict", action="store_true", help="Fail on warnings")
    level_parser.add_argument("--json", action="store_true", help="Print report as JSON")
    level_parser.set_defaults(func=cmd_check_level)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
