from __future__ import annotations

import argparse
import json
import logging
import sys


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buildrules",
        description="Resolve game target and module build declarations into compile units.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log resolution details.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("about", help="Show version and supported policy versions.")

    resolve = sub.add_parser(
        "resolve",
        help="Resolve a target declared under a source directory.",
    )
    resolve.add_argument("source_dir", help="Folder containing *.Target.py and *.Build.py files.")
    resolve.add_argument(
        "--manifest",
        action="append",
        default=[],
        help="JSON manifest of external (engine) modules. May be repeated.",
    )
    resolve.add_argument("--target", default=None, help="Target name (required if several exist).")
    resolve.add_argument(
        "--output",
        default=None,
        help="Write resolved_build.json into this folder instead of printing.",
    )
    resolve.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format when printing (default: text).",
    )

    dump = sub.add_parser(
        "dump-manifest",
        help="Print the declarations under a source directory as a JSON manifest.",
    )
    dump.add_argument("source_dir", help="Folder containing *.Target.py and *.Build.py files.")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    from buildrules.errors import BuildRulesError

    try:
        return _run(args)
    except (BuildRulesError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


def _run(args: argparse.Namespace) -> int:
    if args.cmd == "about":
        from buildrules import about

        about()
        return 0

    if args.cmd == "resolve":
        from buildrules.exporter import (
            build_to_dict,
            export_build,
            format_build,
            load_project,
            resolve_project,
        )

        if args.output:
            build = export_build(
                args.source_dir,
                args.output,
                manifests=args.manifest,
                target_name=args.target,
            )
            print(f"Resolved {len(build.units)} modules for target {build.target_name}: {args.output}")
            return 0

        project = load_project(args.source_dir, args.manifest)
        build = resolve_project(project, args.target)
        if args.format == "json":
            print(json.dumps(build_to_dict(build), indent=2, sort_keys=True))
        else:
            print(format_build(build))
        return 0

    if args.cmd == "dump-manifest":
        from buildrules.exporter import load_project, project_to_manifest

        project = load_project(args.source_dir)
        manifest = project_to_manifest(project.targets, project.catalog)
        print(json.dumps(manifest, indent=2))
        return 0

    raise SystemExit(f"Unknown command: {args.cmd}")


if __name__ == "__main__":
    raise SystemExit(main())
