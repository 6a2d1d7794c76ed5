"""Command-line entry point for Areatrace"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from controllers.editor import EditorContext
from disk.background import load_background
from disk.formats import PROJECT_SUFFIX, is_project
from disk.storage import IO
from models.version import get_app_version

MIN_PYTHON: tuple[int, int] = (3, 13)

log = logging.getLogger("areatrace")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="areatrace", description="Export traced regions as dashboard-ready SVG")
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_app_version()}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    parser.add_argument("--settings", type=Path, default=None, help="Settings file (default: ~/areatrace.settings)")
    sub = parser.add_subparsers(dest="command", required=True)

    exp = sub.add_parser("export", help="Render a project to .svg, .png or .webp")
    exp.add_argument("project", type=Path)
    exp.add_argument("-o", "--output", type=Path, default=None)
    exp.add_argument("--no-background", action="store_true", help="Leave the reference image out")

    info = sub.add_parser("info", help="Summarise the regions of a project")
    info.add_argument("project", type=Path)

    imp = sub.add_parser("import-background", help="Start an empty project sized to a reference image")
    imp.add_argument("image", type=Path)
    imp.add_argument("-o", "--output", type=Path, required=True)
    return parser


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _open(editor: EditorContext, path: Path) -> None:
    if not is_project(path):
        raise ValueError(f"Not a project file (expected *{PROJECT_SUFFIX}): {path}")
    editor.load_project(path)


def cmd_export(editor: EditorContext, args: argparse.Namespace) -> int:
    _open(editor, args.project)
    out = editor.export(args.output, include_background=not args.no_background)
    print(out)
    return 0


def cmd_info(editor: EditorContext, args: argparse.Namespace) -> int:
    _open(editor, args.project)
    w, h = editor.size
    print(f"{args.project}: {w}x{h}, {len(editor.model)} regions")
    for region in editor.model:
        kind = "path" if region.is_curved else "polygon"
        label = f"  [{region.label}]" if region.label else ""
        print(f"  {region.id}: {kind}, {len(region.vertices)} vertices, {region.fill_color}@{region.fill_opacity:g}{label}")
    return 0


def cmd_import_background(editor: EditorContext, args: argparse.Namespace) -> int:
    editor.set_background(load_background(args.image))
    print(editor.save_project(args.output))
    return 0


COMMANDS = {"export": cmd_export, "info": cmd_info, "import-background": cmd_import_background}


def main(argv: list[str] | None = None) -> int:
    """Run Areatrace"""
    if sys.version_info < MIN_PYTHON:
        raise RuntimeError("Areatrace requires Python 3.13+")
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose, args.quiet)
    editor = EditorContext(IO.load_defaults(args.settings))
    try:
        return COMMANDS[args.command](editor, args)
    except (ValueError, OSError) as xcp:
        log.error("%s", xcp)
        return 1


if __name__ == "__main__":
    sys.exit(main())
