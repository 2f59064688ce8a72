#!/usr/bin/env python3
"""
cli.py — command line entry point.

    gridpainter export  snapshot.json --out DIR [--scope all|current] [--zip NAME]
    gridpainter stats   snapshot.json
    gridpainter plot    snapshot.json [--annotate] [--save PNGFILE]
    gridpainter render  snapshot.json --floor KEY --out PNGFILE [--width W --height H]
    gridpainter edit    snapshot.json [--export-dir DIR]
"""
import argparse
import pathlib
import sys

from . import connectivity, export, snapshot
from .errors import SnapshotError
from .logging_config import get_logger, setup_logging
from .state import AppState

log = get_logger(__name__)


def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="gridpainter",
                                description="Semantic grid annotation for floor plans")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    e = sub.add_parser("export", help="write navigation/POI/connection CSVs")
    e.add_argument("snapshot", type=pathlib.Path)
    e.add_argument("--out", type=pathlib.Path, default=pathlib.Path("export"))
    e.add_argument("--scope", choices=export.SCOPES, default="all",
                   help="cells of the current floor only, or of every floor")
    e.add_argument("--zip", metavar="NAME", help="also bundle the CSVs into NAME")
    e.add_argument("--cells-json", action="store_true",
                   help="also write cells.json for the current floor")

    s = sub.add_parser("stats", help="per-floor counts and walkway components")
    s.add_argument("snapshot", type=pathlib.Path)

    pl = sub.add_parser("plot", help="matplotlib preview of every floor")
    pl.add_argument("snapshot", type=pathlib.Path)
    pl.add_argument("--annotate", action="store_true", help="draw cell labels")
    pl.add_argument("--save", metavar="PNGFILE",
                    help="save to PNG instead of showing an interactive window")

    r = sub.add_parser("render", help="OpenCV overlay of one floor to PNG")
    r.add_argument("snapshot", type=pathlib.Path)
    r.add_argument("--floor", help="floor key (number_name); current floor if omitted")
    r.add_argument("--out", type=pathlib.Path, required=True)
    r.add_argument("--width", type=int, default=800)
    r.add_argument("--height", type=int, default=600)

    ed = sub.add_parser("edit", help="interactive editor")
    ed.add_argument("snapshot", type=pathlib.Path, help="snapshot JSON (load/save)")
    ed.add_argument("--export-dir", type=pathlib.Path, default=pathlib.Path("export"))
    return p.parse_args(argv)


def load_state(path: pathlib.Path) -> AppState:
    state = AppState()
    snapshot.load_snapshot(state, path.read_text(encoding="utf-8"))
    return state


def cmd_export(args):
    state = load_state(args.snapshot)
    written = export.write_exports(state.floors, args.out, scope=args.scope, zip_name=args.zip)
    if args.cells_json:
        path = args.out / "cells.json"
        path.write_text(export.cells_json(state.floors, state.coords), encoding="utf-8")
        written["cells"] = path
    for path in written.values():
        print(f"Wrote {path}")
    for c in export.unlabeled_connections(state.floors):
        print(f"Warning: unlabelled {c['type']} cell ({c['row']}, {c['col']}) "
              f"on floor {c['floor']} is not in vertical_connections.csv")
    return 0


def cmd_stats(args):
    state = load_state(args.snapshot)
    floors = state.floors
    for floor in floors.floors_sorted():
        floors.switch_floor(floor.key)
        st = floors.stats()
        comps = connectivity.connected_components(floors.cells)
        corners = connectivity.sharp_corners(floors.cells)
        print(f"Floor {floor.key}: {st['painted']} painted, {st['labeled']} labelled, "
              f"{st['walkways']} walkway, {st['pois']} POI, {st['connections']} connection")
        print(f"  walkway components: {[len(c) for c in comps]}  sharp corners: {len(corners)}")
    return 0


def cmd_plot(args):
    from . import visualize
    state = load_state(args.snapshot)
    visualize.plot_floors(state.floors, annotate=args.annotate, save=args.save)
    return 0


def cmd_render(args):
    from . import render
    state = load_state(args.snapshot)
    if args.floor and not state.floors.switch_floor(args.floor):
        print(f"No floor {args.floor}")
        return 1
    bg = None
    floor = state.floors.current
    if floor is not None and floor.image:
        bg = render.load_background(floor.image)
    frame = render.render_frame(state, (args.width, args.height), bg)
    if not render.save_frame(args.out, frame):
        return 1
    print(f"Saved to {args.out}")
    return 0


def cmd_edit(args):
    from .editor import GridEditor
    GridEditor(snapshot_path=args.snapshot, export_dir=args.export_dir).run()
    return 0


COMMANDS = {
    "export": cmd_export,
    "stats": cmd_stats,
    "plot": cmd_plot,
    "render": cmd_render,
    "edit": cmd_edit,
}


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.verbose)
    log.debug("Running %s", args.command)
    try:
        return COMMANDS[args.command](args)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        return 1
    except SnapshotError as e:
        print(f"Error reading snapshot: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
