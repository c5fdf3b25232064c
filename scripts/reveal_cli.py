#!/usr/bin/env python3
"""
Graph Reveal CLI

Usage modes:
- Default run: load a graph file, play the reveal episode, print a snapshot
  summary or write JSON
- Focus: select an entity (and optionally show everything) after the reveal
- Export: write GraphML for external tools, or render the final frame to PNG
- Utility: list sample graphs, show version, dry-run load only
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from glob import glob
from pathlib import Path
from typing import Any, Dict, List

import yaml

from reveal_core import DataSourceError, GraphView, StatusIndicator, Viewport  # type: ignore
from reveal_core.config import SimulationConfig  # type: ignore


class _LogStatus(StatusIndicator):
    """Loading indicator that writes to the log instead of a screen."""

    def update(self, message: str) -> None:
        logging.info("%s", message)

    def error(self, message: str) -> None:
        logging.error("%s", message)


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Play the staged reveal of a graph file and dump a snapshot",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # Utilities / meta
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v, -vv)")
    p.add_argument("--list-samples", action="store_true", help="List bundled sample graph files and exit")

    # Primary input
    p.add_argument("data", nargs="?", help="Path to a JSON or YAML graph file (e.g., scripts/sample_graph.yaml)")

    # Execution
    p.add_argument("--frames", type=int, default=0, help="Frames to run; 0 runs until the reveal completes")
    p.add_argument("--max-frames", type=int, default=5000, help="Upper bound when running until complete")
    p.add_argument("--dry-run", action="store_true", help="Load only; do not run the simulation")
    p.add_argument("--out", type=str, default="", help="Optional output JSON file path")
    p.add_argument("--full", action="store_true", help="Include per-entity state in the output")

    # View options
    p.add_argument("--width", type=float, default=1280, help="Surface width")
    p.add_argument("--height", type=float, default=800, help="Surface height")
    p.add_argument("--seed", type=int, default=None, help="Seed for initial placement and reveal order")
    p.add_argument("--config", type=str, default="", help="YAML file of simulation config overrides")
    p.add_argument("--deep-link", type=str, default=None, help="Entity id the view opens on")
    p.add_argument("--select", type=str, default=None, help="Entity id to select after the reveal")
    p.add_argument("--show-all", action="store_true", help="Switch to show-all mode after the reveal")
    p.add_argument("--settle-frames", type=int, default=120, help="Frames to run after --select/--show-all")

    # Export
    p.add_argument("--export-graphml", type=str, default="", help="Export the graph to GraphML at given path")
    p.add_argument("--png", type=str, default="", help="Render the final frame to a PNG file")

    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> SimulationConfig:
    if not args.config:
        return SimulationConfig()
    with open(args.config, "r", encoding="utf-8") as f:
        overrides = yaml.safe_load(f) or {}
    return SimulationConfig.from_dict(overrides)


def setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def find_sample_graphs() -> List[str]:
    here = Path(__file__).resolve()
    repo_root = here.parent.parent
    candidates: List[str] = []
    for base in [repo_root, here.parent]:
        for pattern in ("*.yaml", "*.json"):
            candidates.extend(sorted(glob(str(base / pattern))))
    return list(dict.fromkeys(candidates))


def summarize(view: GraphView, full: bool = False) -> Dict[str, Any]:
    snap = view.snapshot()
    visible = [e.id for e in view.graph.visible()]
    summary: Dict[str, Any] = {
        "t": snap["t"],
        "frames": snap["frame"],
        "stage": snap["stage"],
        "selected": snap["selected"],
        "show_all": snap["show_all"],
        "visible": visible,
        "sections": sorted(view.sections),
    }
    if full:
        summary["entities"] = snap["entities"]
    return summary


def main(argv: List[str] | None = None) -> int:
    from reveal_core import __version__ as reveal_version  # type: ignore

    args = parse_args(argv)
    setup_logging(args.verbose)

    if args.version:
        print(reveal_version)
        return 0

    if args.list_samples:
        print(json.dumps(find_sample_graphs(), indent=2))
        return 0

    if not args.data:
        print("error: missing graph data path (try --list-samples)", file=sys.stderr)
        return 2

    cfg = build_config(args)
    viewport = Viewport(args.width, args.height, config=cfg)

    logging.info("Loading graph from %s", args.data)
    try:
        view = GraphView.from_source(
            args.data,
            viewport=viewport,
            config=cfg,
            status=_LogStatus(),
            seed=args.seed,
            deep_link=args.deep_link,
        )
    except DataSourceError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.export_graphml:
        logging.info("Exporting GraphML to %s", args.export_graphml)
        view.graph.export_graphml(args.export_graphml)

    if args.dry_run:
        minimal = {"entities": len(view.graph), "links": len(view.graph.links), "anchor": view.graph.anchor_id}
        _emit(minimal, args.out)
        return 0

    view.start()
    if args.frames > 0:
        view.step(args.frames)
    elif not view.run_until_complete(args.max_frames):
        logging.warning("reveal did not complete within %d frames", args.max_frames)

    if args.select or args.show_all:
        if args.select and view.select_focus(args.select) is None:
            print(f"error: unknown entity id {args.select!r}", file=sys.stderr)
            return 1
        if args.show_all:
            view.toggle_show_all()
        view.step(args.settle_frames)

    if args.png:
        from viz.surface import MatplotlibSurface  # type: ignore

        surface = MatplotlibSurface()
        view.render(surface)
        surface.save(args.png)
        surface.close()
        logging.info("Wrote %s", args.png)

    _emit(summarize(view, full=args.full), args.out)
    return 0


def _emit(payload: Dict[str, Any], out: str) -> None:
    if out:
        with open(out, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
    else:
        print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    raise SystemExit(main())
