#!/usr/bin/env python3
"""Replay runner for the ingredient composition engine.

Drive the tracker from a recorded frame file, or add ingredients by name,
without the AR application.

Usage:
    python simulate.py data/demo_frames.json
    python simulate.py --debug data/demo_frames.json   # Show full session state after every event
    python simulate.py --add "Espresso,Steamed Milk"     # Add ingredients directly
    python simulate.py --catalog my_recipes.json --add "Espresso,Ice"

Frame file format (JSON list, or {"frames": [...]}):
    {"dt": 0.1, "repeat": 5, "samples": [{"target_id": "coffee_cup", "position": [0, 0, 0], "status": "TRACKED"}]}
    {"action": "reset"}         # also: "start_over", "home", "scan"

Features:
- Runs frames through the composition flow (scan -> gating -> ingredients -> suggestions)
- Prints every outbound event and the final cup state
- Debug mode dumps the session snapshot as JSON after each event
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, List

from rich.console import Console
from rich.table import Table

from src.catalog.catalog import Catalog, CatalogLoadError, load_catalog
from src.engine.matcher import overlap_counts
from src.models.models import (
    CupFound,
    CupLost,
    GatingIngredientAdded,
    IngredientAdded,
    RecipeSuggestions,
)
from src.session.cup_session import CupSession
from src.tracking.events import EventEmitter
from src.tracking.flow import CompositionFlow
from src.tracking.tracker import ManualSensorFeed, ProximityIngredientTracker
from src.utils.config import config
from src.utils.logger import logger

console = Console()

# Matches a 60 fps host
DEFAULT_FRAME_DT = 1.0 / 60.0


def build_engine(catalog: Catalog, debug: bool = False):
    """Wire session, tracker, flow and a console printer for every event.

    Returns:
        (session, feed, tracker, flow) tuple.
    """
    session = CupSession(catalog)
    feed = ManualSensorFeed()
    emitter = EventEmitter()
    tracker = ProximityIngredientTracker(catalog, session, sensor=feed, emitter=emitter)

    def show(event) -> None:
        payload = event.model_dump(mode="json")
        if isinstance(event, RecipeSuggestions):
            payload = {"recipes": [recipe.name for recipe in event.recipes]}
        console.print(f"[bold cyan]{type(event).__name__}[/bold cyan] {payload if payload else ''}")
        if debug:
            console.print_json(data=session.snapshot())

    for event_type in (CupFound, CupLost, IngredientAdded, GatingIngredientAdded, RecipeSuggestions):
        emitter.subscribe(event_type, show)

    # Flow subscribes after the printer so events print before stage changes
    flow = CompositionFlow(tracker)
    return session, feed, tracker, flow


def load_frames(path: str) -> List[Dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    frames = data.get("frames", []) if isinstance(data, dict) else data
    if not isinstance(frames, list):
        raise ValueError(f"Frame file must hold a list of frames: {path}")
    return frames


def replay(frames: List[Dict[str, Any]], catalog: Catalog, debug: bool = False) -> CupSession:
    """Feed frames through the engine and return the final session."""
    session, feed, tracker, flow = build_engine(catalog, debug=debug)
    flow.begin_scan()

    for index, frame in enumerate(frames):
        action = frame.get("action")
        if action == "reset":
            flow.go_home()
            flow.begin_scan()
        elif action == "start_over":
            flow.start_over()
        elif action == "home":
            flow.go_home()
        elif action == "scan":
            flow.begin_scan()
        elif action:
            logger.warning(f"Frame {index}: unknown action {action!r}, skipped")

        if "samples" not in frame:
            continue
        feed.set_samples(frame["samples"])
        dt = float(frame.get("dt", DEFAULT_FRAME_DT))
        for _ in range(int(frame.get("repeat", 1))):
            tracker.step(dt)

    # Let a pour that is still animating finish
    session.animator.settle()
    logger.debug(f"Replay finished in stage {flow.stage.value}")
    return session


def add_by_name(names: List[str], catalog: Catalog, debug: bool = False) -> CupSession:
    """Add ingredients directly, settling the fill animation between adds."""
    session, _, tracker, _ = build_engine(catalog, debug=debug)
    for name in names:
        if not tracker.add_ingredient(name):
            console.print(f"[yellow]Skipped {name} (already in the cup)[/yellow]")
        session.animator.settle()
    return session


def print_summary(session: CupSession, catalog: Catalog) -> None:
    table = Table(title="Cup")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Ingredients", ", ".join(session.added_ingredients) or "-")
    table.add_row("Recipe", session.current_match.label)
    table.add_row("Fill", f"{session.fill_level:.2f}")
    table.add_row("Top color", f"RGB{session.current_color.to_rgb255()} alpha={session.current_color.a:g}")
    table.add_row("Side color", f"RGB{session.side_color.to_rgb255()}")
    console.print(table)

    overlaps = [(recipe.name, count) for recipe, count in overlap_counts(session.added_ingredients, catalog) if count]
    if overlaps:
        console.print("[dim]Shared ingredients per recipe: " + ", ".join(f"{n}={c}" for n, c in overlaps) + "[/dim]")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python simulate.py [--debug] [--catalog PATH] (FRAMES.json | --add \"A,B,C\")")
        print("")
        print("Examples:")
        print("  python simulate.py data/demo_frames.json")
        print("  python simulate.py --debug data/demo_frames.json")
        print("  python simulate.py --add \"Espresso,Steamed Milk\"")
        sys.exit(1)

    debug_mode = False
    catalog_path = config.CATALOG_PATH
    add_names = None
    argv_start = 1

    while argv_start < len(sys.argv) and sys.argv[argv_start].startswith("--"):
        if sys.argv[argv_start] == "--debug":
            debug_mode = True
            argv_start += 1
        elif sys.argv[argv_start] in ("--catalog", "--add"):
            flag = sys.argv[argv_start]
            argv_start += 1
            if argv_start >= len(sys.argv):
                print(f"Error: {flag} flag requires a value")
                sys.exit(1)
            if flag == "--catalog":
                catalog_path = sys.argv[argv_start]
            else:
                add_names = [name.strip() for name in sys.argv[argv_start].split(",") if name.strip()]
            argv_start += 1
        else:
            print(f"Unknown flag: {sys.argv[argv_start]}")
            sys.exit(1)

    try:
        catalog = load_catalog(catalog_path)
    except CatalogLoadError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)

    try:
        if add_names is not None:
            final = add_by_name(add_names, catalog, debug=debug_mode)
        else:
            if argv_start >= len(sys.argv):
                print("Error: No frame file provided")
                sys.exit(1)
            frames_path = sys.argv[argv_start]
            if not Path(frames_path).exists():
                console.print(f"[red]✗ Error: Frame file not found: {frames_path}[/red]")
                sys.exit(1)
            final = replay(load_frames(frames_path), catalog, debug=debug_mode)
    except KeyboardInterrupt:
        logger.info("\nReplay interrupted by user.")
        sys.exit(0)
    except (OSError, ValueError) as e:
        logger.error(f"Replay failed: {e}", exc_info=True)
        sys.exit(1)

    console.print()
    print_summary(final, catalog)
