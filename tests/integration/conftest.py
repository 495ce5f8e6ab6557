"""Pytest configuration and fixtures for integration tests.

Integration tests run the full engine (bundled catalog, default marker map,
session, tracker and flow) the way the replay CLI does.
"""

from pathlib import Path

import pytest

from src.session.cup_session import CupSession
from src.tracking.flow import CompositionFlow
from src.tracking.tracker import ManualSensorFeed, ProximityIngredientTracker

DATA_DIR = Path(__file__).parent.parent.parent / "data"


@pytest.fixture
def demo_frames_path():
    return DATA_DIR / "demo_frames.json"


@pytest.fixture
def engine(bundled_catalog):
    """Session, feed, tracker and flow over the bundled catalog with explicit tuning."""
    session = CupSession(
        bundled_catalog, gating_ingredient="Espresso", cooldown_duration=1.5, fill_speed=1.0, fill_step=0.25
    )
    feed = ManualSensorFeed()
    tracker = ProximityIngredientTracker(
        bundled_catalog,
        session,
        sensor=feed,
        add_threshold=0.08,
        overlap_threshold=2,
        cup_target_id="coffee_cup",
        reserved_target_ids=["ARCamera", "DeviceObserver"],
    )
    flow = CompositionFlow(tracker)
    return session, feed, tracker, flow
