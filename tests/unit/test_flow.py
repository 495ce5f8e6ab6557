"""Unit tests for the composition flow stage machine."""

import pytest

from src.models.models import TrackingStatus
from src.session.cup_session import CupSession
from src.tracking.flow import CompositionFlow, FlowStage
from src.tracking.tracker import ManualSensorFeed, ProximityIngredientTracker

CUP = "coffee_cup"
NEAR = (0.05, 0.0, 0.0)


@pytest.fixture
def feed():
    return ManualSensorFeed()


@pytest.fixture
def tracker(cafe_catalog, markers, feed):
    session = CupSession(cafe_catalog, gating_ingredient="Espresso", cooldown_duration=1.5, fill_speed=1.0, fill_step=0.25)
    return ProximityIngredientTracker(
        cafe_catalog,
        session,
        sensor=feed,
        marker_map=markers,
        add_threshold=0.08,
        overlap_threshold=2,
        cup_target_id=CUP,
        reserved_target_ids=[],
    )


@pytest.fixture
def flow(tracker):
    return CompositionFlow(tracker)


def run(tracker, feed, *samples, frames=1):
    feed.set_samples(samples)
    for _ in range(frames):
        tracker.step(0.25)


def flags(tracker):
    return (tracker.track_cup, tracker.track_gating, tracker.track_ingredients)


class TestStages:
    @pytest.mark.parametrize(
        "stage,expected",
        [
            (FlowStage.HOME, (False, False, False)),
            (FlowStage.SCAN_CUP, (True, False, False)),
            (FlowStage.ADD_GATING, (True, True, False)),
            (FlowStage.PICK_INGREDIENT, (True, False, True)),
            (FlowStage.SUGGESTIONS, (True, False, True)),
        ],
    )
    def test_stage_tracking_flags(self, flow, tracker, stage, expected):
        flow.enter(stage)

        assert flow.stage == stage
        assert flags(tracker) == expected

    def test_starts_at_home_with_tracking_off(self, flow, tracker):
        assert flow.stage == FlowStage.HOME
        assert flags(tracker) == (False, False, False)


class TestTransitions:
    """Test event-driven stage changes over a full drink."""

    def test_full_drink(self, flow, tracker, feed, make_sample):
        cup = make_sample(CUP)
        flow.begin_scan()
        assert flow.stage == FlowStage.SCAN_CUP

        run(tracker, feed, cup)
        assert flow.stage == FlowStage.ADD_GATING

        run(tracker, feed, cup, make_sample("milk", NEAR), frames=2)
        assert flow.stage == FlowStage.PICK_INGREDIENT
        assert tracker.get_added_ingredients() == ["Espresso"]

        run(tracker, feed, cup, make_sample("choco_syrup", NEAR), frames=3)
        assert flow.stage == FlowStage.SUGGESTIONS
        assert [recipe.name for recipe in flow.suggestions] == ["Mocha", "Mocha Latte"]
        assert tracker.session.current_match.label == "Mocha"

    def test_home_ignores_cup(self, flow, tracker, feed, make_sample):
        run(tracker, feed, make_sample(CUP), make_sample("espresso", NEAR), frames=3)

        assert flow.stage == FlowStage.HOME
        assert tracker.get_added_ingredients() == []

    def test_scan_cup_ignores_ingredients_until_cup_seen(self, flow, tracker, feed, make_sample):
        flow.begin_scan()
        run(tracker, feed, make_sample("espresso", NEAR), frames=3)

        assert flow.stage == FlowStage.SCAN_CUP
        assert tracker.get_added_ingredients() == []

    def test_cup_lost_while_adding_gating_returns_to_scan(self, flow, tracker, feed, make_sample):
        flow.begin_scan()
        run(tracker, feed, make_sample(CUP))
        run(tracker, feed, make_sample(CUP, status=TrackingStatus.NOT_TRACKED))

        assert flow.stage == FlowStage.SCAN_CUP

    def test_cup_lost_after_gating_keeps_stage(self, flow, tracker, feed, make_sample):
        flow.begin_scan()
        run(tracker, feed, make_sample(CUP), make_sample("espresso", NEAR))
        run(tracker, feed)

        assert flow.stage == FlowStage.PICK_INGREDIENT

    def test_begin_scan_with_cup_already_present(self, flow, tracker, feed, make_sample):
        flow.begin_scan()
        run(tracker, feed, make_sample(CUP))
        assert flow.stage == FlowStage.ADD_GATING

        flow.begin_scan()

        assert flow.stage == FlowStage.ADD_GATING

    def test_scan_after_home_waits_for_cup(self, flow, tracker, feed, make_sample):
        """Cup presence seen before going home is not trusted on the next scan."""
        flow.begin_scan()
        run(tracker, feed, make_sample(CUP))
        flow.go_home()
        assert tracker.cup_present is False

        flow.begin_scan()
        assert flow.stage == FlowStage.SCAN_CUP

        run(tracker, feed)
        assert flow.stage == FlowStage.SCAN_CUP

        run(tracker, feed, make_sample(CUP))
        assert flow.stage == FlowStage.ADD_GATING

    def test_go_home_empties_cup(self, flow, tracker, feed, make_sample):
        flow.begin_scan()
        run(tracker, feed, make_sample(CUP), make_sample("espresso", NEAR), frames=2)
        run(tracker, feed, make_sample(CUP), make_sample("milk", NEAR), frames=1)

        flow.go_home()

        assert flow.stage == FlowStage.HOME
        assert flow.suggestions == []
        assert tracker.get_added_ingredients() == []
        assert tracker.session.cooldown_remaining == 1.5

    def test_start_over_keeps_gating_ingredient(self, flow, tracker, feed, make_sample):
        flow.begin_scan()
        run(tracker, feed, make_sample(CUP), make_sample("espresso", NEAR), frames=2)
        run(tracker, feed, make_sample(CUP), make_sample("milk", NEAR), frames=2)
        assert flow.stage == FlowStage.SUGGESTIONS

        flow.start_over()

        assert flow.stage == FlowStage.PICK_INGREDIENT
        assert flow.suggestions == []
        assert tracker.get_added_ingredients() == ["Espresso"]
        assert flags(tracker) == (True, False, True)
