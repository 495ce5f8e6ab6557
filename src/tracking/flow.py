"""Composition flow: which tracking is active at each stage of making a drink.

Stages and the tracking they enable:

    HOME             nothing
    SCAN_CUP         cup
    ADD_GATING       cup + gating ingredient
    PICK_INGREDIENT  cup + ingredients
    SUGGESTIONS      cup + ingredients

Tracker events move the flow forward:
- CupFound while scanning          -> ADD_GATING
- CupLost while adding the gating  -> SCAN_CUP
- GatingIngredientAdded            -> PICK_INGREDIENT
- RecipeSuggestions                -> SUGGESTIONS

The host reads `stage` and `suggestions` to decide what to show.
"""

from enum import Enum
from typing import List

from src.models.models import CupFound, CupLost, GatingIngredientAdded, Recipe, RecipeSuggestions
from src.tracking.tracker import ProximityIngredientTracker
from src.utils.logger import logger


class FlowStage(str, Enum):
    HOME = "home"
    SCAN_CUP = "scan_cup"
    ADD_GATING = "add_gating"
    PICK_INGREDIENT = "pick_ingredient"
    SUGGESTIONS = "suggestions"


# (cup, gating, ingredients)
_STAGE_TRACKING = {
    FlowStage.HOME: (False, False, False),
    FlowStage.SCAN_CUP: (True, False, False),
    FlowStage.ADD_GATING: (True, True, False),
    FlowStage.PICK_INGREDIENT: (True, False, True),
    FlowStage.SUGGESTIONS: (True, False, True),
}


class CompositionFlow:
    """Drives the tracker's stage flags from its own events."""

    def __init__(self, tracker: ProximityIngredientTracker) -> None:
        self.tracker = tracker
        self.stage = FlowStage.HOME
        self.suggestions: List[Recipe] = []

        tracker.events.subscribe(CupFound, self._on_cup_found)
        tracker.events.subscribe(CupLost, self._on_cup_lost)
        tracker.events.subscribe(GatingIngredientAdded, self._on_gating_added)
        tracker.events.subscribe(RecipeSuggestions, self._on_suggestions)

        self.enter(FlowStage.HOME)

    def enter(self, stage: FlowStage) -> None:
        """Switch stage and apply its tracking flags."""
        cup, gating, ingredients = _STAGE_TRACKING[stage]
        self.tracker.enable_cup_tracking(cup)
        self.tracker.enable_gating_tracking(gating)
        self.tracker.enable_ingredient_tracking(ingredients)
        if stage != self.stage:
            logger.info(f"Flow: {self.stage.value} -> {stage.value}")
        self.stage = stage

    def begin_scan(self) -> None:
        self.enter(FlowStage.SCAN_CUP)
        # The cup may already be in view when scanning starts
        if self.tracker.cup_present:
            self.enter(FlowStage.ADD_GATING)

    def go_home(self) -> None:
        """Abandon the drink: empty the cup and stop tracking."""
        self.tracker.reset()
        self.suggestions = []
        self.enter(FlowStage.HOME)

    def start_over(self) -> None:
        """Keep only the gating ingredient and go back to picking ingredients."""
        self.suggestions = []
        self.tracker.resume_from_gating()
        self.enter(FlowStage.PICK_INGREDIENT)

    def _on_cup_found(self, event: CupFound) -> None:
        if self.stage == FlowStage.SCAN_CUP:
            self.enter(FlowStage.ADD_GATING)

    def _on_cup_lost(self, event: CupLost) -> None:
        if self.stage == FlowStage.ADD_GATING:
            self.enter(FlowStage.SCAN_CUP)

    def _on_gating_added(self, event: GatingIngredientAdded) -> None:
        self.enter(FlowStage.PICK_INGREDIENT)

    def _on_suggestions(self, event: RecipeSuggestions) -> None:
        self.suggestions = list(event.recipes)
        self.enter(FlowStage.SUGGESTIONS)
