"""Proximity ingredient tracking: AR marker samples in, discrete ingredient events out.

Every step(elapsed):
1. Cup presence from the cup target (TRACKED / EXTENDED_TRACKED = present),
   firing CupFound / CupLost on edges
2. Session tick: cooldown countdown and fill animation
3. With the cup present, no cooldown and no animation in flight, every other
   mapped marker at TRACKED within ADD_INGREDIENT_THRESHOLD of the cup is "poured":
   - empty cup: the gating ingredient is added, whichever marker triggered it
   - otherwise: the marker's ingredient is added unless already in the cup
4. Each accepted add fires IngredientAdded; non-gating adds also fire RecipeSuggestions

Nothing per-tick raises: a missing cup, a failing sensor feed or an unknown
marker simply results in no ingredient being added.
"""

import math
from typing import Any, Dict, Iterable, List, Optional, Protocol

from pydantic import ValidationError

from src.catalog.catalog import Catalog
from src.engine.matcher import suggest_recipes
from src.models.models import (
    CupFound,
    CupLost,
    GatingIngredientAdded,
    IngredientAdded,
    Recipe,
    RecipeSuggestions,
    TrackingSample,
    TrackingStatus,
)
from src.session.cup_session import CupSession
from src.tracking.events import EventEmitter
from src.utils.config import config
from src.utils.logger import logger


class SensorFeed(Protocol):
    """Capability to read the current tracking samples from the AR runtime."""

    def read_samples(self) -> Iterable[Any]:
        ...


class ManualSensorFeed:
    """SensorFeed holding whatever samples were last pushed (replays and tests)."""

    def __init__(self, samples: Optional[Iterable[Any]] = None) -> None:
        self._samples: List[Any] = list(samples or [])

    def set_samples(self, samples: Iterable[Any]) -> None:
        self._samples = list(samples)

    def read_samples(self) -> List[Any]:
        return list(self._samples)


class ProximityIngredientTracker:
    """Turns per-tick marker samples into ingredient adds on a CupSession.

    Args:
        catalog: Loaded catalog (for suggestions).
        session: Cup session receiving the adds.
        sensor: Feed of current tracking samples. None behaves as an empty feed.
        emitter: Event emitter for outbound events. Default: a new EventEmitter.
        marker_map: Marker id -> ingredient name. Default: config.get_marker_map().
        add_threshold: Max cup distance counting as a pour. Default: ADD_INGREDIENT_THRESHOLD.
        overlap_threshold: Shared ingredients needed to suggest a recipe. Default: SUGGESTION_OVERLAP_THRESHOLD.
        cup_target_id: Target id of the cup. Default: CUP_TARGET_ID.
        reserved_target_ids: Runtime targets that are never ingredients. Default: RESERVED_TARGET_IDS.
    """

    def __init__(
        self,
        catalog: Catalog,
        session: CupSession,
        sensor: Optional[SensorFeed] = None,
        emitter: Optional[EventEmitter] = None,
        marker_map: Optional[Dict[str, str]] = None,
        add_threshold: Optional[float] = None,
        overlap_threshold: Optional[int] = None,
        cup_target_id: Optional[str] = None,
        reserved_target_ids: Optional[Iterable[str]] = None,
    ) -> None:
        self.catalog = catalog
        self.session = session
        self.sensor = sensor
        self.events = emitter or EventEmitter()
        self.marker_map = dict(config.get_marker_map() if marker_map is None else marker_map)
        self.add_threshold = config.ADD_INGREDIENT_THRESHOLD if add_threshold is None else add_threshold
        self.overlap_threshold = (
            config.SUGGESTION_OVERLAP_THRESHOLD if overlap_threshold is None else overlap_threshold
        )
        self.cup_target_id = cup_target_id or config.CUP_TARGET_ID
        self.reserved_target_ids = frozenset(
            config.RESERVED_TARGET_IDS if reserved_target_ids is None else reserved_target_ids
        )
        self.last_suggestions: List[Recipe] = []

        # Stage flags, switched by the composition flow
        self.track_cup = True
        self.track_gating = True
        self.track_ingredients = True

    # ===== Stage control =====

    def enable_cup_tracking(self, enable: bool) -> None:
        """Switch cup presence tracking. Disabling it forgets the cup without firing CupLost."""
        self.track_cup = enable
        if not enable and self.session.cup_present:
            logger.debug("Cup tracking disabled, clearing cup presence", extra={"session_id": self.session.session_id})
            self.session.cup_present = False

    def enable_gating_tracking(self, enable: bool) -> None:
        self.track_gating = enable

    def enable_ingredient_tracking(self, enable: bool) -> None:
        self.track_ingredients = enable

    @property
    def cup_present(self) -> bool:
        return self.session.cup_present

    # ===== Per-tick processing =====

    def step(self, elapsed: float) -> None:
        """Process one frame of tracking samples.

        Args:
            elapsed: Seconds since the previous step.
        """
        samples = self._read_samples()
        cup = next((s for s in samples if s.target_id == self.cup_target_id), None)

        if self.track_cup:
            self._update_cup_presence(cup)

        self.session.tick(elapsed)

        if cup is None or not self.session.cup_present:
            return
        if not self.session.accepting:
            return

        for sample in samples:
            if sample is cup or sample.target_id in self.reserved_target_ids:
                continue
            if sample.status != TrackingStatus.TRACKED:
                continue
            ingredient = self.marker_map.get(sample.target_id)
            if ingredient is None:
                continue

            distance = math.dist(cup.position, sample.position)
            logger.debug(
                f"Distance between cup and {sample.target_id}: {distance:.3f}",
                extra={"session_id": self.session.session_id, "target_id": sample.target_id},
            )
            if distance <= self.add_threshold:
                self._handle_proximity(sample.target_id, ingredient)

    def _read_samples(self) -> List[TrackingSample]:
        if self.sensor is None:
            return []
        try:
            raw = list(self.sensor.read_samples() or [])
        except Exception as e:
            logger.warning(f"Sensor feed failed, treating frame as empty: {e}")
            return []

        samples: List[TrackingSample] = []
        for item in raw:
            if isinstance(item, TrackingSample):
                samples.append(item)
                continue
            try:
                samples.append(TrackingSample.model_validate(item))
            except ValidationError:
                logger.debug(f"Ignoring malformed tracking sample: {item!r}")
        return samples

    def _update_cup_presence(self, cup: Optional[TrackingSample]) -> None:
        present = cup is not None and cup.status.is_present
        if present == self.session.cup_present:
            return

        self.session.cup_present = present
        if present:
            logger.info(f"Cup found at {cup.position}", extra={"session_id": self.session.session_id})
            self.events.emit(CupFound())
        else:
            logger.info("Cup lost", extra={"session_id": self.session.session_id})
            self.events.emit(CupLost())

    def _handle_proximity(self, target_id: str, ingredient: str) -> None:
        if not self.session.added_ingredients:
            if self.session.gating_ingredient:
                if self.track_gating:
                    self._accept(self.session.gating_ingredient)
            elif self.track_ingredients:
                self._accept(ingredient)
            return

        if not self.track_ingredients:
            return
        if self.session.has_ingredient(ingredient):
            logger.debug(f"{ingredient} already in the cup (marker {target_id})")
            return
        self._accept(ingredient)

    # ===== Host entry points =====

    def add_ingredient(self, name: str) -> bool:
        """Add an ingredient directly (no distance check), with the usual acceptance rules.

        Returns:
            True if the ingredient was added.
        """
        return self._accept(name)

    def reset(self) -> None:
        """Empty the cup and arm the cooldown. Cup presence is kept."""
        self.session.reset()
        self.last_suggestions = []

    def resume_from_gating(self) -> bool:
        """Empty the cup and put back only the gating ingredient. Cup presence is kept."""
        self.last_suggestions = []
        if not self.session.resume_from_gating():
            return False
        self._announce(self.session.added_ingredients[-1])
        return True

    def get_added_ingredients(self) -> List[str]:
        return self.session.added_ingredients

    def _accept(self, name: str) -> bool:
        if not self.session.add_ingredient(name):
            return False
        self._announce(self.session.added_ingredients[-1])
        return True

    def _announce(self, added: str) -> None:
        self.events.emit(IngredientAdded(name=added))

        if self.session.is_gating(added):
            self.events.emit(GatingIngredientAdded(name=added))
            return

        self.last_suggestions = suggest_recipes(
            self.session.added_ingredients, self.catalog, self.overlap_threshold
        )
        logger.info(
            f"Suggestions: {[recipe.name for recipe in self.last_suggestions] or 'none'}",
            extra={"session_id": self.session.session_id},
        )
        self.events.emit(RecipeSuggestions(recipes=self.last_suggestions))
