"""In-memory state of one virtual cup.

A CupSession is created when a tracking flow starts, reset on "start over",
and dropped when the flow ends. It owns the ingredient list, the fill animator,
the post-reset cooldown and the last recipe match. The catalog is shared and
never mutated.

Acceptance rules for add_ingredient():
- ignored while the post-reset cooldown is running
- ignored while a fill animation is in flight (one pour at a time)
- ignored when the ingredient is already in the cup (case-insensitive)
"""

import uuid
from typing import Any, Dict, List, Optional

from src.catalog.catalog import Catalog
from src.engine.animator import AnimationState, FillAnimator
from src.engine.compositor import compose_color, side_color
from src.engine.matcher import match_recipe
from src.models.models import Color, MatchKind, MatchResult, normalize_name
from src.utils.config import config
from src.utils.logger import logger

EMPTY_MATCH = MatchResult(kind=MatchKind.NONE, label="None")

# Marks "use GATING_INGREDIENT from config"; None disables gating
DEFAULT_GATING = object()


class CupSession:
    """Mutable cup state driven by one flow at a time.

    Args:
        catalog: Loaded catalog (shared, read-only).
        gating_ingredient: First ingredient of every drink, None to disable. Default: GATING_INGREDIENT.
        cooldown_duration: Seconds marker adds are refused after reset(). Default: COOLDOWN_DURATION.
        fill_speed: Fill animation speed. Default: FILL_SPEED.
        fill_step: Fill added per ingredient. Default: FILL_STEP.
        session_id: Identifier used in logs. Default: random.
    """

    def __init__(
        self,
        catalog: Catalog,
        gating_ingredient: Any = DEFAULT_GATING,
        cooldown_duration: Optional[float] = None,
        fill_speed: Optional[float] = None,
        fill_step: Optional[float] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.catalog = catalog
        if gating_ingredient is DEFAULT_GATING:
            gating_ingredient = config.GATING_INGREDIENT
        self.gating_ingredient: Optional[str] = self._display_name(gating_ingredient) if gating_ingredient else None
        self.cooldown_duration = config.COOLDOWN_DURATION if cooldown_duration is None else cooldown_duration
        self.session_id = session_id or uuid.uuid4().hex[:8]

        self._added: List[str] = []
        self._keys: set = set()
        self.cup_present = False
        self.gating_added = False
        self.cooldown_remaining = 0.0
        self.current_match: MatchResult = EMPTY_MATCH

        self.animator = FillAnimator(
            color_source=lambda: compose_color(self._added, self.catalog),
            fill_speed=fill_speed,
            fill_step=fill_step,
        )

    # ===== State accessors =====

    @property
    def added_ingredients(self) -> List[str]:
        return list(self._added)

    @property
    def fill_level(self) -> float:
        return self.animator.fill_level

    @property
    def current_color(self) -> Color:
        return self.animator.current_color

    @property
    def side_color(self) -> Color:
        return side_color(self.animator.current_color)

    @property
    def animation_state(self) -> AnimationState:
        return self.animator.state

    @property
    def is_animating(self) -> bool:
        return self.animator.is_animating

    @property
    def accepting(self) -> bool:
        """True when an add would currently be considered (no cooldown, no animation)."""
        return self.cooldown_remaining <= 0 and not self.is_animating

    def has_ingredient(self, name: str) -> bool:
        return normalize_name(name) in self._keys

    def is_gating(self, name: str) -> bool:
        return bool(self.gating_ingredient) and normalize_name(name) == normalize_name(self.gating_ingredient)

    # ===== Mutations =====

    def add_ingredient(self, name: str, bypass_cooldown: bool = False) -> bool:
        """Add an ingredient and start a fill animation.

        Args:
            name: Ingredient name (any case). Unknown names are accepted and blended as nothing.
            bypass_cooldown: Accept even while the post-reset cooldown runs.

        Returns:
            True if the ingredient was added, False if the add was a no-op.
        """
        key = normalize_name(name or "")
        if not key:
            return False
        if self.cooldown_remaining > 0 and not bypass_cooldown:
            logger.debug(
                f"Cooldown active ({self.cooldown_remaining:.2f}s left), ignoring {name}",
                extra={"session_id": self.session_id},
            )
            return False
        if self.is_animating:
            logger.debug(f"Fill animation in progress, ignoring {name}", extra={"session_id": self.session_id})
            return False
        if key in self._keys:
            logger.debug(f"{name} already in the cup", extra={"session_id": self.session_id})
            return False

        display = self._display_name(name)
        self._added.append(display)
        self._keys.add(key)
        if self.is_gating(display):
            self.gating_added = True

        self.current_match = match_recipe(self._added, self.catalog)
        self.animator.begin_fill()

        logger.info(
            f"Added {display} | Ingredients: {', '.join(self._added)} | Recipe: {self.current_match.label} | "
            f"Color: RGB{self.current_color.to_rgb255()}",
            extra={"session_id": self.session_id},
        )
        return True

    def add_gating_ingredient(self, bypass_cooldown: bool = False) -> bool:
        """Add the configured gating ingredient. False when gating is disabled or the add is refused."""
        if not self.gating_ingredient:
            return False
        return self.add_ingredient(self.gating_ingredient, bypass_cooldown=bypass_cooldown)

    def tick(self, elapsed: float) -> None:
        """Advance the cooldown timer and the fill animation by elapsed seconds."""
        if self.cooldown_remaining > 0:
            self.cooldown_remaining = max(0.0, self.cooldown_remaining - elapsed)
        self.animator.step(elapsed)

    def reset(self, arm_cooldown: bool = True) -> None:
        """Empty the cup, cancel any animation and (by default) arm the cooldown."""
        self._added.clear()
        self._keys.clear()
        self.gating_added = False
        self.current_match = EMPTY_MATCH
        self.animator.reset()
        self.cooldown_remaining = self.cooldown_duration if arm_cooldown else 0.0
        logger.info(
            f"Cup reset (cooldown {self.cooldown_remaining:.2f}s)", extra={"session_id": self.session_id}
        )

    def resume_from_gating(self) -> bool:
        """Reset, then put back only the gating ingredient. The cooldown stays armed for later adds."""
        self.reset()
        return self.add_gating_ingredient(bypass_cooldown=True)

    def snapshot(self) -> Dict[str, Any]:
        """Plain-dict view of the session (for debugging and the replay CLI)."""
        return {
            "session_id": self.session_id,
            "ingredients": self.added_ingredients,
            "fill_level": round(self.fill_level, 4),
            "animation_state": self.animation_state.value,
            "top_color": self.current_color.to_rgb255(),
            "side_color": self.side_color.to_rgb255(),
            "alpha": self.current_color.a,
            "recipe": self.current_match.label,
            "match_kind": self.current_match.kind.value,
            "cup_present": self.cup_present,
            "gating_added": self.gating_added,
            "cooldown_remaining": round(self.cooldown_remaining, 4),
        }

    def _display_name(self, name: str) -> str:
        ingredient = self.catalog.get_ingredient(name)
        return ingredient.name if ingredient else name.strip()
