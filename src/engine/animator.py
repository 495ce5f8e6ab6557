"""Fill level and liquid color animation, advanced by elapsed time.

State machine:

    IDLE --begin_fill--> ANIMATING --(duration elapsed)--> IDLE
    reset() from either state -> IDLE, fill 0, transparent

Only one fill can be in flight: begin_fill() while ANIMATING is a no-op. Callers
rely on this to refuse new ingredients until the current pour has settled.
"""

from enum import Enum
from typing import Callable, Optional

from src.models.models import TRANSPARENT, Color
from src.utils.config import config
from src.utils.logger import logger

# One pour at FILL_SPEED 1.0 takes half a second
BASE_FILL_DURATION = 0.5


class AnimationState(str, Enum):
    IDLE = "idle"
    ANIMATING = "animating"


class FillAnimator:
    """Moves fill_level toward a target over time and keeps current_color in sync.

    Args:
        color_source: Callable returning the color for the current cup contents.
        fill_speed: Animation speed multiplier. Default: FILL_SPEED.
        fill_step: Fill added per pour when no explicit target is given. Default: FILL_STEP.
    """

    def __init__(
        self,
        color_source: Callable[[], Color],
        fill_speed: Optional[float] = None,
        fill_step: Optional[float] = None,
    ) -> None:
        self._color_source = color_source
        self.fill_speed = config.FILL_SPEED if fill_speed is None else fill_speed
        self.fill_step = config.FILL_STEP if fill_step is None else fill_step
        if self.fill_speed <= 0:
            raise ValueError(f"fill_speed must be positive, got: {self.fill_speed}")

        self.fill_level: float = 0.0
        self.current_color: Color = TRANSPARENT
        self.state: AnimationState = AnimationState.IDLE
        self.target_fill: Optional[float] = None
        self._start_fill = 0.0
        self._elapsed = 0.0

    @property
    def duration(self) -> float:
        return BASE_FILL_DURATION / self.fill_speed

    @property
    def is_animating(self) -> bool:
        return self.state == AnimationState.ANIMATING

    def begin_fill(self, target_fill: Optional[float] = None) -> bool:
        """Start animating toward target_fill (default: one fill step above the current level).

        Returns:
            True if the animation started, False if one is already in flight.
        """
        if self.is_animating:
            logger.debug("Fill already animating, ignoring begin_fill")
            return False

        if target_fill is None:
            target_fill = self.fill_level + self.fill_step
        self.target_fill = min(1.0, max(0.0, target_fill))
        self._start_fill = self.fill_level
        self._elapsed = 0.0
        self.state = AnimationState.ANIMATING
        self.refresh_color()
        logger.debug(f"Fill animation {self._start_fill:.2f} -> {self.target_fill:.2f} over {self.duration:.2f}s")
        return True

    def step(self, elapsed: float) -> None:
        """Advance the animation by elapsed seconds. No-op while IDLE."""
        if not self.is_animating:
            return

        self._elapsed += max(0.0, elapsed)
        if self._elapsed >= self.duration:
            self._finish()
            return

        progress = self._elapsed / self.duration
        self.fill_level = self._start_fill + (self.target_fill - self._start_fill) * progress
        self.refresh_color()

    def settle(self) -> None:
        """Complete any in-flight animation immediately."""
        if self.is_animating:
            self._finish()

    def reset(self) -> None:
        """Cancel any animation and empty the cup."""
        self.state = AnimationState.IDLE
        self.target_fill = None
        self._start_fill = 0.0
        self._elapsed = 0.0
        self.fill_level = 0.0
        self.current_color = TRANSPARENT

    def refresh_color(self) -> None:
        self.current_color = self._color_source()

    def _finish(self) -> None:
        # Completed pours land exactly on the target level
        self.fill_level = self.target_fill
        self.refresh_color()
        self.state = AnimationState.IDLE
        self.target_fill = None
        self._elapsed = 0.0
