"""Bounded letter cursor with gesture-to-step translation."""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Optional, Sequence, Tuple, TypeVar

from papyrus.utils.config_manager import NavigationConfig
from papyrus.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class Step(Enum):
    """A discrete page turn produced by a gesture."""

    NEXT = 1
    PREV = -1


@dataclass(frozen=True)
class NavigationState:
    """Snapshot of the cursor and the sign of its last move."""

    current_index: int = 0
    direction: int = 0


## Wheel accumulation


@dataclass(frozen=True)
class WheelState:
    """Running wheel delta and the time of the last wheel event."""

    accumulator: float = 0.0
    last_event_time: Optional[float] = None


def advance_wheel(
    state: WheelState,
    delta: float,
    now: float,
    threshold: float = 50.0,
    reset_after: float = 0.2,
) -> Tuple[WheelState, Optional[Step]]:
    """Fold one wheel event into the accumulator.

    A pause longer than ``reset_after`` seconds starts a new gesture. Once
    the accumulated delta passes ``threshold`` in either direction a single
    step is emitted and the accumulator restarts from zero.

    Returns:
        The new state and the step to take, if any
    """
    accumulator = state.accumulator
    if state.last_event_time is None or now - state.last_event_time > reset_after:
        accumulator = 0.0

    accumulator += delta

    if accumulator > threshold:
        return WheelState(0.0, now), Step.NEXT
    if accumulator < -threshold:
        return WheelState(0.0, now), Step.PREV
    return WheelState(accumulator, now), None


def swipe_step(delta_x: float, threshold: float) -> Optional[Step]:
    """Translate a finished horizontal swipe into a step.

    Swiping left (negative delta) moves forward, swiping right moves back.
    """
    if delta_x < -threshold:
        return Step.NEXT
    if delta_x > threshold:
        return Step.PREV
    return None


def swipe_threshold(viewport_width: Optional[int], config: NavigationConfig) -> float:
    """Swipe distance required for a page turn at a given viewport width."""
    if viewport_width is not None and viewport_width < config.narrow_breakpoint:
        return config.narrow_swipe_threshold
    return config.swipe_threshold


## Navigation controller


class NavigationController(Generic[T]):
    """Cursor over an ordered sequence of letters.

    The index always stays inside the sequence (and is 0 for an empty one).
    ``direction`` keeps the sign of the last user-initiated move so views
    can pick their enter/exit animation; corrective clamps leave it alone.
    Out-of-range requests are ignored rather than raised.
    """

    def __init__(
        self,
        items: Sequence[T] = (),
        initial_index: int = 0,
        on_navigate: Optional[Callable[[int], None]] = None,
        enable_gestures: Optional[bool] = None,
        viewport_width: Optional[int] = None,
        config: Optional[NavigationConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialise the controller.

        Args:
            items: Ordered sequence to navigate
            initial_index: Starting index, clamped into range
            on_navigate: Called with the new index after every user move
            enable_gestures: Enable swipe and wheel handling
            viewport_width: Width used to pick the swipe threshold
            config: Navigation thresholds
            clock: Monotonic time source in seconds
        """
        self.config = config or NavigationConfig()
        self.on_navigate = on_navigate
        self.enable_gestures = (
            self.config.enable_gestures if enable_gestures is None else enable_gestures
        )
        self.viewport_width = viewport_width
        self._clock = clock

        self._items: Sequence[T] = tuple(items)
        self._index = max(0, min(initial_index, len(self._items) - 1))
        self._direction = 0
        self._wheel = WheelState()

    ## State

    @property
    def items(self) -> Sequence[T]:
        return self._items

    @property
    def length(self) -> int:
        return len(self._items)

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def direction(self) -> int:
        return self._direction

    @property
    def state(self) -> NavigationState:
        return NavigationState(self._index, self._direction)

    @property
    def current(self) -> Optional[T]:
        if not self._items:
            return None
        return self._items[self._index]

    @property
    def can_go_next(self) -> bool:
        return self._index < self.length - 1

    @property
    def can_go_prev(self) -> bool:
        return self._index > 0

    @property
    def wheel_state(self) -> WheelState:
        return self._wheel

    def update_items(self, items: Sequence[T]) -> None:
        """Swap in a new sequence, clamping the cursor if it fell off the end.

        This never calls ``on_navigate`` or touches ``direction``.
        """
        self._items = tuple(items)
        if not self._items:
            self._index = 0
        elif self._index >= len(self._items):
            logger.debug(f"Clamping cursor {self._index} -> {len(self._items) - 1}")
            self._index = len(self._items) - 1

    def reset(self, items: Sequence[T] = ()) -> None:
        """Start over at the first item, e.g. on a feed or filter change."""
        self._items = tuple(items)
        self._index = 0
        self._direction = 0
        self._wheel = WheelState()

    ## Moves

    def _move_to(self, index: int, direction: int) -> None:
        self._direction = direction
        self._index = index
        if self.on_navigate is not None:
            self.on_navigate(index)

    def go_next(self) -> None:
        if self.can_go_next:
            self._move_to(self._index + 1, 1)

    def go_prev(self) -> None:
        if self.can_go_prev:
            self._move_to(self._index - 1, -1)

    def go_to_index(self, index: int) -> None:
        """Jump straight to ``index``; invalid or current indices are ignored."""
        if 0 <= index < self.length and index != self._index:
            self._move_to(index, 1 if index > self._index else -1)

    def step(self, step: Optional[Step]) -> None:
        if step is Step.NEXT:
            self.go_next()
        elif step is Step.PREV:
            self.go_prev()

    ## Input

    def handle_key(self, key: str) -> bool:
        """Map arrow keys onto moves, regardless of gesture settings.

        Returns:
            True if the key is a navigation key
        """
        if key == "right":
            self.go_next()
            return True
        if key == "left":
            self.go_prev()
            return True
        return False

    def handle_swipe(self, delta_x: float) -> None:
        if not self.enable_gestures:
            return
        self.step(swipe_step(delta_x, swipe_threshold(self.viewport_width, self.config)))

    def handle_wheel(self, delta_y: float, now: Optional[float] = None) -> None:
        if not self.enable_gestures:
            return
        self._wheel, step = advance_wheel(
            self._wheel,
            delta_y,
            self._clock() if now is None else now,
            threshold=self.config.wheel_threshold,
            reset_after=self.config.wheel_reset_after,
        )
        self.step(step)
