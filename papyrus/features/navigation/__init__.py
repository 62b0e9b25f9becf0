"""Sequential letter navigation."""

from .controller import (
    NavigationController,
    NavigationState,
    Step,
    WheelState,
    advance_wheel,
    swipe_step,
    swipe_threshold,
)

__all__ = [
    "NavigationController",
    "NavigationState",
    "Step",
    "WheelState",
    "advance_wheel",
    "swipe_step",
    "swipe_threshold",
]
