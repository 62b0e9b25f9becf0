"""Tests for the navigation controller and gesture translation."""

from unittest.mock import MagicMock

import pytest

from papyrus.features.navigation import (
    NavigationController,
    NavigationState,
    Step,
    WheelState,
    advance_wheel,
    swipe_step,
    swipe_threshold,
)
from papyrus.utils.config_manager import NavigationConfig


@pytest.fixture
def on_navigate():
    return MagicMock()


def make_controller(items=("a", "b", "c"), initial_index=0, **kwargs):
    return NavigationController(list(items), initial_index=initial_index, **kwargs)


class TestBoundaries:
    def test_next_and_prev_move_one_step(self, on_navigate):
        nav = make_controller(on_navigate=on_navigate)

        nav.go_next()
        assert nav.state == NavigationState(1, 1)
        nav.go_prev()
        assert nav.state == NavigationState(0, -1)
        assert [c.args[0] for c in on_navigate.call_args_list] == [1, 0]

    def test_moves_past_the_ends_are_ignored(self, on_navigate):
        nav = make_controller(initial_index=2, on_navigate=on_navigate)

        nav.go_next()
        assert nav.current_index == 2
        assert not nav.can_go_next

        nav.go_to_index(0)
        nav.go_prev()
        assert nav.current_index == 0
        assert not nav.can_go_prev
        on_navigate.assert_called_once_with(0)

    def test_go_to_index_sets_direction(self):
        nav = make_controller(items="abcde", initial_index=2)

        nav.go_to_index(4)
        assert nav.direction == 1
        nav.go_to_index(1)
        assert nav.direction == -1

    @pytest.mark.parametrize("index", [-1, 3, 1])
    def test_go_to_invalid_or_current_index_is_noop(self, on_navigate, index):
        nav = make_controller(initial_index=1, on_navigate=on_navigate)

        nav.go_to_index(index)

        assert nav.current_index == 1
        on_navigate.assert_not_called()

    def test_empty_sequence(self):
        nav = make_controller(items=())

        nav.go_next()
        nav.go_prev()

        assert nav.current_index == 0
        assert nav.current is None
        assert nav.length == 0

    def test_initial_index_is_clamped(self):
        assert make_controller(initial_index=10).current_index == 2


class TestSequenceChanges:
    def test_shrinking_sequence_clamps_without_callback(self, on_navigate):
        nav = make_controller(items="abcd", initial_index=3, on_navigate=on_navigate)
        nav.go_prev()
        nav.go_next()
        on_navigate.reset_mock()

        nav.update_items(["a", "b", "c"])

        assert nav.current_index == 2
        assert nav.current == "c"
        assert nav.direction == 1
        on_navigate.assert_not_called()

    def test_three_to_two_at_end(self, on_navigate):
        nav = make_controller(initial_index=2, on_navigate=on_navigate)

        nav.update_items(["a", "b"])

        assert nav.current_index == 1
        on_navigate.assert_not_called()

    def test_emptied_sequence_resets_index(self):
        nav = make_controller(initial_index=2)

        nav.update_items([])

        assert nav.current_index == 0

    def test_reset_starts_over(self):
        nav = make_controller(initial_index=1)
        nav.go_next()

        nav.reset(["x", "y"])

        assert nav.state == NavigationState()
        assert nav.items == ("x", "y")


class TestKeys:
    def test_arrow_keys(self):
        nav = make_controller()

        assert nav.handle_key("right") is True
        assert nav.current_index == 1
        assert nav.handle_key("left") is True
        assert nav.current_index == 0
        assert nav.handle_key("up") is False

    def test_keys_work_with_gestures_disabled(self):
        nav = make_controller(enable_gestures=False)

        nav.handle_key("right")

        assert nav.current_index == 1


class TestSwipe:
    def test_swipe_left_and_right(self):
        nav = make_controller(initial_index=1, viewport_width=1024)

        nav.handle_swipe(-60)
        assert nav.current_index == 2
        nav.handle_swipe(60)
        assert nav.current_index == 1

    def test_swipe_right_from_middle_goes_back(self):
        nav = make_controller(initial_index=1, viewport_width=1024)

        nav.handle_swipe(60)

        assert nav.current_index == 0

    def test_short_swipe_does_nothing(self):
        nav = make_controller(initial_index=1, viewport_width=1024)

        nav.handle_swipe(-40)

        assert nav.current_index == 1

    def test_narrow_viewport_uses_lower_threshold(self):
        nav = make_controller(initial_index=1, viewport_width=400)

        nav.handle_swipe(-40)

        assert nav.current_index == 2

    def test_disabled_gestures_ignore_swipes(self):
        nav = make_controller(initial_index=1, enable_gestures=False)

        nav.handle_swipe(-200)

        assert nav.current_index == 1

    def test_threshold_selection(self):
        config = NavigationConfig()

        assert swipe_threshold(767, config) == 30
        assert swipe_threshold(768, config) == 50
        assert swipe_threshold(None, config) == 50

    def test_swipe_step(self):
        assert swipe_step(-51, 50) is Step.NEXT
        assert swipe_step(51, 50) is Step.PREV
        assert swipe_step(50, 50) is None


class TestWheel:
    def test_accumulates_until_threshold(self):
        state = WheelState()

        state, step = advance_wheel(state, 30, now=0.0)
        assert step is None
        state, step = advance_wheel(state, 30, now=0.1)

        assert step is Step.NEXT
        assert state.accumulator == 0.0

    def test_pause_resets_accumulator(self):
        state, _ = advance_wheel(WheelState(), 30, now=0.0)

        state, step = advance_wheel(state, 30, now=0.5)

        assert step is None
        assert state.accumulator == 30

    def test_negative_deltas_go_back(self):
        state, _ = advance_wheel(WheelState(), -40, now=0.0)
        _, step = advance_wheel(state, -20, now=0.05)

        assert step is Step.PREV

    def test_one_step_per_crossing(self):
        nav = make_controller(items="abcde")

        nav.handle_wheel(200, now=0.0)

        assert nav.current_index == 1

    def test_controller_uses_clock(self):
        times = iter([0.0, 0.1, 0.2, 1.0])
        nav = make_controller(clock=lambda: next(times))

        nav.handle_wheel(30)
        nav.handle_wheel(30)
        assert nav.current_index == 1
        nav.handle_wheel(30)
        nav.handle_wheel(30)
        assert nav.current_index == 1

    def test_disabled_gestures_ignore_wheel(self):
        nav = make_controller(enable_gestures=False)

        nav.handle_wheel(500, now=0.0)

        assert nav.current_index == 0
        assert nav.wheel_state == WheelState()
