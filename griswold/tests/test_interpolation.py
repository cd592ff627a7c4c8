"""
Tests for actor value and color interpolation.

Run with: python -m pytest griswold/tests/test_interpolation.py -v
"""

import pytest

from conftest import make_actor

from griswold.timeline.interpolation import (
    RGB,
    color_at,
    curve_points,
    parse_hex_color,
    round_half_up,
    surrounding_keyframes,
    value_at,
)
from griswold.timeline.models import InterpolationType

STEP = InterpolationType.STEP
LINEAR = InterpolationType.LINEAR


# ===========================================================================
# value_at
# ===========================================================================


class TestValueAt:
    def test_no_keyframes_is_zero(self):
        assert value_at(make_actor(), 3.0) == 0.0

    @pytest.mark.parametrize("mode", [STEP, LINEAR])
    @pytest.mark.parametrize("t", [-5.0, 0.0, 2.5, 4.0, 100.0])
    def test_single_keyframe_holds_everywhere(self, mode, t):
        actor = make_actor(keyframes=[(4.0, 0.7)], interpolation=mode)
        assert value_at(actor, t) == 0.7

    def test_linear_midpoint_is_exact(self):
        actor = make_actor(keyframes=[(0, 0), (10, 1)], interpolation=LINEAR)
        assert value_at(actor, 5) == 0.5

    def test_linear_quarter(self):
        actor = make_actor(keyframes=[(2, 0.2), (6, 1.0)], interpolation=LINEAR)
        assert value_at(actor, 3) == pytest.approx(0.4)

    def test_step_holds_until_next_keyframe(self):
        actor = make_actor(keyframes=[(0, 0), (10, 1)], interpolation=STEP)
        assert value_at(actor, 9.999) == 0
        assert value_at(actor, 10) == 1

    @pytest.mark.parametrize("mode", [STEP, LINEAR])
    def test_exact_keyframe_time_returns_its_value(self, mode):
        actor = make_actor(keyframes=[(0, 0.1), (5, 0.9), (10, 0.3)], interpolation=mode)
        assert value_at(actor, 5) == 0.9

    def test_before_first_keyframe_holds_first_value(self):
        actor = make_actor(keyframes=[(2, 0.6), (4, 1.0)], interpolation=LINEAR)
        assert value_at(actor, 0) == 0.6
        assert value_at(actor, -1) == 0.6

    def test_after_last_keyframe_holds_last_value(self):
        actor = make_actor(keyframes=[(2, 0.6), (4, 0.25)], interpolation=LINEAR)
        assert value_at(actor, 50) == 0.25

    def test_surrounding_keyframes_on_exact_hit(self):
        actor = make_actor(keyframes=[(1, 0), (2, 1)])
        before, after = surrounding_keyframes(actor.keyframes, 2)
        assert before is after
        assert before.time == 2

    def test_surrounding_keyframes_between(self):
        actor = make_actor(keyframes=[(1, 0), (2, 1), (3, 0)])
        before, after = surrounding_keyframes(actor.keyframes, 2.5)
        assert (before.time, after.time) == (2, 3)


# ===========================================================================
# Color interpolation
# ===========================================================================


class TestColorAt:
    def test_endpoints(self):
        assert color_at("#000000", "#ffffff", 0) == RGB(0, 0, 0)
        assert color_at("#000000", "#ffffff", 1) == RGB(255, 255, 255)

    def test_midpoint_rounds_half_up(self):
        # 255 * 0.5 = 127.5 -> 128
        assert color_at("#000000", "#ffffff", 0.5) == RGB(128, 128, 128)

    def test_channels_blend_independently(self):
        assert color_at("#ff0000", "#0000ff", 0.5) == RGB(128, 0, 128)

    def test_hash_is_optional_and_case_insensitive(self):
        assert parse_hex_color("FFcc00") == RGB(255, 204, 0)
        assert parse_hex_color("#ffCC00") == RGB(255, 204, 0)

    @pytest.mark.parametrize("bad", ["", "#fff", "#12345", "#gggggg", "red", "#1234567", None])
    def test_malformed_color_reads_as_black(self, bad):
        assert parse_hex_color(bad) == RGB(0, 0, 0)

    def test_malformed_operand_degrades_only_that_side(self):
        assert color_at("nonsense", "#ffffff", 1) == RGB(255, 255, 255)
        assert color_at("#ffffff", "nonsense", 1) == RGB(0, 0, 0)

    def test_css_output(self):
        assert color_at("#333333", "#ffcc00", 0).css() == "rgb(51, 51, 51)"


class TestRoundHalfUp:
    def test_halves_go_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3

    def test_three_places(self):
        assert round_half_up(0.33333, 3) == 0.333


# ===========================================================================
# Curve points
# ===========================================================================


class TestCurvePoints:
    def test_empty_actor_has_no_curve(self):
        assert curve_points(make_actor(), 10) == []

    def test_step_curve_has_corners(self):
        actor = make_actor(keyframes=[(2, 1), (4, 0)], interpolation=STEP)
        assert curve_points(actor, 10) == [
            (0.0, 1),   # held back from the first keyframe
            (2, 1), (2, 1),
            (4, 1), (4, 0),
            (10, 0),
        ]

    def test_linear_curve_connects_keyframes(self):
        actor = make_actor(keyframes=[(2, 1), (4, 0)], interpolation=LINEAR)
        assert curve_points(actor, 10) == [(0.0, 1), (2, 1), (4, 0), (10, 0)]

    def test_curve_extends_past_end_time_to_last_keyframe(self):
        actor = make_actor(keyframes=[(20, 1)], interpolation=LINEAR)
        assert curve_points(actor, 10)[-1] == (20, 1)
