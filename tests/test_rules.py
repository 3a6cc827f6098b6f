import pytest

from falling_blocks_rl.game import ScoringRules


@pytest.mark.parametrize("lines, points", [(0, 0), (1, 100), (2, 300), (3, 500), (4, 4000)])
def test_line_clear_bonuses(lines, points):
    assert ScoringRules().score_for_lines(lines) == points


def test_level_thresholds():
    rules = ScoringRules()
    assert rules.score_for_next_level(1) == 5000
    assert rules.score_for_next_level(2) == 5000
    assert rules.score_for_next_level(3) == 6000
    assert rules.score_for_next_level(4) == 7200


def test_level_up_when_threshold_met():
    rules = ScoringRules()
    assert rules.next_level(1, 4999) == 1
    assert rules.next_level(1, 5000) == 2


def test_level_up_is_a_single_step():
    assert ScoringRules().next_level(1, 1_000_000) == 2


def test_gravity_interval_shrinks_then_floors():
    rules = ScoringRules()
    assert rules.gravity_interval_ms(1) == pytest.approx(1000.0)
    assert rules.gravity_interval_ms(2) == pytest.approx(600.0)
    assert rules.gravity_interval_ms(3) == pytest.approx(360.0)
    floor = rules.gravity_interval_ms(14)
    assert floor == pytest.approx(1000.0 * 0.6 ** 13)
    assert rules.gravity_interval_ms(30) == floor
    intervals = [rules.gravity_interval_ms(level) for level in range(1, 15)]
    assert all(a > b for a, b in zip(intervals, intervals[1:]))
