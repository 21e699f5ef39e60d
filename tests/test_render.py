import pytest

from nexusview.render import FrameTimer, movement_from_keys


def test_tick_records_delta_time():
    timer = FrameTimer(100)
    assert timer.tick(116) is None
    assert timer.delta_time == 16


def test_no_title_within_first_second():
    timer = FrameTimer(0)
    results = [timer.tick(t) for t in (100, 400, 999)]
    assert results == [None, None, None]


def test_title_after_one_second():
    timer = FrameTimer(0)
    assert timer.tick(500) is None
    assert timer.tick(1000) == "FPS: 2 | Frame Time: 500.0 ms"


def test_counter_resets_after_title():
    timer = FrameTimer(0)
    timer.tick(500)
    first = timer.tick(1000)
    assert timer.frame_count == 0
    assert timer.tick(1500) is None
    assert timer.tick(2000) == first


def test_no_keys_no_movement():
    assert movement_from_keys(set(), 16) == (0.0, 0.0)


@pytest.mark.parametrize("a, b", [("w", "up"), ("s", "down"), ("a", "left"), ("d", "right")])
def test_arrow_keys_match_letters(a, b):
    assert movement_from_keys({a}, 12) == movement_from_keys({b}, 12)


def test_forward_is_positive_y_only():
    move_x, move_y = movement_from_keys({"w"}, 10)
    assert move_x == 0.0
    assert move_y > 0


def test_opposite_keys_cancel():
    assert movement_from_keys({"w", "s", "a", "d"}, 10) == (0.0, 0.0)


def test_left_is_negative_of_right():
    assert movement_from_keys({"a"}, 7)[0] == -movement_from_keys({"d"}, 7)[0]


def test_movement_scales_with_delta_time():
    assert movement_from_keys({"w"}, 20)[1] == pytest.approx(2 * movement_from_keys({"w"}, 10)[1])


def test_unknown_keys_are_ignored():
    assert movement_from_keys({"q", "space"}, 10) == (0.0, 0.0)