"""
Unit tests for grade bands, colour schemes and class statistics.
"""

import pytest

from educafric.services.grading import (
    COLOR_SCHEMES,
    DEFAULT_GRADE_BANDS,
    NIGERIAN_SCALE,
    STANDARD_SCALE,
    UNGRADED_COLOR,
    appreciation,
    appreciation_code,
    compute_class_statistics,
    get_color_scheme,
    get_grading_scale,
    grade_band,
    grade_color,
    wrap_text,
)

EXCELLENT, GOOD, AVERAGE, POOR = DEFAULT_GRADE_BANDS


@pytest.mark.parametrize(
    "grade, expected",
    [
        (20, EXCELLENT),
        (15, EXCELLENT),   # exactly 75%
        (14.99, GOOD),
        (12, GOOD),        # exactly 60%
        (10, AVERAGE),     # exactly 50%
        (9.99, POOR),
        (0, POOR),
    ],
)
def test_grade_band_boundaries_on_20(grade, expected):
    assert grade_band(grade, 20) is expected


def test_boundaries_on_other_max_scores():
    assert grade_band(75, 100) is EXCELLENT
    assert grade_band(50, 100) is AVERAGE
    assert grade_band(7.5, 10) is EXCELLENT


def test_ungraded_is_grey():
    assert grade_band(None) is None
    assert grade_color(None) == UNGRADED_COLOR


def test_grade_color_is_band_color():
    assert grade_color(18) == EXCELLENT.color
    assert grade_color(5) == POOR.color


def test_grading_scales():
    assert get_grading_scale("standard") is STANDARD_SCALE
    assert get_grading_scale("nigerian") is NIGERIAN_SCALE
    assert get_grading_scale("unknown") is STANDARD_SCALE
    assert NIGERIAN_SCALE.max_score == 100
    assert NIGERIAN_SCALE.pass_mark == 40


def test_color_schemes_fall_back_to_standard():
    assert set(COLOR_SCHEMES) == {"standard", "green", "blue"}
    assert get_color_scheme("green") is COLOR_SCHEMES["green"]
    assert get_color_scheme("purple") is COLOR_SCHEMES["standard"]


def test_class_statistics():
    stats = compute_class_statistics([15.67, 14.58, 14.50, 12.63, 11.30, 9.5])

    assert stats.total_students == 6
    assert stats.class_average == pytest.approx((15.67 + 14.58 + 14.50 + 12.63 + 11.30 + 9.5) / 6)
    assert stats.highest_average == 15.67
    assert stats.lowest_average == 9.5
    assert stats.pass_count == 5
    assert stats.success_rate == 83.3


def test_class_statistics_pass_mark_is_inclusive():
    stats = compute_class_statistics([10.0, 9.99, 10.01])
    assert stats.pass_count == 2
    assert stats.success_rate == 66.7


def test_empty_class_statistics():
    stats = compute_class_statistics([])
    assert stats.total_students == 0
    assert stats.class_average == 0
    assert stats.success_rate == 0


def test_class_statistics_custom_pass_mark():
    stats = compute_class_statistics([35, 40, 80], pass_mark=NIGERIAN_SCALE.pass_mark)
    assert stats.pass_count == 2


@pytest.mark.parametrize(
    "score, code",
    [(16, "TB"), (14, "B"), (12, "AB"), (10, "P"), (9.5, "I")],
)
def test_appreciation_codes(score, code):
    assert appreciation_code(score) == code


def test_appreciation_labels():
    assert appreciation(17) == "Très bien"
    assert appreciation(17, language="en") == "Very good"
    assert appreciation(None) == "-"
    assert appreciation(45, max_score=100) == "Insuffisant"


def test_wrap_text():
    assert wrap_text("un deux trois quatre", 9) == ["un deux", "trois", "quatre"]
    assert wrap_text("anticonstitutionnellement ok", 5) == ["anticonstitutionnellement", "ok"]
    assert wrap_text(None, 10) == []


def test_band_labels():
    assert GOOD.label() == "Bien"
    assert GOOD.label("en") == "Good"
    assert POOR.label("en") == "Poor"
