"""
Grading tables shared by the document renderers.

Grade colours, pass marks and colour schemes used to be inline literals in
each renderer. They live here as data so another grading system (the
100-point Nigerian scale, for instance) is a new table, not new code.

A grade is placed in a band by its percentage of the subject's max score.
Bands are checked from the highest threshold down with ``>=``, so a value
sitting exactly on a threshold belongs to the higher band.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from reportlab.lib import colors
from reportlab.lib.colors import Color


@dataclass(frozen=True)
class GradeBand:
    threshold_percent: float
    color: Color
    label_fr: str
    label_en: str

    def label(self, language: str = "fr") -> str:
        return self.label_en if language == "en" else self.label_fr


@dataclass(frozen=True)
class GradingScale:
    name: str
    max_score: float
    pass_mark: float
    bands: tuple[GradeBand, ...]


UNGRADED_COLOR = Color(0.5, 0.5, 0.5)

# Thermometer bands used on master sheets (green / blue / orange / red)
DEFAULT_GRADE_BANDS: tuple[GradeBand, ...] = (
    GradeBand(75, Color(0, 0.6, 0), "Excellent", "Excellent"),
    GradeBand(60, Color(0, 0.4, 0.8), "Bien", "Good"),
    GradeBand(50, Color(0.8, 0.6, 0), "Passable", "Average"),
    GradeBand(0, Color(0.8, 0, 0), "Insuffisant", "Poor"),
)

STANDARD_SCALE = GradingScale(
    name="standard", max_score=20, pass_mark=10, bands=DEFAULT_GRADE_BANDS,
)

NIGERIAN_SCALE = GradingScale(
    name="nigerian", max_score=100, pass_mark=40, bands=DEFAULT_GRADE_BANDS,
)

GRADING_SCALES = {
    "standard": STANDARD_SCALE,
    "nigerian": NIGERIAN_SCALE,
}


def get_grading_scale(name: str) -> GradingScale:
    return GRADING_SCALES.get(name, STANDARD_SCALE)


def grade_band(
    grade: Optional[float],
    max_score: float = 20,
    bands: Sequence[GradeBand] = DEFAULT_GRADE_BANDS,
) -> Optional[GradeBand]:
    """Return the band for ``grade``, or None when ungraded."""
    if grade is None or max_score <= 0:
        return None

    percentage = grade * 100 / max_score
    for band in sorted(bands, key=lambda b: b.threshold_percent, reverse=True):
        if percentage >= band.threshold_percent:
            return band
    return None


def grade_color(
    grade: Optional[float],
    max_score: float = 20,
    bands: Sequence[GradeBand] = DEFAULT_GRADE_BANDS,
) -> Color:
    band = grade_band(grade, max_score, bands)
    return band.color if band else UNGRADED_COLOR


# --- Colour schemes ---


@dataclass(frozen=True)
class ColorScheme:
    primary: Color
    secondary: Color
    light_gray: Color
    border: Color


COLOR_SCHEMES = {
    "standard": ColorScheme(
        primary=Color(0.2, 0.3, 0.6),
        secondary=Color(0.7, 0.8, 0.9),
        light_gray=Color(0.95, 0.95, 0.95),
        border=Color(0.7, 0.7, 0.7),
    ),
    "green": ColorScheme(
        primary=Color(0.1, 0.5, 0.2),
        secondary=Color(0.7, 0.9, 0.7),
        light_gray=Color(0.95, 0.98, 0.95),
        border=Color(0.6, 0.8, 0.6),
    ),
    "blue": ColorScheme(
        primary=Color(0.1, 0.4, 0.7),
        secondary=Color(0.7, 0.8, 0.9),
        light_gray=Color(0.95, 0.97, 1),
        border=Color(0.6, 0.7, 0.9),
    ),
}

WHITE = colors.white
BLACK = colors.black


def get_color_scheme(name: str) -> ColorScheme:
    """Unknown scheme names fall back to the standard palette."""
    return COLOR_SCHEMES.get(name, COLOR_SCHEMES["standard"])


# --- Class statistics ---


@dataclass(frozen=True)
class ClassStatistics:
    total_students: int
    class_average: float
    highest_average: float
    lowest_average: float
    pass_count: int
    success_rate: float  # percent, one decimal


def compute_class_statistics(
    averages: Iterable[float], pass_mark: float = 10,
) -> ClassStatistics:
    """Mean, best, worst and pass rate of a class.

    An empty class yields all zeros rather than a division error.
    """
    values = list(averages)
    if not values:
        return ClassStatistics(0, 0.0, 0.0, 0.0, 0, 0.0)

    pass_count = sum(1 for value in values if value >= pass_mark)
    return ClassStatistics(
        total_students=len(values),
        class_average=sum(values) / len(values),
        highest_average=max(values),
        lowest_average=min(values),
        pass_count=pass_count,
        success_rate=round(pass_count / len(values) * 100, 1),
    )


# --- Appreciations ---

# Percent thresholds on the 20-point scale: 16 / 14 / 12 / 10
_APPRECIATIONS = (
    (80, "TB", "Très bien", "Very good"),
    (70, "B", "Bien", "Good"),
    (60, "AB", "Assez bien", "Fairly good"),
    (50, "P", "Passable", "Pass"),
    (0, "I", "Insuffisant", "Insufficient"),
)


def appreciation_code(score: float, max_score: float = 20) -> str:
    """Short discipline/appreciation code (TB, B, AB, P, I)."""
    percentage = score * 100 / max_score if max_score > 0 else 0
    for threshold, code, _, _ in _APPRECIATIONS:
        if percentage >= threshold:
            return code
    return "I"


def appreciation(score: Optional[float], max_score: float = 20, language: str = "fr") -> str:
    """Remark printed next to a grade when the teacher didn't write one."""
    if score is None:
        return "-"
    code = appreciation_code(score, max_score)
    for _, band_code, label_fr, label_en in _APPRECIATIONS:
        if band_code == code:
            return label_en if language == "en" else label_fr
    return "-"


def wrap_text(text: Optional[str], max_length: int) -> list[str]:
    """Greedy word wrap on character count.

    A single word longer than ``max_length`` gets a line of its own.
    """
    if not text:
        return []

    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= max_length:
            current = candidate
        else:
            if current:
                lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines
