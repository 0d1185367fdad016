"""
Unit tests for the master sheet generator.

Row capacity of a landscape A4 sheet is 9 students, portrait A4 holds 19;
a continuation page (landscape) holds 17.
"""

import re

import pytest
from reportlab.lib.pagesizes import A4, LETTER, landscape

from educafric.schemas.documents import MasterSheetOptions
from educafric.services.grading import COLOR_SCHEMES, DEFAULT_GRADE_BANDS, UNGRADED_COLOR
from educafric.services.master_sheet_pdf import (
    MARGIN,
    MIN_GRADE_COLUMN_WIDTH,
    MIN_MATRICULE_COLUMN_WIDTH,
    MIN_NAME_COLUMN_WIDTH,
    NAME_COLUMN_WIDTH,
    MasterSheetGenerator,
    MasterSheetOverflowError,
    column_layout,
    header_from_school_info,
    page_dimensions,
)
from educafric.services.pdf_primitives import PdfCanvas
from educafric.services.validation import TemplateValidationError


class RecordingLogger:
    def __init__(self):
        self.events = []

    def debug(self, event, **kw):
        self.events.append(("debug", event, kw))

    def info(self, event, **kw):
        self.events.append(("info", event, kw))

    def warning(self, event, **kw):
        self.events.append(("warning", event, kw))

    def error(self, event, **kw):
        self.events.append(("error", event, kw))


@pytest.fixture
def drawn(monkeypatch):
    """(text, color) for every draw_text call."""
    calls = []
    original = PdfCanvas.draw_text

    def recording_draw_text(self, value, x, y, **kwargs):
        calls.append((str(value), kwargs.get("color")))
        return original(self, value, x, y, **kwargs)

    monkeypatch.setattr(PdfCanvas, "draw_text", recording_draw_text)
    return calls


@pytest.fixture
def drawn_at(monkeypatch):
    """text -> x for every draw_text call."""
    positions = {}
    original = PdfCanvas.draw_text

    def recording_draw_text(self, value, x, y, **kwargs):
        positions[str(value)] = x
        return original(self, value, x, y, **kwargs)

    monkeypatch.setattr(PdfCanvas, "draw_text", recording_draw_text)
    return positions


def _texts(drawn):
    return [text for text, _ in drawn]


def _page_count(pdf: bytes) -> int:
    return len(re.findall(rb"/Type /Page\b", pdf))


@pytest.mark.parametrize("color_scheme", ["standard", "green", "blue"])
@pytest.mark.parametrize("orientation", ["landscape", "portrait"])
def test_demo_sheet_renders_for_every_scheme_and_orientation(
    demo_master_sheet, color_scheme, orientation,
):
    options = MasterSheetOptions(color_scheme=color_scheme, orientation=orientation)

    pdf = MasterSheetGenerator().generate_master_sheet(demo_master_sheet, options)

    assert pdf.startswith(b"%PDF")
    assert _page_count(pdf) == 1


def test_default_options(demo_master_sheet):
    result = MasterSheetGenerator().render(demo_master_sheet)

    assert result.page_count == 1
    assert result.rendered_students == 5
    assert result.skipped_students == 0
    assert result.statistics_rendered is True


def test_page_dimensions():
    assert page_dimensions(MasterSheetOptions()) == landscape(A4)
    portrait_letter = page_dimensions(MasterSheetOptions(format="Letter", orientation="portrait"))
    assert portrait_letter == LETTER


def test_letter_format_renders(demo_master_sheet):
    options = MasterSheetOptions(format="Letter", language="en")
    assert MasterSheetGenerator().render(demo_master_sheet, options).page_count == 1


def test_column_layout():
    width = landscape(A4)[0]
    layout = column_layout(width, 6, MasterSheetOptions())

    assert layout.table_width == width - 80
    assert layout.rank == 40
    assert layout.absences == 40
    assert layout.grade == pytest.approx((width - 80 - 370) / 6)

    assert layout.total_width(6) == pytest.approx(layout.table_width)

    # Four subjects still fit on portrait A4 once name and matricule give way
    portrait_options = MasterSheetOptions(orientation="portrait")
    four = column_layout(A4[0], 4, portrait_options)
    assert four.grade == pytest.approx(MIN_GRADE_COLUMN_WIDTH)
    assert four.name < NAME_COLUMN_WIDTH

    six = column_layout(A4[0], 6, portrait_options)
    assert six.name == MIN_NAME_COLUMN_WIDTH
    assert six.matricule == MIN_MATRICULE_COLUMN_WIDTH
    assert six.grade < MIN_GRADE_COLUMN_WIDTH
    assert six.total_width(6) <= six.table_width + 1e-6

    no_extras = column_layout(
        width, 6, MasterSheetOptions(show_rankings=False, include_absences=False),
    )
    assert no_extras.rank == 0
    assert no_extras.absences == 0
    assert no_extras.grade > layout.grade


def test_table_content(demo_master_sheet, drawn):
    MasterSheetGenerator().render(demo_master_sheet)
    texts = _texts(drawn)

    assert "FEUILLE DE MAÎTRE - 6ème A" in texts
    assert "NOM ET PRÉNOM" in texts
    assert "FOSSO Marie" in texts
    assert "23A001" in texts
    assert "16.5" in texts
    assert "15.67" in texts
    assert "5 élèves" in texts
    assert "Mme Pauline MENDOMO" in texts
    assert "Mathématiq.." in texts      # long subject names are shortened
    assert "COLLÈGE BILINGUE EXCELLENCE YAOUNDÉ" in texts


def test_english_labels(demo_master_sheet, drawn):
    MasterSheetGenerator().render(demo_master_sheet, MasterSheetOptions(language="en"))
    texts = _texts(drawn)

    assert "MASTER SHEET - 6ème A" in texts
    assert "FULL NAME" in texts
    assert "CLASS STATISTICS" in texts
    assert "5 students" in texts


def test_grade_cells_are_colored_by_band(demo_master_sheet, drawn):
    excellent, good, average, poor = DEFAULT_GRADE_BANDS
    student = demo_master_sheet.students[0]
    student.grades = {1: 15.0, 2: 12.0, 3: 10.0, 4: 9.0, 5: None, 6: 20.0}

    MasterSheetGenerator().render(demo_master_sheet)
    colors = {text: color for text, color in drawn}

    assert colors["15.0"] == excellent.color
    assert colors["12.0"] == good.color
    assert colors["10.0"] == average.color
    assert colors["9.0"] == poor.color
    assert colors["-"] == UNGRADED_COLOR


def test_missing_grade_is_a_dash(demo_master_sheet, drawn):
    demo_master_sheet.students[4].grades = {}
    MasterSheetGenerator().render(demo_master_sheet)

    assert _texts(drawn).count("-") >= 6


def test_optional_columns_can_be_hidden(demo_master_sheet, drawn):
    options = MasterSheetOptions(show_rankings=False, include_absences=False)
    MasterSheetGenerator().render(demo_master_sheet, options)
    texts = _texts(drawn)

    assert "RANG" not in texts
    assert "ABS" not in texts


def test_statistics_values(demo_master_sheet, drawn):
    MasterSheetGenerator().render(demo_master_sheet)
    texts = _texts(drawn)

    # mean of 15.67, 14.58, 14.50, 12.63, 11.30
    assert "13.74/20" in texts
    assert "15.67/20" in texts
    assert "11.30/20" in texts
    assert "100.0% (5/5)" in texts


def test_statistics_can_be_disabled(demo_master_sheet, drawn):
    result = MasterSheetGenerator().render(
        demo_master_sheet, MasterSheetOptions(include_statistics=False),
    )

    assert result.statistics_rendered is False
    assert "STATISTIQUES DE LA CLASSE" not in _texts(drawn)


def test_nigerian_scale(demo_master_sheet, drawn):
    for student in demo_master_sheet.students:
        student.average = student.average * 5
    options = MasterSheetOptions(grading_scale="nigerian")

    MasterSheetGenerator().render(demo_master_sheet, options)
    colors = {text: color for text, color in drawn}

    assert "78.35/100" in colors
    assert colors["78.35"] == DEFAULT_GRADE_BANDS[0].color


def test_footer(demo_master_sheet, drawn):
    MasterSheetGenerator().render(demo_master_sheet)
    assert any(
        text.startswith("Document généré le ") and text.endswith(" par Système EDUCAFRIC")
        for text in _texts(drawn)
    )


def test_empty_class(demo_master_sheet):
    demo_master_sheet.students = []
    demo_master_sheet.subjects = []

    result = MasterSheetGenerator().render(demo_master_sheet)

    assert result.pdf.startswith(b"%PDF")
    assert result.rendered_students == 0


def test_unknown_color_scheme_uses_standard():
    assert MasterSheetGenerator.get_color_scheme("purple") is COLOR_SCHEMES["standard"]


def test_get_grade_color():
    assert MasterSheetGenerator.get_grade_color(15) == DEFAULT_GRADE_BANDS[0].color
    assert MasterSheetGenerator.get_grade_color(None) == UNGRADED_COLOR


# --- Overflow policies ---


def test_full_page_fits_without_overflow(make_master_sheet):
    result = MasterSheetGenerator().render(make_master_sheet(9))

    assert result.rendered_students == 9
    assert result.skipped_students == 0
    assert result.page_count == 1


def test_truncate_drops_rows_and_logs(make_master_sheet):
    logger = RecordingLogger()

    result = MasterSheetGenerator(logger=logger).render(
        make_master_sheet(30), MasterSheetOptions(overflow="truncate"),
    )

    assert result.page_count == 1
    assert _page_count(result.pdf) == 1
    assert result.rendered_students == 9
    assert result.skipped_students == 21
    truncated = [kw for level, event, kw in logger.events if event == "master_sheet.rows_truncated"]
    assert truncated == [{"class_name": "6ème A", "rendered": 9, "skipped": 21}]
    # No room left for statistics
    assert result.statistics_rendered is False


def test_paginate_continues_on_new_pages(make_master_sheet, drawn):
    result = MasterSheetGenerator().render(
        make_master_sheet(30), MasterSheetOptions(overflow="paginate"),
    )

    assert result.rendered_students == 30
    assert result.skipped_students == 0
    assert result.page_count == 3
    assert _page_count(result.pdf) == 3
    assert result.statistics_rendered is True
    texts = _texts(drawn)
    assert texts.count("NOM ET PRÉNOM") == 3
    assert "FEUILLE DE MAÎTRE - 6ème A (suite)" in texts


def test_paginate_moves_statistics_to_a_new_page(make_master_sheet):
    result = MasterSheetGenerator().render(
        make_master_sheet(9), MasterSheetOptions(overflow="paginate"),
    )

    assert result.page_count == 2
    assert result.statistics_rendered is True


def test_error_policy_raises(make_master_sheet):
    with pytest.raises(MasterSheetOverflowError) as exc_info:
        MasterSheetGenerator().render(
            make_master_sheet(30), MasterSheetOptions(overflow="error"),
        )

    assert exc_info.value.rendered == 9
    assert exc_info.value.total == 30


def test_error_policy_passes_when_rows_fit(make_master_sheet):
    result = MasterSheetGenerator().render(
        make_master_sheet(15), MasterSheetOptions(overflow="error", orientation="portrait"),
    )
    assert result.rendered_students == 15


def test_header_from_school_info(demo_master_sheet):
    header = header_from_school_info(demo_master_sheet.school_info)

    assert header.school_name == "COLLÈGE BILINGUE EXCELLENCE YAOUNDÉ"
    assert header.postal_box == "BP 1234 Yaoundé"
    assert header.phone == "+237 222 123 456"


def test_demo_data():
    data = MasterSheetGenerator.generate_demo_data()

    assert data.class_name == "6ème A"
    assert len(data.subjects) == 6
    assert len(data.students) == 5
    assert [s.rank for s in data.students] == [1, 2, 3, 4, 5]


def test_accepts_plain_dicts(demo_master_sheet):
    payload = demo_master_sheet.model_dump(mode="json", by_alias=True)

    result = MasterSheetGenerator().render(payload, {"orientation": "portrait", "language": "en"})

    assert result.rendered_students == 5


def test_invalid_data_raises_validation_error(demo_master_sheet):
    payload = demo_master_sheet.model_dump(mode="json", by_alias=True)
    payload["students"][0]["average"] = -3

    with pytest.raises(TemplateValidationError) as exc_info:
        MasterSheetGenerator().render(payload)
    assert "students.0.average" in str(exc_info.value)


@pytest.mark.parametrize("subject_count", [4, 6, 10])
@pytest.mark.parametrize("orientation", ["landscape", "portrait"])
def test_column_layout_never_exceeds_table_width(subject_count, orientation):
    options = MasterSheetOptions(orientation=orientation)
    layout = column_layout(page_dimensions(options)[0], subject_count, options)

    assert layout.total_width(subject_count) <= layout.table_width + 1e-6


def test_portrait_header_columns_stay_inside_margin(demo_master_sheet, drawn_at):
    options = MasterSheetOptions(orientation="portrait")
    MasterSheetGenerator().render(demo_master_sheet, options)
    width = page_dimensions(options)[0]

    assert drawn_at["RANG"] < drawn_at["ABS"] < width - MARGIN
    assert drawn_at["MOY"] < drawn_at["RANG"]


@pytest.mark.parametrize("grades", [{1: -5.0}, {2: 25.0}])
def test_out_of_range_grade_is_rejected(demo_master_sheet, grades):
    payload = demo_master_sheet.model_dump(mode="json", by_alias=True)
    payload["students"][0]["grades"].update({str(k): v for k, v in grades.items()})

    with pytest.raises(TemplateValidationError):
        MasterSheetGenerator().render(payload)


def test_grade_checked_against_subject_max_score(demo_master_sheet):
    payload = demo_master_sheet.model_dump(mode="json", by_alias=True)
    payload["subjects"][0]["maxScore"] = 100
    payload["students"][0]["grades"]["1"] = 85

    result = MasterSheetGenerator().render(payload)
    assert result.rendered_students == 5

    payload["students"][0]["grades"]["2"] = 85
    with pytest.raises(TemplateValidationError) as exc_info:
        MasterSheetGenerator().render(payload)
    assert "outside [0, 20]" in str(exc_info.value)
