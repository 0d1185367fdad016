"""
Master sheet PDF generator: a teacher's overview of a whole class.

The sheet shows one row per student and one column per subject, with the
grade cells coloured on a thermometer scale (green ≥ 75%, blue ≥ 60%,
orange ≥ 50%, red below), followed by class statistics.

Layout (landscape A4 by default):
- Official Cameroonian header (shared with bulletins)
- Title and class / teacher information block
- Grade table: name | matricule | subjects... | average | rank | absences
- Class statistics (mean, best, lowest, pass rate)
- Footer with generation date and author

Rows that don't fit above the bottom margin are handled by the
``overflow`` option: ``truncate`` drops them (and logs how many),
``paginate`` continues the table on a new page, ``error`` raises
MasterSheetOverflowError.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from reportlab.lib.colors import Color
from reportlab.lib.pagesizes import A4, LETTER, landscape, portrait

from educafric.logging import DocumentLogger, get_logger
from educafric.schemas.documents import (
    HeaderData,
    MasterSheetData,
    MasterSheetOptions,
    SchoolInfo,
    StudentMasterData,
    SubjectInfo,
    TeacherInfo,
)
from educafric.services.grading import (
    WHITE,
    ColorScheme,
    GradingScale,
    compute_class_statistics,
    get_color_scheme,
    get_grading_scale,
    grade_color,
)
from educafric.services.pdf_header import render_header
from educafric.services.pdf_primitives import (
    HELVETICA,
    HELVETICA_BOLD,
    TIMES,
    TIMES_BOLD,
    PdfCanvas,
)
from educafric.services.validation import validate_pdf_data

MARGIN = 40
HEADER_ROW_HEIGHT = 40
ROW_HEIGHT = 25
# No new row starts below this Y
TABLE_BOTTOM_LIMIT = 100
# Statistics need this much room below the table
STATISTICS_MIN_Y = 150
FOOTER_Y = 50

NAME_COLUMN_WIDTH = 150
MATRICULE_COLUMN_WIDTH = 80
AVERAGE_COLUMN_WIDTH = 60
RANK_COLUMN_WIDTH = 40
ABSENCE_COLUMN_WIDTH = 40
MIN_GRADE_COLUMN_WIDTH = 40
# Name and matricule give up width before grade columns drop below the minimum
MIN_NAME_COLUMN_WIDTH = 90
MIN_MATRICULE_COLUMN_WIDTH = 50

FOOTER_GRAY = Color(0.5, 0.5, 0.5)

LABELS = {
    "fr": {
        "title": "FEUILLE DE MAÎTRE",
        "continued": "suite",
        "info": ("CLASSE:", "ANNÉE SCOLAIRE:", "TRIMESTRE:", "EFFECTIF:"),
        "students": "élèves",
        "teacher": "ENSEIGNANT:",
        "date": "DATE DE GÉNÉRATION:",
        "name": "NOM ET PRÉNOM",
        "matricule": "MATRICULE",
        "average": "MOY",
        "rank": "RANG",
        "absences": "ABS",
        "stats_title": "STATISTIQUES DE LA CLASSE",
        "stats": ("Moyenne de classe:", "Meilleure moyenne:", "Plus faible moyenne:", "Taux de réussite:"),
        "footer": "Document généré le {date} par {author}",
        "system": "Système EDUCAFRIC",
    },
    "en": {
        "title": "MASTER SHEET",
        "continued": "continued",
        "info": ("CLASS:", "ACADEMIC YEAR:", "TERM:", "STUDENTS:"),
        "students": "students",
        "teacher": "TEACHER:",
        "date": "GENERATION DATE:",
        "name": "FULL NAME",
        "matricule": "ID NUMBER",
        "average": "AVG",
        "rank": "RANK",
        "absences": "ABS",
        "stats_title": "CLASS STATISTICS",
        "stats": ("Class average:", "Highest average:", "Lowest average:", "Success rate:"),
        "footer": "Document generated on {date} by {author}",
        "system": "EDUCAFRIC System",
    },
}

DATE_FORMATS = {"fr": "%d/%m/%Y", "en": "%m/%d/%Y"}


class MasterSheetOverflowError(Exception):
    """The class doesn't fit on one page and the overflow policy is "error"."""

    def __init__(self, rendered: int, total: int):
        self.rendered = rendered
        self.total = total
        super().__init__(
            f"Master sheet overflow: only {rendered} of {total} students fit on the page"
        )


@dataclass
class MasterSheetRender:
    """Result of a render, with the counts tests and callers care about."""
    pdf: bytes
    page_count: int
    rendered_students: int
    skipped_students: int
    statistics_rendered: bool


@dataclass(frozen=True)
class ColumnLayout:
    table_width: float
    name: float
    matricule: float
    grade: float
    average: float
    rank: float
    absences: float

    def total_width(self, subject_count: int) -> float:
        return (
            self.name + self.matricule + self.grade * subject_count
            + self.average + self.rank + self.absences
        )


def page_dimensions(options: MasterSheetOptions) -> tuple[float, float]:
    base = LETTER if options.format == "Letter" else A4
    return landscape(base) if options.orientation == "landscape" else portrait(base)


def column_layout(page_width: float, subject_count: int, options: MasterSheetOptions) -> ColumnLayout:
    """Fixed columns first, the remaining width split evenly across subjects.

    When the subjects don't fit at their minimum width, the name and
    matricule columns shrink first; past their own minimums every grade
    column narrows so the table never runs past the right margin.
    """
    table_width = page_width - 2 * MARGIN
    rank = RANK_COLUMN_WIDTH if options.show_rankings else 0
    absences = ABSENCE_COLUMN_WIDTH if options.include_absences else 0
    name = NAME_COLUMN_WIDTH
    matricule = MATRICULE_COLUMN_WIDTH
    fixed = AVERAGE_COLUMN_WIDTH + rank + absences

    grade = MIN_GRADE_COLUMN_WIDTH
    if subject_count:
        available = table_width - fixed - name - matricule
        shortfall = MIN_GRADE_COLUMN_WIDTH * subject_count - available
        if shortfall > 0:
            slack = (name - MIN_NAME_COLUMN_WIDTH) + (matricule - MIN_MATRICULE_COLUMN_WIDTH)
            ratio = min(shortfall / slack, 1)
            name -= (name - MIN_NAME_COLUMN_WIDTH) * ratio
            matricule -= (matricule - MIN_MATRICULE_COLUMN_WIDTH) * ratio
            available = table_width - fixed - name - matricule
        grade = max(available, 0) / subject_count

    return ColumnLayout(
        table_width=table_width,
        name=name,
        matricule=matricule,
        grade=grade,
        average=AVERAGE_COLUMN_WIDTH,
        rank=rank,
        absences=absences,
    )


def header_from_school_info(school: SchoolInfo) -> HeaderData:
    return HeaderData(
        school_name=school.name,
        region=school.region,
        department=school.department,
        education_level=school.education_level,
        logo_url=school.logo_url,
        phone=school.phone or None,
        email=school.email or None,
        postal_box=school.boite_postale or school.address or None,
    )


class MasterSheetGenerator:
    """Renders a class master sheet.

    Usage:
        generator = MasterSheetGenerator()
        pdf_bytes = generator.generate_master_sheet(data, MasterSheetOptions())
    """

    def __init__(self, logger: Optional[DocumentLogger] = None):
        self.logger = logger or get_logger(__name__)

    # ------------------------------------------------------------------
    # PUBLIC API
    # ------------------------------------------------------------------

    def generate_master_sheet(
        self,
        data: Union[MasterSheetData, Mapping[str, Any]],
        options: Union[MasterSheetOptions, Mapping[str, Any], None] = None,
    ) -> bytes:
        return self.render(data, options).pdf

    def render(
        self,
        data: Union[MasterSheetData, Mapping[str, Any]],
        options: Union[MasterSheetOptions, Mapping[str, Any], None] = None,
    ) -> MasterSheetRender:
        """Draw the master sheet and report what made it onto the pages.

        Raises:
            TemplateValidationError: data or options don't match their schema.
            MasterSheetOverflowError: rows overflow under the "error" policy.
        """
        data = validate_pdf_data(MasterSheetData, data, "Master sheet data for PDF generation")
        options = validate_pdf_data(
            MasterSheetOptions, options if options is not None else {}, "Master sheet options",
        )
        self.logger.info(
            "master_sheet.generation_started",
            class_name=data.class_name,
            students=len(data.students),
            subjects=len(data.subjects),
            overflow=options.overflow,
        )

        labels = LABELS[options.language]
        colors = self.get_color_scheme(options.color_scheme)
        scale = get_grading_scale(options.grading_scale)
        width, height = page_dimensions(options)

        pdf = PdfCanvas(
            (width, height),
            title=f"{labels['title']} - {data.class_name}",
            default_font=HELVETICA,
            logger=self.logger,
        )
        draw_text = pdf.draw_text

        current_y = render_header(
            pdf, draw_text, TIMES_BOLD, TIMES, width, height,
            header_from_school_info(data.school_info),
            logger=self.logger,
        )
        current_y -= 20

        draw_text(f"{labels['title']} - {data.class_name}", 0, current_y,
                  font=TIMES_BOLD, size=16, color=colors.primary,
                  align="center", max_width=width)
        current_y -= 30

        self._render_info_block(draw_text, data, labels, options.language, current_y)
        current_y -= 80

        layout = column_layout(width, len(data.subjects), options)
        self._render_table_header(pdf, layout, data.subjects, labels, colors, current_y)
        current_y -= HEADER_ROW_HEIGHT

        # --- Student rows ---
        rendered = 0
        total = len(data.students)
        for index, student in enumerate(data.students):
            if index > 0 and current_y < TABLE_BOTTOM_LIMIT:
                if options.overflow == "error":
                    raise MasterSheetOverflowError(rendered, total)
                if options.overflow == "truncate":
                    self.logger.warning(
                        "master_sheet.rows_truncated",
                        class_name=data.class_name,
                        rendered=rendered,
                        skipped=total - rendered,
                    )
                    break
                current_y = self._continue_on_new_page(
                    pdf, data, layout, labels, colors, options.language,
                )

            self._render_student_row(
                pdf, layout, student, data.subjects, index, colors, scale, current_y,
            )
            current_y -= ROW_HEIGHT
            rendered += 1

        # --- Statistics ---
        statistics_rendered = False
        if options.include_statistics:
            if current_y <= STATISTICS_MIN_Y and options.overflow == "paginate":
                self._render_footer(draw_text, data, labels, options.language)
                pdf.new_page()
                # the statistics block starts 30pt below current_y
                current_y = height - MARGIN + 30
            if current_y > STATISTICS_MIN_Y:
                self._render_statistics(draw_text, data, labels, colors, scale, current_y)
                statistics_rendered = True
            else:
                self.logger.warning("master_sheet.statistics_skipped", class_name=data.class_name)

        self._render_footer(draw_text, data, labels, options.language)

        pdf_bytes = pdf.save()
        self.logger.info(
            "master_sheet.generated",
            class_name=data.class_name,
            size=len(pdf_bytes),
            pages=pdf.page_count,
            rendered=rendered,
        )
        return MasterSheetRender(
            pdf=pdf_bytes,
            page_count=pdf.page_count,
            rendered_students=rendered,
            skipped_students=total - rendered,
            statistics_rendered=statistics_rendered,
        )

    # ------------------------------------------------------------------
    # HELPERS EXPOSED FOR CALLERS
    # ------------------------------------------------------------------

    @staticmethod
    def get_color_scheme(scheme: str) -> ColorScheme:
        return get_color_scheme(scheme)

    @staticmethod
    def get_grade_color(grade: Optional[float], max_score: float = 20) -> Color:
        return grade_color(grade, max_score)

    # ------------------------------------------------------------------
    # SECTION RENDERERS
    # ------------------------------------------------------------------

    @staticmethod
    def _render_info_block(draw_text, data: MasterSheetData, labels: dict, language: str, y: float):
        values = (
            data.class_name,
            data.academic_year,
            data.term,
            f"{len(data.students)} {labels['students']}",
        )
        for i, (label, value) in enumerate(zip(labels["info"], values)):
            row_y = y - i * 15
            draw_text(label, MARGIN, row_y, font=HELVETICA_BOLD, size=10)
            draw_text(value, MARGIN + 100, row_y, font=HELVETICA, size=10, max_width=190)

        right = []
        if data.teacher:
            right.append((labels["teacher"], data.teacher.display_name))
        right.append((labels["date"], datetime.now().strftime(DATE_FORMATS[language])))
        for i, (label, value) in enumerate(right):
            row_y = y - i * 15
            draw_text(label, MARGIN + 300, row_y, font=HELVETICA_BOLD, size=10)
            draw_text(value, MARGIN + 440, row_y, font=HELVETICA, size=10)

    @staticmethod
    def _render_table_header(
        pdf: PdfCanvas,
        layout: ColumnLayout,
        subjects: list[SubjectInfo],
        labels: dict,
        colors: ColorScheme,
        y: float,
    ):
        pdf.draw_rect(MARGIN, y - HEADER_ROW_HEIGHT, layout.table_width, HEADER_ROW_HEIGHT,
                      fill=colors.primary, border=colors.border, border_width=1)

        text_y = y - 25
        x = MARGIN + 5
        pdf.draw_text(labels["name"], x, text_y, font=HELVETICA_BOLD, size=9,
                      color=WHITE, max_width=layout.name - 10)
        x += layout.name
        pdf.draw_text(labels["matricule"], x, text_y, font=HELVETICA_BOLD, size=9,
                      color=WHITE, max_width=layout.matricule - 10)
        x += layout.matricule

        for subject in subjects:
            name = subject.name if len(subject.name) <= 12 else subject.name[:10] + ".."
            pdf.draw_text(name, x, text_y, font=HELVETICA_BOLD, size=8, color=WHITE,
                          max_width=layout.grade - 5, align="center")
            x += layout.grade

        pdf.draw_text(labels["average"], x, text_y, font=HELVETICA_BOLD, size=9,
                      color=WHITE, max_width=layout.average - 5, align="center")
        x += layout.average

        if layout.rank:
            pdf.draw_text(labels["rank"], x, text_y, font=HELVETICA_BOLD, size=9,
                          color=WHITE, max_width=layout.rank - 5, align="center")
            x += layout.rank

        if layout.absences:
            pdf.draw_text(labels["absences"], x, text_y, font=HELVETICA_BOLD, size=9,
                          color=WHITE, max_width=layout.absences - 5, align="center")

    @staticmethod
    def _render_student_row(
        pdf: PdfCanvas,
        layout: ColumnLayout,
        student: StudentMasterData,
        subjects: list[SubjectInfo],
        index: int,
        colors: ColorScheme,
        scale: GradingScale,
        y: float,
    ):
        background = colors.light_gray if index % 2 == 0 else WHITE
        pdf.draw_rect(MARGIN, y - ROW_HEIGHT, layout.table_width, ROW_HEIGHT,
                      fill=background, border=colors.border, border_width=0.5)

        text_y = y - 15
        x = MARGIN + 5
        pdf.draw_text(f"{student.last_name} {student.first_name}", x, text_y,
                      font=HELVETICA, size=9, max_width=layout.name - 10)
        x += layout.name
        pdf.draw_text(student.matricule, x, text_y, font=HELVETICA, size=9,
                      max_width=layout.matricule - 10)
        x += layout.matricule

        for subject in subjects:
            grade = student.grades.get(subject.id)
            text = f"{grade:.1f}" if grade is not None else "-"
            pdf.draw_text(text, x, text_y, font=HELVETICA, size=9,
                          color=grade_color(grade, subject.max_score, scale.bands),
                          max_width=layout.grade - 5, align="center")
            x += layout.grade

        pdf.draw_text(f"{student.average:.2f}", x, text_y, font=HELVETICA_BOLD, size=9,
                      color=grade_color(student.average, scale.max_score, scale.bands),
                      max_width=layout.average - 5, align="center")
        x += layout.average

        if layout.rank:
            pdf.draw_text(str(student.rank), x, text_y, font=HELVETICA, size=9,
                          max_width=layout.rank - 5, align="center")
            x += layout.rank

        if layout.absences:
            absences = "-" if student.absences is None else str(student.absences)
            pdf.draw_text(absences, x, text_y, font=HELVETICA, size=9,
                          max_width=layout.absences - 5, align="center")

    def _continue_on_new_page(
        self,
        pdf: PdfCanvas,
        data: MasterSheetData,
        layout: ColumnLayout,
        labels: dict,
        colors: ColorScheme,
        language: str,
    ) -> float:
        """Close the page and repeat the table header on the next one."""
        self._render_footer(pdf.draw_text, data, labels, language)
        pdf.new_page()
        self.logger.debug("master_sheet.page_added", page=pdf.page_count)

        y = pdf.height - MARGIN
        pdf.draw_text(f"{labels['title']} - {data.class_name} ({labels['continued']})",
                      MARGIN, y, font=HELVETICA_BOLD, size=11, color=colors.primary)
        y -= 15
        self._render_table_header(pdf, layout, data.subjects, labels, colors, y)
        return y - HEADER_ROW_HEIGHT

    @staticmethod
    def _render_statistics(
        draw_text,
        data: MasterSheetData,
        labels: dict,
        colors: ColorScheme,
        scale: GradingScale,
        y: float,
    ):
        y -= 30
        draw_text(labels["stats_title"], MARGIN, y, font=HELVETICA_BOLD, size=12,
                  color=colors.primary)
        y -= 25

        stats = compute_class_statistics(
            (student.average for student in data.students), scale.pass_mark,
        )
        out_of = f"/{scale.max_score:g}"
        values = (
            f"{stats.class_average:.2f}{out_of}",
            f"{stats.highest_average:.2f}{out_of}",
            f"{stats.lowest_average:.2f}{out_of}",
            f"{stats.success_rate:.1f}% ({stats.pass_count}/{stats.total_students})",
        )
        for i, (label, value) in enumerate(zip(labels["stats"], values)):
            row_y = y - i * 15
            draw_text(label, MARGIN, row_y, font=HELVETICA_BOLD, size=10)
            draw_text(value, MARGIN + 150, row_y, font=HELVETICA, size=10)

    @staticmethod
    def _render_footer(draw_text, data: MasterSheetData, labels: dict, language: str):
        text = labels["footer"].format(
            date=datetime.now().strftime(DATE_FORMATS[language]),
            author=data.generated_by or labels["system"],
        )
        draw_text(text, MARGIN, FOOTER_Y, font=HELVETICA, size=8, color=FOOTER_GRAY)

    # ------------------------------------------------------------------
    # DEMO DATA
    # ------------------------------------------------------------------

    @staticmethod
    def generate_demo_data() -> MasterSheetData:
        """A complete six-subject, five-student class for demos and tests."""
        return MasterSheetData(
            class_id=1,
            class_name="6ème A",
            academic_year="2024-2025",
            term="Premier Trimestre",
            school_info=SchoolInfo(
                id=1,
                name="COLLÈGE BILINGUE EXCELLENCE YAOUNDÉ",
                address="BP 1234 Yaoundé",
                phone="+237 222 123 456",
                email="info@excellence-yaounde.cm",
                logo_url="/assets/school-logo.png",
                director_name="Dr. MENGUE Paul",
                region="CENTRE",
                department="MFOUNDI",
                boite_postale="BP 1234 Yaoundé",
            ),
            subjects=[
                SubjectInfo(id=1, name="Français", coefficient=4, teacher_name="Mme NDONGO"),
                SubjectInfo(id=2, name="Anglais", coefficient=3, teacher_name="Mr SMITH"),
                SubjectInfo(id=3, name="Mathématiques", coefficient=4, teacher_name="M. BIYA"),
                SubjectInfo(id=4, name="Sciences", coefficient=3, teacher_name="Dr EWANE"),
                SubjectInfo(id=5, name="Histoire", coefficient=2, teacher_name="Mme FOMO"),
                SubjectInfo(id=6, name="Géographie", coefficient=2, teacher_name="M. KOTTO"),
            ],
            students=[
                StudentMasterData(
                    id=1, matricule="23A001", first_name="Marie", last_name="FOSSO",
                    grades={1: 16.5, 2: 14.2, 3: 18.0, 4: 15.8, 5: 13.5, 6: 16.0},
                    average=15.67, rank=1, absences=2,
                ),
                StudentMasterData(
                    id=2, matricule="23A002", first_name="Jean", last_name="KAMGA",
                    grades={1: 15.0, 2: 13.8, 3: 16.5, 4: 14.2, 5: 12.8, 6: 15.2},
                    average=14.58, rank=2, absences=1,
                ),
                StudentMasterData(
                    id=3, matricule="23A003", first_name="Aïcha", last_name="MBALLA",
                    grades={1: 14.5, 2: 15.2, 3: 13.8, 4: 16.0, 5: 14.0, 6: 13.5},
                    average=14.50, rank=3, absences=0,
                ),
                StudentMasterData(
                    id=4, matricule="23A004", first_name="Paul", last_name="NGOUE",
                    grades={1: 12.5, 2: 11.8, 3: 14.0, 4: 13.2, 5: 11.5, 6: 12.8},
                    average=12.63, rank=4, absences=3,
                ),
                StudentMasterData(
                    id=5, matricule="23A005", first_name="Fatima", last_name="BELLO",
                    grades={1: 11.0, 2: 10.5, 3: 12.8, 4: 11.8, 5: 10.2, 6: 11.5},
                    average=11.30, rank=5, absences=1,
                ),
            ],
            teacher=TeacherInfo(id=1, first_name="Pauline", last_name="MENDOMO", title="Mme"),
            generated_by="Système EDUCAFRIC",
        )
