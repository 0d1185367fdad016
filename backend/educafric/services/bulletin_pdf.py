"""
Bulletin (report card) PDF generator.

One student, one term, one A4 page, drawn top to bottom in a fixed order:

1. Official Cameroonian header (pdf_header.render_header)
2. Title block (BULLETIN DE NOTES + period)
3. Student identity, two columns
4. Subject table: T1/T2/T3 scores, coefficient, weighted total, remark, teacher
5. Summary line (average, rank, conduct) and attendance
6. Observations, two signature blocks, verification footer

Two policies decide what happens with imperfect input:

- ``on_validation_error="defaults"`` logs the validation error and prints the
  built-in demonstration bulletin, so the user always gets a document.
  ``"reject"`` raises TemplateValidationError instead.
- ``use_supplied_grades=True`` fills the table from the request's subjects.
  The literal demonstration table (DEMO_SUBJECT_ROWS) is only printed when
  there is no usable data or when the flag is turned off.

There is no pagination: rows that would run into the summary block are
skipped and logged.

Usage:
    generator = BulletinGenerator()
    pdf_bytes = generator.generate_bulletin({"student": {...}, "subjects": [...]})
"""

import secrets
import string
from datetime import datetime
from typing import Any, Literal, Optional

from reportlab.lib.colors import Color
from reportlab.lib.pagesizes import A4

from educafric.config import settings
from educafric.logging import DocumentLogger, get_logger
from educafric.schemas.documents import (
    BulletinData,
    BulletinSummary,
    StudentIdentity,
    SubjectGrade,
)
from educafric.services.grading import appreciation, wrap_text
from educafric.services.pdf_header import render_header, resolve_header_data
from educafric.services.pdf_primitives import TIMES, TIMES_BOLD, PdfCanvas
from educafric.services.validation import TemplateValidationError, validate_pdf_data

ValidationPolicy = Literal["defaults", "reject"]

TITLE_COLOR = Color(0, 0, 0.8)
LEFT_X = 40
RIGHT_X = 300
ROW_HEIGHT = 15
# Grade rows stop here so the summary, signatures and footer still fit
ROW_FLOOR = 250

# x position of each table column
COLUMN_X = {
    "name": 40,
    "t1": 200,
    "t2": 240,
    "t3": 280,
    "coef": 320,
    "total": 350,
    "remark": 400,
    "teacher": 480,
}
COLUMN_CAPTIONS = {
    "name": "Matière",
    "t1": "T1/20",
    "t2": "T2/20",
    "t3": "T3/20",
    "coef": "Coef",
    "total": "Total",
    "remark": "Remark",
    "teacher": "Teacher",
}

LABELS = {
    "fr": {
        "title": "BULLETIN DE NOTES",
        "period": "Période",
        "student": "Élève",
        "class": "Classe",
        "matricule": "Matricule",
        "born": "Né(e) le",
        "gender": "Sexe",
        "birth_place": "Lieu de naissance",
        "subjects": "MATIÈRES",
        "average": "Moyenne",
        "rank": "Rang",
        "conduct": "Conduite",
        "absences": "Absences",
        "lateness": "Retards",
        "observations": "Observations",
        "principal_teacher": "Le Professeur Principal",
        "director": "Le Directeur",
        "no_director": "Directeur non renseigné",
        "not_provided": "Non renseigné",
        "code": "Code",
        "verify": "Authentification",
        "signed": "Ce bulletin est authentifié par signature numérique EDUCAFRIC",
        "terms": ("Premier Trimestre", "Deuxième Trimestre", "Troisième Trimestre"),
    },
    "en": {
        "title": "REPORT CARD",
        "period": "Period",
        "student": "Student",
        "class": "Class",
        "matricule": "ID number",
        "born": "Born on",
        "gender": "Gender",
        "birth_place": "Place of birth",
        "subjects": "SUBJECTS",
        "average": "Average",
        "rank": "Rank",
        "conduct": "Conduct",
        "absences": "Absences",
        "lateness": "Lateness",
        "observations": "Observations",
        "principal_teacher": "The Class Teacher",
        "director": "The Principal",
        "no_director": "Principal not provided",
        "not_provided": "Not provided",
        "code": "Code",
        "verify": "Verification",
        "signed": "This report card is authenticated by EDUCAFRIC digital signature",
        "terms": ("First Term", "Second Term", "Third Term"),
    },
}

# --- Demonstration bulletin ---
# Printed when no usable data was supplied. Kept as literal strings so the
# sample document is stable.

DEMO_STUDENT = StudentIdentity(
    first_name="Jean",
    last_name="Kamga",
    class_name="6ème A",
    student_number="1",
    birth_date="Date non renseignée",
    birth_place="Yaoundé, Cameroun",
    gender="M",
)

DEMO_SUBJECT_ROWS = [
    {"name": "Mathématiques", "t1": "17.5", "t2": "0.00", "t3": "0.00", "coef": "4", "total": "70.0", "remark": "Très bien", "teacher": "M. Kouassi"},
    {"name": "Physique", "t1": "0.00", "t2": "17.5", "t3": "0.00", "coef": "3", "total": "52.5", "remark": "Très bien", "teacher": "Mme Diallo"},
    {"name": "Chimie", "t1": "16.3", "t2": "0.00", "t3": "0.00", "coef": "3", "total": "48.9", "remark": "Bien", "teacher": "M. Traoré"},
    {"name": "Biologie", "t1": "16.2", "t2": "0.00", "t3": "0.00", "coef": "3", "total": "48.6", "remark": "Bien", "teacher": "Mme Sow"},
    {"name": "Français", "t1": "16.9", "t2": "0.00", "t3": "0.00", "coef": "4", "total": "67.6", "remark": "Bien", "teacher": "M. Nkomo"},
    {"name": "Anglais", "t1": "17.1", "t2": "0.00", "t3": "0.00", "coef": "3", "total": "51.3", "remark": "Très bien", "teacher": "Mrs Johnson"},
    {"name": "Histoire", "t1": "17.0", "t2": "0.00", "t3": "0.00", "coef": "2", "total": "34.0", "remark": "Très bien", "teacher": "M. Ouédraogo"},
    {"name": "Géographie", "t1": "16.3", "t2": "0.00", "t3": "0.00", "coef": "2", "total": "32.6", "remark": "Bien", "teacher": "Mme Bamba"},
]

DEMO_SUMMARY = BulletinSummary(
    average=17.49,
    rank=1,
    class_size=42,
    conduct_score=18,
    conduct="Très bien",
    absences=0,
    lateness=0,
)

DEMO_PRINCIPAL_TEACHER = "Mme Diallo Fatou Marie"

_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_verification_code(last_name: str, year: int, preview: bool = False) -> str:
    """Verification code printed in the footer, e.g. ``EDU2024-KAM-7Q2XZA``."""
    letters = "".join(ch for ch in last_name.upper() if ch.isalpha())[:3] or "XXX"
    suffix = "".join(secrets.choice(_CODE_ALPHABET) for _ in range(6))
    parts = [f"EDU{year}", letters]
    if preview:
        parts.append("PREV")
    parts.append(suffix)
    return "-".join(parts)


def normalize_gender(gender: Optional[str]) -> str:
    value = (gender or "").strip().lower()
    if value in ("féminin", "feminin", "f", "female", "fille"):
        return "F"
    return "M"


def _format_score(score: Optional[float]) -> str:
    return "-" if score is None else f"{score:.2f}"


def _academic_year_start(academic_year: str) -> int:
    digits = academic_year[:4]
    return int(digits) if digits.isdigit() else datetime.now().year


def derive_summary(subjects: list[SubjectGrade], term: int) -> Optional[BulletinSummary]:
    """Coefficient-weighted average of the term's scores, on a /20 scale.

    Used when the caller sends grades but no summary. Returns None if no
    subject has a score for the term.
    """
    weighted = 0.0
    coefficients = 0.0
    for subject in subjects:
        score = subject.score_for_term(term)
        if score is None:
            continue
        weighted += (score * 20 / subject.max_score) * subject.coefficient
        coefficients += subject.coefficient
    if coefficients == 0:
        return None
    return BulletinSummary(average=round(weighted / coefficients, 2))


class BulletinGenerator:
    """Renders one student's term bulletin as a single-page PDF."""

    def __init__(
        self,
        use_supplied_grades: bool = True,
        on_validation_error: ValidationPolicy = "defaults",
        logger: Optional[DocumentLogger] = None,
    ):
        self.use_supplied_grades = use_supplied_grades
        self.on_validation_error = on_validation_error
        self.logger = logger or get_logger(__name__)

    # ------------------------------------------------------------------
    # PUBLIC API
    # ------------------------------------------------------------------

    def generate_bulletin(self, bulletin_data: Any = None) -> bytes:
        """Generate the bulletin and return the PDF bytes.

        Raises:
            TemplateValidationError: invalid data under the "reject" policy.
        """
        self.logger.info("bulletin.generation_started")
        data = self._validate(bulletin_data)

        pdf = PdfCanvas(A4, title=self._document_title(data), logger=self.logger)
        width, height = pdf.width, pdf.height
        draw_text = pdf.draw_text
        language = data.language if data else "fr"
        labels = LABELS[language]

        header_y = render_header(
            pdf, draw_text, TIMES_BOLD, TIMES, width, height,
            data.school if data else None,
            logger=self.logger,
        )

        term = data.term if data else 1
        academic_year = data.academic_year if data else "2024-2025"
        student = data.student if data else DEMO_STUDENT

        # --- Title block ---
        title_y = header_y - 15
        draw_text(labels["title"], 0, title_y, font=TIMES_BOLD, size=16,
                  color=TITLE_COLOR, align="center", max_width=width)
        draw_text(f"{labels['period']}: {academic_year}", 0, title_y - 18,
                  font=TIMES, size=11, align="center", max_width=width)

        # --- Student identity ---
        student_info_y = title_y - 50
        self._render_student(draw_text, student, labels, student_info_y)
        term_label = labels["terms"][term - 1]
        draw_text(f"{labels['period']}: {term_label} {academic_year}", LEFT_X,
                  student_info_y - 70, font=TIMES_BOLD, size=11)

        # --- Subject table ---
        table_start_y = student_info_y - 110
        draw_text(labels["subjects"], LEFT_X, table_start_y, font=TIMES_BOLD, size=11)
        header_row_y = table_start_y - 20
        for key, caption in COLUMN_CAPTIONS.items():
            draw_text(caption, COLUMN_X[key], header_row_y, font=TIMES_BOLD, size=9)

        rows = self._table_rows(data, language)
        first_row_y = table_start_y - 40
        last_row_y = first_row_y
        drawn = 0
        for index, row in enumerate(rows):
            y = first_row_y - index * ROW_HEIGHT
            if y < ROW_FLOOR:
                self.logger.warning(
                    "bulletin.rows_skipped",
                    skipped=len(rows) - index,
                    total=len(rows),
                )
                break
            self._render_row(draw_text, row, y, width)
            last_row_y = y
            drawn += 1

        # --- Summary ---
        summary_y = min(table_start_y - 180, last_row_y - 35)
        summary = self._summary(data)
        self._render_summary(draw_text, summary, language, summary_y)

        # --- Signatures ---
        principal_teacher = (
            data.principal_teacher if data else DEMO_PRINCIPAL_TEACHER
        ) or labels["not_provided"]
        director = (data.director_name if data else None) or labels["no_director"]
        draw_text(labels["principal_teacher"], LEFT_X, summary_y - 110, font=TIMES_BOLD, size=10)
        draw_text(principal_teacher, LEFT_X, summary_y - 130, font=TIMES, size=10)
        draw_text(labels["director"], RIGHT_X, summary_y - 110, font=TIMES_BOLD, size=10)
        draw_text(director, RIGHT_X, summary_y - 130, font=TIMES, size=10)

        # --- Verification footer ---
        code = generate_verification_code(
            student.last_name, _academic_year_start(academic_year), preview=data is None,
        )
        school = resolve_header_data(data.school if data else None)
        draw_text(f"{labels['code']}: {code}", LEFT_X, 60, font=TIMES, size=8)
        draw_text(f"{labels['verify']}: {settings.VERIFY_URL}", LEFT_X, 45, font=TIMES, size=8)
        draw_text(labels["signed"], LEFT_X, 30, font=TIMES, size=8)
        draw_text(f"{school.school_name} - Tel: {school.phone}", LEFT_X, 15, font=TIMES, size=8)

        pdf_bytes = pdf.save()
        self.logger.info(
            "bulletin.generated",
            size=len(pdf_bytes),
            rows=drawn,
            used_defaults=data is None,
            verification_code=code,
        )
        return pdf_bytes

    # ------------------------------------------------------------------
    # INPUT
    # ------------------------------------------------------------------

    def _validate(self, bulletin_data: Any) -> Optional[BulletinData]:
        """Validated data, or None meaning "print the demonstration bulletin"."""
        if bulletin_data is None:
            return None
        try:
            data = validate_pdf_data(
                BulletinData, bulletin_data, "Bulletin data for PDF generation",
            )
        except TemplateValidationError as e:
            if self.on_validation_error == "reject":
                raise
            self.logger.warning("bulletin.validation_failed_using_defaults", error=str(e))
            return None
        self.logger.debug("bulletin.input_validated")
        return data

    @staticmethod
    def _document_title(data: Optional[BulletinData]) -> str:
        student = data.student if data else DEMO_STUDENT
        return f"Bulletin - {student.first_name} {student.last_name}"

    def _table_rows(self, data: Optional[BulletinData], language: str) -> list[dict]:
        if data is None or not self.use_supplied_grades:
            return DEMO_SUBJECT_ROWS

        rows = []
        for subject in data.subjects:
            total = subject.weighted_total(data.term)
            term_score = subject.score_for_term(data.term)
            rows.append({
                "name": subject.name,
                "t1": _format_score(subject.t1),
                "t2": _format_score(subject.t2),
                "t3": _format_score(subject.t3),
                "coef": f"{subject.coefficient:g}",
                "total": "-" if total is None else f"{total:.1f}",
                "remark": subject.remark or appreciation(term_score, subject.max_score, language),
                "teacher": subject.teacher or "",
            })
        return rows

    def _summary(self, data: Optional[BulletinData]) -> Optional[BulletinSummary]:
        if data is None:
            return DEMO_SUMMARY
        if data.summary is not None:
            return data.summary
        if not self.use_supplied_grades:
            return DEMO_SUMMARY
        return derive_summary(data.subjects, data.term)

    # ------------------------------------------------------------------
    # SECTION RENDERERS
    # ------------------------------------------------------------------

    @staticmethod
    def _render_student(draw_text, student: StudentIdentity, labels: dict, y: float):
        missing = labels["not_provided"]
        draw_text(f"{labels['student']}: {student.first_name} {student.last_name}",
                  LEFT_X, y, font=TIMES, size=11)
        draw_text(f"{labels['class']}: {student.class_name or missing}",
                  LEFT_X, y - 20, font=TIMES, size=11)
        draw_text(f"{labels['matricule']}: {student.student_number or missing}",
                  LEFT_X, y - 40, font=TIMES, size=11)

        draw_text(f"{labels['born']}: {student.birth_date or missing}",
                  RIGHT_X, y, font=TIMES, size=11)
        draw_text(f"{labels['gender']}: {normalize_gender(student.gender)}",
                  RIGHT_X, y - 20, font=TIMES, size=11)
        draw_text(f"{labels['birth_place']}: {student.birth_place or missing}",
                  RIGHT_X, y - 40, font=TIMES, size=11)

    @staticmethod
    def _render_row(draw_text, row: dict, y: float, page_width: float):
        draw_text(row["name"], COLUMN_X["name"], y, font=TIMES, size=9,
                  max_width=COLUMN_X["t1"] - COLUMN_X["name"] - 5)
        for key in ("t1", "t2", "t3", "coef", "total"):
            draw_text(row[key], COLUMN_X[key], y, font=TIMES, size=9)
        draw_text(row["remark"], COLUMN_X["remark"], y, font=TIMES, size=9,
                  max_width=COLUMN_X["teacher"] - COLUMN_X["remark"] - 5)
        draw_text(row["teacher"], COLUMN_X["teacher"], y, font=TIMES, size=8,
                  max_width=page_width - COLUMN_X["teacher"] - 20)

    @staticmethod
    def _render_summary(draw_text, summary: Optional[BulletinSummary], language: str, y: float):
        labels = LABELS[language]
        if summary is None:
            draw_text(f"{labels['average']}: -        {labels['rank']}: -        "
                      f"{labels['conduct']}: -", LEFT_X, y, font=TIMES_BOLD, size=11)
            return

        rank = "-"
        if summary.rank is not None:
            rank = f"{summary.rank}/{summary.class_size}" if summary.class_size else str(summary.rank)

        conduct = summary.conduct
        if conduct is None and summary.conduct_score is not None:
            conduct = appreciation(summary.conduct_score, 20, language)
        conduct_text = "-"
        if summary.conduct_score is not None:
            conduct_text = f"{summary.conduct_score:g}/20 ({conduct})"
        elif conduct:
            conduct_text = conduct

        draw_text(
            f"{labels['average']}: {summary.average:.2f}/20        "
            f"{labels['rank']}: {rank}        {labels['conduct']}: {conduct_text}",
            LEFT_X, y, font=TIMES_BOLD, size=11,
        )
        draw_text(f"{labels['conduct']}: {conduct or '-'}", LEFT_X, y - 20, font=TIMES, size=10)
        draw_text(f"{labels['absences']}: {summary.absences}", 200, y - 20, font=TIMES, size=10)
        draw_text(f"{labels['lateness']}: {summary.lateness}", 320, y - 20, font=TIMES, size=10)

        lines = wrap_text(summary.observations, 95)[:3]
        if lines:
            draw_text(f"{labels['observations']}:", LEFT_X, y - 40, font=TIMES_BOLD, size=10)
            for i, line in enumerate(lines):
                draw_text(line, LEFT_X, y - 54 - i * 12, font=TIMES, size=9)
