"""
Pydantic schemas for the data printed on official school documents.

These are the inputs of the PDF renderers. They are built fresh for every
generation request and thrown away once the bytes are produced.

JSON payloads use camelCase (``firstName``, ``maxScore``) like the rest of
the Educafric API; Python code uses the snake_case attribute names. Both
spellings are accepted on input.
"""

from typing import Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

EducationLevel = Literal["base", "secondary"]
Language = Literal["fr", "en"]


class DocumentModel(BaseModel):
    """Shared config: camelCase aliases, stripped strings."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# --- Header / identity ---


class HeaderData(DocumentModel):
    """School identity block of the official header.

    Every field is optional. The header renderer substitutes defaults for
    anything missing or empty, so a partially filled header still prints.
    """
    school_name: Optional[str] = Field(
        default=None,
        max_length=200,
        validation_alias=AliasChoices("schoolName", "school_name", "name"),
    )
    region: Optional[str] = Field(default=None, max_length=100)
    department: Optional[str] = Field(default=None, max_length=100)
    education_level: Optional[EducationLevel] = None
    logo_url: Optional[str] = Field(default=None, max_length=500)
    phone: Optional[str] = Field(default=None, max_length=50)
    email: Optional[str] = Field(default=None, max_length=200)
    postal_box: Optional[str] = Field(default=None, max_length=100)


class StudentIdentity(DocumentModel):
    """Read-only identity of the student a bulletin is issued to."""
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    class_name: Optional[str] = Field(default=None, max_length=100)
    student_number: Optional[str] = Field(
        default=None,
        max_length=50,
        validation_alias=AliasChoices("studentNumber", "student_number", "matricule"),
    )
    birth_date: Optional[str] = Field(default=None, max_length=50)
    birth_place: Optional[str] = Field(default=None, max_length=100)
    gender: Optional[str] = Field(default=None, max_length=20)


# --- Bulletin ---


class SubjectGrade(DocumentModel):
    """One row of the bulletin grade table.

    Scores are per term (T1..T3) on a ``max_score`` scale (20 by default).
    ``None`` means the subject was not graded for that term.
    """
    name: str = Field(min_length=1, max_length=100)
    t1: Optional[float] = None
    t2: Optional[float] = None
    t3: Optional[float] = None
    coefficient: float = Field(gt=0, le=20)
    max_score: float = Field(default=20, gt=0)
    total: Optional[float] = Field(default=None, ge=0)
    remark: Optional[str] = Field(default=None, max_length=100)
    teacher: Optional[str] = Field(default=None, max_length=100)

    @model_validator(mode="after")
    def check_score_range(self) -> "SubjectGrade":
        for term_field in ("t1", "t2", "t3"):
            score = getattr(self, term_field)
            if score is not None and not 0 <= score <= self.max_score:
                raise ValueError(
                    f"{term_field} score {score} is outside [0, {self.max_score:g}]"
                )
        return self

    def score_for_term(self, term: int) -> Optional[float]:
        return getattr(self, f"t{term}", None)

    def weighted_total(self, term: int) -> Optional[float]:
        """Supplied total, or term score × coefficient."""
        if self.total is not None:
            return self.total
        score = self.score_for_term(term)
        if score is None:
            return None
        return round(score * self.coefficient, 2)


class BulletinSummary(DocumentModel):
    """Term results computed upstream (average, rank, conduct, attendance)."""
    average: float = Field(ge=0, le=20)
    rank: Optional[int] = Field(default=None, ge=1)
    class_size: Optional[int] = Field(default=None, ge=1)
    conduct_score: Optional[float] = Field(default=None, ge=0, le=20)
    conduct: Optional[str] = Field(default=None, max_length=50)
    absences: int = Field(default=0, ge=0)
    lateness: int = Field(default=0, ge=0)
    observations: Optional[str] = Field(default=None, max_length=1000)


class BulletinData(DocumentModel):
    """Validated bulletin template data."""
    student: StudentIdentity
    school: Optional[HeaderData] = None
    subjects: list[SubjectGrade] = Field(default_factory=list, max_length=40)
    summary: Optional[BulletinSummary] = None
    term: int = Field(default=1, ge=1, le=3)
    academic_year: str = Field(default="2024-2025", max_length=20)
    principal_teacher: Optional[str] = Field(default=None, max_length=100)
    director_name: Optional[str] = Field(default=None, max_length=100)
    language: Language = "fr"


# --- Master sheet ---


class SchoolInfo(DocumentModel):
    id: Optional[int] = None
    name: str = Field(min_length=1, max_length=200)
    address: str = ""
    phone: str = ""
    email: str = ""
    logo_url: Optional[str] = None
    director_name: Optional[str] = None
    region: Optional[str] = None
    department: Optional[str] = None
    education_level: EducationLevel = "secondary"
    boite_postale: Optional[str] = None


class SubjectInfo(DocumentModel):
    id: int
    name: str = Field(min_length=1, max_length=100)
    coefficient: float = Field(default=1, gt=0)
    teacher_name: str = ""
    max_score: float = Field(default=20, gt=0)


class StudentMasterData(DocumentModel):
    """One master sheet row. Rank is produced upstream and is not re-checked."""
    id: int
    matricule: str = ""
    first_name: str
    last_name: str
    grades: dict[int, Optional[float]] = Field(default_factory=dict)
    average: float = Field(ge=0)
    rank: int = Field(ge=1)
    absences: Optional[int] = Field(default=None, ge=0)

    @field_validator("grades")
    @classmethod
    def check_non_negative_grades(cls, grades: dict[int, Optional[float]]) -> dict[int, Optional[float]]:
        for subject_id, score in grades.items():
            if score is not None and score < 0:
                raise ValueError(f"grade {score} for subject {subject_id} is negative")
        return grades


class TeacherInfo(DocumentModel):
    id: int
    first_name: str
    last_name: str
    title: Optional[str] = None

    @property
    def display_name(self) -> str:
        return f"{self.title or ''} {self.first_name} {self.last_name}".strip()


class MasterSheetData(DocumentModel):
    class_id: int
    class_name: str = Field(min_length=1, max_length=100)
    academic_year: str
    term: str
    school_info: SchoolInfo
    subjects: list[SubjectInfo] = Field(default_factory=list)
    students: list[StudentMasterData] = Field(default_factory=list)
    teacher: Optional[TeacherInfo] = None
    generated_by: Optional[str] = None

    @model_validator(mode="after")
    def check_grades_within_max_score(self) -> "MasterSheetData":
        """Each grade must fit its subject's maxScore; unknown subject ids are ignored."""
        max_scores = {subject.id: subject.max_score for subject in self.subjects}
        for student in self.students:
            for subject_id, score in student.grades.items():
                max_score = max_scores.get(subject_id)
                if score is not None and max_score is not None and score > max_score:
                    raise ValueError(
                        f"student {student.id}: grade {score:g} for subject {subject_id} "
                        f"is outside [0, {max_score:g}]"
                    )
        return self


class MasterSheetOptions(DocumentModel):
    language: Language = "fr"
    format: Literal["A4", "Letter"] = "A4"
    orientation: Literal["landscape", "portrait"] = "landscape"
    include_statistics: bool = True
    include_absences: bool = True
    show_rankings: bool = True
    # standard, green or blue; unknown names render with the standard palette
    color_scheme: str = "standard"
    # What happens when the rows don't fit on the page
    overflow: Literal["truncate", "paginate", "error"] = "truncate"
    grading_scale: Literal["standard", "nigerian"] = "standard"
