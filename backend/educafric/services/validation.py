"""
Template data validation for PDF generation.

Document data comes from user input (names, grades, comments typed into
the dashboards), so it goes through a pydantic schema before it reaches a
renderer. Numeric strings are coerced, strings are stripped, and anything
out of range is rejected with a descriptive error.

Usage:
    data = validate_pdf_data(BulletinData, payload, "Bulletin data for PDF generation")
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class TemplateValidationError(ValueError):
    """Raised when template data does not match its schema."""

    def __init__(self, context: str, errors: list[dict]):
        self.context = context
        self.errors = errors
        details = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ())) or '<root>'}: {err.get('msg')}"
            for err in errors
        )
        count = len(errors)
        super().__init__(
            f"{context}: {count} validation error{'s' if count != 1 else ''}: {details}"
        )


def validate_pdf_data(schema: type[ModelT], data: Any, context: str) -> ModelT:
    """Validate ``data`` against ``schema`` and return the parsed model.

    Raises:
        TemplateValidationError: data is missing, malformed, or out of range.
    """
    if isinstance(data, schema):
        # Re-run validation so a model built with model_construct() is checked too
        data = data.model_dump(by_alias=True)

    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        raise TemplateValidationError(context, exc.errors()) from exc
