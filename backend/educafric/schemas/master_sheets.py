"""
Request bodies for the master sheet endpoints.
"""

from typing import Optional

from pydantic import Field

from educafric.schemas.documents import (
    DocumentModel,
    Language,
    MasterSheetData,
    MasterSheetOptions,
)


class MasterSheetGenerateRequest(DocumentModel):
    """POST /master-sheets/generate.

    When ``school_id`` is set, the stored school replaces ``data.school_info``
    in the header.
    """
    data: MasterSheetData
    school_id: Optional[int] = None
    options: MasterSheetOptions = Field(default_factory=MasterSheetOptions)


class MasterSheetDemoRequest(DocumentModel):
    language: Language = "fr"
    color_scheme: str = "standard"
