"""
Pydantic schemas for the school directory endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from educafric.schemas.documents import EducationLevel


class SchoolCreate(BaseModel):
    """Request body for POST /schools."""
    name: str = Field(min_length=1, max_length=200)
    region: Optional[str] = Field(default=None, max_length=100)
    department: Optional[str] = Field(default=None, max_length=100)
    education_level: EducationLevel = "secondary"
    logo_url: Optional[str] = Field(default=None, max_length=500)
    phone: Optional[str] = Field(default=None, max_length=50)
    email: Optional[str] = Field(default=None, max_length=200)
    postal_box: Optional[str] = Field(default=None, max_length=100)
    address: Optional[str] = Field(default=None, max_length=300)
    director_name: Optional[str] = Field(default=None, max_length=200)


class SchoolResponse(BaseModel):
    """A school as stored in the directory."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    region: Optional[str] = None
    department: Optional[str] = None
    education_level: str
    logo_url: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    postal_box: Optional[str] = None
    address: Optional[str] = None
    director_name: Optional[str] = None
    created_at: datetime
