"""
School directory API.

1. POST /schools — Register a school
2. GET /schools/{id} — Read a school
3. GET /schools/{id}/header — The header block printed on its documents
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from educafric.database import get_db
from educafric.logging import get_logger
from educafric.models import School
from educafric.schemas.documents import HeaderData
from educafric.schemas.schools import SchoolCreate, SchoolResponse
from educafric.services.pdf_header import resolve_header_data
from educafric.services.schools import get_school, school_to_header_data

router = APIRouter(prefix="/api/v1/schools", tags=["schools"])

logger = get_logger(__name__)


@router.post("", response_model=SchoolResponse, status_code=201)
async def create_school(
    request: SchoolCreate,
    db: AsyncSession = Depends(get_db),
):
    school = School(**request.model_dump())
    db.add(school)
    await db.commit()
    await db.refresh(school)

    logger.info("school.created", school_id=school.id, name=school.name)
    return school


@router.get("/{school_id}", response_model=SchoolResponse)
async def read_school(
    school_id: int,
    db: AsyncSession = Depends(get_db),
):
    school = await get_school(db, school_id)
    if not school:
        raise HTTPException(status_code=404, detail="School not found")
    return school


@router.get("/{school_id}/header", response_model=HeaderData)
async def read_school_header(
    school_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Header fields as they will be printed, defaults filled in."""
    school = await get_school(db, school_id)
    if not school:
        raise HTTPException(status_code=404, detail="School not found")
    return resolve_header_data(school_to_header_data(school))
