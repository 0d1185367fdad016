"""
School directory lookups.

Documents print the school's identity in the official header. Callers can
either send it inline or reference a school stored in the directory; this
module maps the stored row onto the document schemas.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from educafric.models import School
from educafric.schemas.documents import HeaderData, SchoolInfo


async def get_school(db: AsyncSession, school_id: int) -> Optional[School]:
    result = await db.execute(select(School).where(School.id == school_id))
    return result.scalar_one_or_none()


def school_to_header_data(school: School) -> HeaderData:
    """Header fields for a stored school. Empty columns stay None so the
    header renderer falls back to its defaults."""
    return HeaderData(
        school_name=school.name,
        region=school.region,
        department=school.department,
        education_level=school.education_level,
        logo_url=school.logo_url,
        phone=school.phone,
        email=school.email,
        postal_box=school.postal_box or school.address,
    )


def school_to_info(school: School) -> SchoolInfo:
    return SchoolInfo(
        id=school.id,
        name=school.name,
        address=school.address or "",
        phone=school.phone or "",
        email=school.email or "",
        logo_url=school.logo_url,
        director_name=school.director_name,
        region=school.region,
        department=school.department,
        education_level=school.education_level,
        boite_postale=school.postal_box,
    )
