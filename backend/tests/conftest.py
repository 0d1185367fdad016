"""
Test fixtures shared across all tests.

Architecture:
- Tests run against a throwaway SQLite file (aiosqlite). DATABASE_URL is set
  before the app is imported because the engine is created at import time.
- pytest's ini options set the asyncio loop scope to session so all tests
  share ONE event loop with the app's engine.
- Seed data is committed via the app's own AsyncSessionLocal.
- The HTTP test client uses the real FastAPI app with its own sessions.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_educafric.db"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from educafric.database import AsyncSessionLocal, Base, engine
from educafric.main import app
from educafric.models import School
from educafric.schemas.documents import MasterSheetData, StudentMasterData
from educafric.services.master_sheet_pdf import MasterSheetGenerator


@pytest_asyncio.fixture(scope="session")
async def setup_db():
    """Create all tables once before the test session, drop them after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def client(setup_db):
    """Async HTTP test client.

    Uses the real FastAPI app with its own database sessions.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# --- Seed data fixtures ---

@pytest_asyncio.fixture
async def test_school(setup_db):
    """A fully described secondary school."""
    school = School(
        name="Lycée Classique de Bafoussam",
        region="Ouest",
        department="Mifi",
        education_level="secondary",
        phone="+237 233 441 122",
        email="contact@lycee-bafoussam.cm",
        postal_box="B.P. 110 Bafoussam",
        address="Quartier Tamdja",
        director_name="M. TCHOUA Emmanuel",
    )
    async with AsyncSessionLocal() as session:
        session.add(school)
        await session.commit()
        await session.refresh(school)
    return school


@pytest_asyncio.fixture
async def bare_school(setup_db):
    """A primary school with nothing but its name."""
    school = School(name="École Publique de Mvog-Ada", education_level="base")
    async with AsyncSessionLocal() as session:
        session.add(school)
        await session.commit()
        await session.refresh(school)
    return school


# --- Document data fixtures ---

@pytest.fixture
def bulletin_payload() -> dict:
    """A valid bulletin request body (camelCase, as the dashboards send it)."""
    return {
        "student": {
            "firstName": "Aminata",
            "lastName": "Ngono",
            "className": "3ème B",
            "matricule": "22B017",
            "birthDate": "14/03/2010",
            "birthPlace": "Douala",
            "gender": "Féminin",
        },
        "school": {
            "schoolName": "Collège Saint Michel",
            "region": "Littoral",
            "department": "Wouri",
            "educationLevel": "secondary",
        },
        "subjects": [
            {"name": "Mathematiques", "t1": 14.5, "coefficient": 4, "teacher": "M. Essomba"},
            {"name": "Francais", "t1": "12", "coefficient": "3", "remark": "Peut mieux faire"},
            {"name": "Anglais", "t1": 16, "coefficient": 2},
        ],
        "summary": {
            "average": 14.05,
            "rank": 5,
            "classSize": 38,
            "conductScore": 16,
            "absences": 2,
            "lateness": 1,
            "observations": "Bon trimestre, doit rester concentree en classe.",
        },
        "term": 1,
        "academicYear": "2024-2025",
        "principalTeacher": "Mme Abena",
        "directorName": "M. Fouda",
    }


@pytest.fixture
def demo_master_sheet() -> MasterSheetData:
    return MasterSheetGenerator.generate_demo_data()


@pytest.fixture
def make_master_sheet():
    """Factory: the demo class with ``student_count`` generated students."""

    def _make(student_count: int) -> MasterSheetData:
        data = MasterSheetGenerator.generate_demo_data()
        students = []
        for i in range(student_count):
            grade = float(8 + (i % 12))
            students.append(StudentMasterData(
                id=i + 1,
                matricule=f"24C{i + 1:03d}",
                first_name=f"Eleve{i + 1}",
                last_name="TEST",
                grades={subject.id: grade for subject in data.subjects},
                average=grade,
                rank=i + 1,
                absences=i % 3,
            ))
        return data.model_copy(update={"students": students})

    return _make
