from educafric.models.models import Base, School

__all__ = [
    "Base",
    "School",
]
