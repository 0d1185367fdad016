"""
PDF download responses shared by the document routers.
"""

import re
import unicodedata

from fastapi.responses import Response


def safe_filename(name: str, max_length: int = 50) -> str:
    """ASCII-only filename stem: "6ème A" -> "6eme_A"."""
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^A-Za-z0-9_-]+", "_", ascii_name).strip("_")[:max_length]


def pdf_attachment(pdf_bytes: bytes, filename: str) -> Response:
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
