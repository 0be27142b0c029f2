"""
Blog API - server entry point.

    uvicorn blogapi.main:app --reload

or simply `python -m blogapi.main`.
"""

from __future__ import annotations

import uvicorn

from blogapi.api.app import create_app
from blogapi.config import get_settings

app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "blogapi.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
