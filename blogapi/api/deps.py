"""
Shared route dependencies and helpers.
"""

from __future__ import annotations

import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, TypeVar

import pydantic
from fastapi import Request, UploadFile
from pydantic import BaseModel

from blogapi.api.state import AppState
from blogapi.core.errors import ValidationError

ALLOWED_IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".gif", ".webp"}

ModelT = TypeVar("ModelT", bound=BaseModel)


def get_state(request: Request) -> AppState:
    return request.app.state.services


def parse(model: type[ModelT], **data) -> ModelT:
    """Build a request model from loose (form) fields, 400 on bad input."""
    try:
        return model(**data)
    except pydantic.ValidationError as e:
        raise ValidationError(describe_errors(e.errors())) from e


def describe_errors(errors: list[dict]) -> str:
    """First validation error as `field: message`."""
    if not errors:
        return "Invalid input"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    return f"{'.'.join(loc)}: {first.get('msg')}" if loc else str(first.get("msg"))


@asynccontextmanager
async def saved_upload(upload: UploadFile | None, upload_dir: str) -> AsyncIterator[Path]:
    """
    Write an uploaded image to a temp file and yield its path.

    The temp file is removed afterwards whatever happens.
    """
    if upload is None or not upload.filename:
        raise ValidationError("No image provided")

    suffix = Path(upload.filename).suffix.lower()
    if suffix not in ALLOWED_IMAGE_SUFFIXES:
        raise ValidationError(f"Unsupported image type: {suffix or 'none'}")

    Path(upload_dir).mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(dir=upload_dir, suffix=suffix, delete=False) as f:
        f.write(await upload.read())
        path = Path(f.name)

    try:
        yield path
    finally:
        path.unlink(missing_ok=True)
