"""Receives uploaded documents into the upload directory."""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Optional

import structlog
from fastapi import UploadFile

from ..exceptions import LocalIOError, MissingField, MissingFile
from ..schemas import TranslationRequest

logger = structlog.get_logger()

CHUNK_SIZE = 1024 * 1024


class UploadReceiver:
    """Copies each upload to a uniquely named file under ``upload_dir``."""

    def __init__(self, upload_dir: Path):
        self.upload_dir = Path(upload_dir)

    def ensure_directory(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    async def receive(
        self,
        source: Optional[str],
        target: Optional[str],
        file: Optional[UploadFile],
    ) -> TranslationRequest:
        """
        Validate the form fields and persist the file.

        Raises MissingField / MissingFile before anything touches disk.
        """
        source = (source or "").strip()
        target = (target or "").strip()
        if not source or not target:
            raise MissingField()

        if file is None or not file.filename:
            raise MissingFile()

        original_name = Path(file.filename.replace("\\", "/")).name
        if not original_name:
            raise MissingFile()

        self.ensure_directory()
        dest = self.upload_dir / f"{uuid.uuid4().hex}{Path(original_name).suffix.lower()}"

        size = 0
        try:
            with open(dest, "wb") as f:
                while True:
                    chunk = await file.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    f.write(chunk)
                    size += len(chunk)
        except OSError as e:
            logger.error("Failed to store upload", path=str(dest), error=str(e))
            dest.unlink(missing_ok=True)
            raise LocalIOError(f"Could not store uploaded file: {e}") from e

        logger.info(
            "Upload received",
            filename=original_name,
            size=size,
            source=source,
            target=target,
        )
        return TranslationRequest(
            source_lang=source,
            target_lang=target,
            file_path=dest,
            original_name=original_name,
        )
