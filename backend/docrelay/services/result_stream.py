"""Naming and relaying the translated document."""

from __future__ import annotations

import re
from pathlib import Path
from typing import AsyncIterator, Callable, Optional

import httpx
import structlog

logger = structlog.get_logger()

MEDIA_TYPES = {
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".pdf": "application/pdf",
}
DEFAULT_MEDIA_TYPE = "application/octet-stream"

_UNSAFE = re.compile(r"[^A-Za-z0-9]")


def sanitize_language(target_lang: str) -> str:
    """Replace every character outside [A-Za-z0-9] with an underscore."""
    return _UNSAFE.sub("_", target_lang)


def output_filename(original_name: str, target_lang: str) -> str:
    """``report.pptx`` + ``ko-KR`` -> ``report_ko_KR.pptx``."""
    path = Path(original_name)
    return f"{path.stem}_{sanitize_language(target_lang)}{path.suffix}"


def content_type_for(filename: str) -> str:
    return MEDIA_TYPES.get(Path(filename).suffix.lower(), DEFAULT_MEDIA_TYPE)


def download_headers(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


async def relay(
    response: httpx.Response,
    on_close: Optional[Callable[[], None]] = None,
) -> AsyncIterator[bytes]:
    """
    Yield the upstream body chunk by chunk.

    Nothing is read ahead: the next chunk is requested only after the
    previous one has been handed to the ASGI server, which waits for the
    socket before asking again. The upstream response is closed and
    ``on_close`` runs however the stream ends.
    """
    sent = 0
    try:
        async for chunk in response.aiter_bytes():
            sent += len(chunk)
            yield chunk
        logger.info("Result relayed", url=str(response.url), bytes=sent)
    except httpx.HTTPError as e:
        logger.error("Result stream broke", url=str(response.url), bytes=sent, error=str(e))
        raise
    finally:
        await response.aclose()
        if on_close is not None:
            on_close()
