"""Serves the browser front end from the public directory."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import structlog
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

logger = structlog.get_logger()

router = APIRouter(tags=["frontend"], include_in_schema=False)


def _resolve(root: Path, relative: str) -> Optional[Path]:
    """Return the file under ``root`` named by ``relative``, or None if absent or outside root."""
    root = root.resolve()
    candidate = (root / relative.lstrip("/")).resolve()
    if candidate != root and root not in candidate.parents:
        return None
    return candidate if candidate.is_file() else None


def _public_dir(request: Request) -> Path:
    return Path(request.app.state.settings.public_dir)


def _index(root: Path, *parts: str) -> FileResponse:
    index = _resolve(root, "/".join([*parts, "index.html"]))
    if index is None:
        raise HTTPException(status_code=404, detail="Not found")
    return FileResponse(index)


@router.get("/user_guide/{path:path}")
async def user_guide(path: str, request: Request):
    """Serve a guide page; unknown guide paths fall back to the guide index."""
    root = _public_dir(request)
    target = _resolve(root, f"user_guide/{path}")
    logger.debug("Serving guide", path=path, found=target is not None)
    if target is not None:
        return FileResponse(target)
    return _index(root, "user_guide")


@router.get("/{path:path}")
async def spa(path: str, request: Request):
    """Serve a public file, or the app shell for any other path."""
    root = _public_dir(request)
    if path:
        target = _resolve(root, path)
        if target is not None:
            return FileResponse(target)
    return _index(root)
