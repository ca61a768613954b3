"""API endpoint for document translation."""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from ..exceptions import RelayError
from ..schemas import ErrorResponse
from ..services.job_poller import JobPoller, abort_on_disconnect
from ..services.papago_client import PapagoDocumentClient
from ..services.result_stream import (
    content_type_for,
    download_headers,
    output_filename,
    relay,
)
from ..services.uploads import UploadReceiver

logger = structlog.get_logger()

router = APIRouter(tags=["translation"])


@router.post(
    "/translate",
    response_class=StreamingResponse,
    responses={
        200: {"description": "The translated document"},
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def translate_document(
    request: Request,
    source: Optional[str] = Form(None),
    target: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
):
    """
    Translate an uploaded document through the remote job API.

    Submits the file, polls until the job finishes, then streams the
    translated document back. The uploaded copy is removed once the
    response is done, whatever the outcome.
    """
    receiver: UploadReceiver = request.app.state.upload_receiver
    client: PapagoDocumentClient = request.app.state.papago_client
    poller: JobPoller = request.app.state.job_poller

    translation = await receiver.receive(source, target, file)
    streaming = False
    try:
        request_id = await abort_on_disconnect(client.submit(translation), request.is_disconnected)
        await poller.wait(request_id, is_disconnected=request.is_disconnected)
        upstream = await abort_on_disconnect(
            client.fetch_result(request_id), request.is_disconnected, request_id
        )

        filename = output_filename(translation.original_name, translation.target_lang)
        streaming = True
        return StreamingResponse(
            relay(upstream, on_close=translation.discard),
            media_type=content_type_for(filename),
            headers=download_headers(filename),
            background=BackgroundTask(translation.discard),
        )
    except RelayError as e:
        logger.error(
            "Translation request failed",
            filename=translation.original_name,
            source=translation.source_lang,
            target=translation.target_lang,
            error_type=type(e).__name__,
            error=e.message,
        )
        raise
    except Exception as e:
        logger.error(
            "Unexpected error during translation",
            filename=translation.original_name,
            error=str(e),
            exc_info=True,
        )
        raise RelayError("Translation failed: internal error") from e
    finally:
        if not streaming:
            translation.discard()
