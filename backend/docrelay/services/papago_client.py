"""Client for the remote job-based document translation API."""

from __future__ import annotations

from typing import Any, Optional

import httpx
import structlog

from ..config import Settings
from ..exceptions import (
    InvalidResponse,
    NetworkError,
    UpstreamError,
    UpstreamTimeout,
)
from ..schemas import RemoteStatus, TranslationRequest

logger = structlog.get_logger()

# Upstream error bodies are logged, never echoed to the caller in full
_BODY_EXCERPT = 300


def _nested(payload: Any, *keys: str) -> Any:
    """Walk ``payload`` through ``keys``; None as soon as a level is missing."""
    for key in keys:
        if not isinstance(payload, dict):
            return None
        payload = payload.get(key)
    return payload


class PapagoDocumentClient:
    """
    Wraps the three remote operations: submit, poll status, fetch result.

    One pooled httpx.AsyncClient carries the base URL and both credential
    headers. Every call applies its own timeout and maps failures onto
    UpstreamTimeout, UpstreamError, NetworkError or InvalidResponse.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.submit_timeout = settings.submit_timeout
        self.status_timeout = settings.status_timeout
        self.download_timeout = settings.download_timeout
        self._client = httpx.AsyncClient(
            base_url=settings.api_base,
            headers=settings.auth_headers,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # =========================================================================
    # Operations
    # =========================================================================

    async def submit(self, request: TranslationRequest) -> str:
        """Upload the document and return the remote request id."""
        with open(request.file_path, "rb") as fh:
            files = {"file": (request.original_name, fh, "application/octet-stream")}
            data = {"source": request.source_lang, "target": request.target_lang}
            response = await self._send(
                "submit",
                self.submit_timeout,
                "POST",
                "/translate",
                data=data,
                files=files,
            )

        payload = self._json(response, "submit")
        request_id = _nested(payload, "data", "requestId")
        if request_id is None or request_id == "":
            logger.error(
                "Submit response has no request id",
                filename=request.original_name,
                body=response.text[:_BODY_EXCERPT],
            )
            raise InvalidResponse("Invalid requestId")

        request_id = str(request_id)
        logger.info(
            "Translation job submitted",
            request_id=request_id,
            filename=request.original_name,
            source=request.source_lang,
            target=request.target_lang,
        )
        return request_id

    async def poll_status(self, request_id: str) -> RemoteStatus:
        """Return the current status of a submitted job."""
        response = await self._send(
            "status",
            self.status_timeout,
            "GET",
            "/status",
            params={"requestId": request_id},
        )
        payload = self._json(response, "status")
        status = RemoteStatus.parse(_nested(payload, "data", "status"))
        logger.debug("Polled job status", request_id=request_id, status=status.value)
        return status

    async def fetch_result(self, request_id: str) -> httpx.Response:
        """
        Open the translated document as a live stream.

        The status line is checked before returning; the body is left
        unread. The caller must close the returned response.
        """
        response = await self._send(
            "download",
            self.download_timeout,
            "GET",
            "/download",
            params={"requestId": request_id},
            stream=True,
        )
        logger.info(
            "Download stream opened",
            request_id=request_id,
            content_length=response.headers.get("content-length"),
        )
        return response

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _send(
        self,
        operation: str,
        timeout: float,
        method: str,
        url: str,
        stream: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        request = self._client.build_request(method, url, timeout=timeout, **kwargs)
        try:
            response = await self._client.send(request, stream=stream)
        except httpx.TimeoutException as e:
            logger.error("Remote call timed out", operation=operation, timeout=timeout)
            raise UpstreamTimeout(operation, timeout) from e
        except httpx.RequestError as e:
            logger.error("Remote call failed", operation=operation, error=str(e))
            raise NetworkError(operation, str(e)) from e

        if response.is_success:
            return response

        body = ""
        if stream:
            try:
                await response.aread()
                body = response.text[:_BODY_EXCERPT]
            except httpx.HTTPError as e:
                logger.warning("Could not read error body", operation=operation, error=str(e))
            finally:
                await response.aclose()
        else:
            body = response.text[:_BODY_EXCERPT]
        logger.error(
            "Remote API error",
            operation=operation,
            status_code=response.status_code,
            response=body,
        )
        raise UpstreamError(operation, response.status_code, body)

    @staticmethod
    def _json(response: httpx.Response, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            logger.error(
                "Remote response is not JSON",
                operation=operation,
                body=response.text[:_BODY_EXCERPT],
            )
            raise InvalidResponse(f"{operation}: response is not valid JSON") from e
