"""Drives a submitted job to a terminal state."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from ..exceptions import ClientDisconnected, JobFailed, JobTimedOut
from ..schemas import JobState, RemoteJob, RemoteStatus
from .papago_client import PapagoDocumentClient

logger = structlog.get_logger()

DisconnectCheck = Callable[[], Awaitable[bool]]
T = TypeVar("T")

# How often an outstanding remote call re-checks the caller
DISCONNECT_CHECK_INTERVAL = 0.25


async def _cancel(task: asyncio.Future) -> None:
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)


async def _wait_for_disconnect(is_disconnected: DisconnectCheck, interval: float) -> None:
    while not await is_disconnected():
        await asyncio.sleep(interval)


async def abort_on_disconnect(
    awaitable: Awaitable[T],
    is_disconnected: Optional[DisconnectCheck],
    request_id: Optional[str] = None,
    interval: float = DISCONNECT_CHECK_INTERVAL,
) -> T:
    """
    Await ``awaitable`` unless the caller goes away first.

    The call races a watcher polling ``is_disconnected``. When the watcher
    wins, the call is cancelled and ClientDisconnected is raised. A call
    that finishes in the same step as the watcher keeps its result.
    """
    if is_disconnected is None:
        return await awaitable

    call = asyncio.ensure_future(awaitable)
    watcher = asyncio.ensure_future(_wait_for_disconnect(is_disconnected, interval))
    try:
        done, _ = await asyncio.wait({call, watcher}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        await _cancel(call)
        await _cancel(watcher)
        raise

    if call in done:
        await _cancel(watcher)
        return call.result()

    await _cancel(call)
    watcher.result()
    logger.info("Caller disconnected, remote call abandoned", request_id=request_id)
    raise ClientDisconnected(request_id)


class JobPoller:
    """
    Polls job status until COMPLETE, FAILED or the deadline.

    The deadline is wall-clock time from the start of ``wait``, independent
    of how many polls happened. Between polls the poller sleeps a fixed
    interval, never past the deadline.
    """

    def __init__(
        self,
        client: PapagoDocumentClient,
        poll_interval: float = 1.5,
        deadline: float = 12 * 60,
        disconnect_interval: float = DISCONNECT_CHECK_INTERVAL,
    ):
        self.client = client
        self.poll_interval = poll_interval
        self.deadline = deadline
        self.disconnect_interval = disconnect_interval

    async def wait(
        self,
        request_id: str,
        is_disconnected: Optional[DisconnectCheck] = None,
    ) -> RemoteJob:
        """
        Poll until the job completes.

        Returns the completed RemoteJob. Raises JobFailed, JobTimedOut, or
        ClientDisconnected when ``is_disconnected`` reports the caller gone.
        """
        loop = asyncio.get_running_loop()
        end = loop.time() + self.deadline
        job = RemoteJob(request_id=request_id)

        while True:
            if is_disconnected is not None and await is_disconnected():
                logger.info("Caller disconnected, abandoning job", request_id=request_id, polls=job.polls)
                raise ClientDisconnected(request_id)

            status = await abort_on_disconnect(
                self.client.poll_status(request_id),
                is_disconnected,
                request_id,
                interval=self.disconnect_interval,
            )
            state = job.apply(status)

            if state is JobState.COMPLETED:
                logger.info("Translation job complete", request_id=request_id, polls=job.polls)
                return job
            if state is JobState.FAILED:
                logger.error("Translation job failed remotely", request_id=request_id, polls=job.polls)
                raise JobFailed(request_id)
            if status is RemoteStatus.UNKNOWN:
                logger.warning("Job status unknown, still polling", request_id=request_id, polls=job.polls)

            remaining = end - loop.time()
            if remaining <= 0:
                break
            await abort_on_disconnect(
                asyncio.sleep(min(self.poll_interval, remaining)),
                is_disconnected,
                request_id,
                interval=self.disconnect_interval,
            )
            if loop.time() >= end:
                break

        job.expire()
        logger.error(
            "Translation job timed out",
            request_id=request_id,
            polls=job.polls,
            last_status=job.status.value,
            deadline=self.deadline,
        )
        raise JobTimedOut(request_id, self.deadline)
