"""Request, job and response types."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel

from .exceptions import InvalidTransition

logger = structlog.get_logger()


class RemoteStatus(str, Enum):
    """Job status as reported by the remote API."""

    QUEUED = "QUEUED"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw: Any) -> "RemoteStatus":
        """Map a raw status value to a member. Anything unrecognized is UNKNOWN."""
        if isinstance(raw, str):
            try:
                member = cls(raw)
            except ValueError:
                member = None
            if member is not None and member is not cls.UNKNOWN:
                return member
        logger.warning("Unrecognized remote job status", raw_status=raw)
        return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in (RemoteStatus.COMPLETE, RemoteStatus.FAILED)


class JobState(str, Enum):
    """Lifecycle of a remote job as seen by the poller."""

    SUBMITTED = "submitted"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.FAILED, JobState.TIMED_OUT)


@dataclass
class TranslationRequest:
    """An accepted upload waiting to be translated.

    Owns the temporary copy at ``file_path``; ``discard`` removes it once.
    """

    source_lang: str
    target_lang: str
    file_path: Path
    original_name: str
    _discarded: bool = field(default=False, repr=False)

    @property
    def discarded(self) -> bool:
        return self._discarded

    def discard(self) -> None:
        """Remove the temporary file. Later calls do nothing."""
        if self._discarded:
            return
        self._discarded = True
        try:
            self.file_path.unlink()
            logger.debug("Removed uploaded file", path=str(self.file_path))
        except FileNotFoundError:
            logger.warning("Uploaded file already gone", path=str(self.file_path))
        except OSError as e:
            logger.error(
                "Failed to remove uploaded file",
                path=str(self.file_path),
                error=str(e),
            )


@dataclass
class RemoteJob:
    """A job accepted by the remote API."""

    request_id: str
    status: RemoteStatus = RemoteStatus.QUEUED
    state: JobState = JobState.SUBMITTED
    polls: int = 0

    def apply(self, status: RemoteStatus) -> JobState:
        """Record one poll result and return the resulting state."""
        if self.state.is_terminal:
            raise InvalidTransition(
                f"Job {self.request_id} is {self.state.value}, cannot apply {status.value}"
            )
        self.polls += 1
        self.status = status
        if status is RemoteStatus.COMPLETE:
            self.state = JobState.COMPLETED
        elif status is RemoteStatus.FAILED:
            self.state = JobState.FAILED
        else:
            self.state = JobState.POLLING
        return self.state

    def expire(self) -> None:
        """Mark the job as having missed its deadline."""
        if self.state.is_terminal:
            raise InvalidTransition(
                f"Job {self.request_id} is {self.state.value}, cannot time out"
            )
        self.state = JobState.TIMED_OUT


class ErrorResponse(BaseModel):
    error: str
