from __future__ import annotations

from dataclasses import dataclass
import logging
from threading import Lock
from typing import Protocol, Sequence

from rawprinter.services.pjl.types import ParsedJob

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class JobRecord:
    id: str
    raw: bytes
    parsed: ParsedJob


class JobRepository(Protocol):
    def list_jobs(self) -> Sequence[JobRecord]: ...

    def get(self, job_id: str) -> JobRecord | None: ...

    def save(self, record: JobRecord) -> None: ...

    def delete(self, job_id: str) -> bool: ...

    def clear(self) -> None: ...


class JobStore:
    """In-memory job records keyed by connection id, in arrival order.

    Records are immutable and replaced whole under the lock, so a delete or
    clear racing an update never leaves a partially written record behind.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._jobs: dict[str, JobRecord] = {}

    def list_jobs(self) -> list[JobRecord]:
        with self._lock:
            return list(self._jobs.values())

    def get(self, job_id: str) -> JobRecord | None:
        with self._lock:
            return self._jobs.get(job_id)

    def save(self, record: JobRecord) -> None:
        with self._lock:
            self._jobs[record.id] = record

    def delete(self, job_id: str) -> bool:
        with self._lock:
            removed = self._jobs.pop(job_id, None)
        if removed is None:
            return False
        _LOGGER.info("Deleted job %s", job_id)
        return True

    def clear(self) -> None:
        with self._lock:
            count = len(self._jobs)
            self._jobs.clear()
        _LOGGER.info("Cleared %d job(s)", count)

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
