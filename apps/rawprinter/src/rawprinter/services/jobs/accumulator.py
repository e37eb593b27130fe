from __future__ import annotations

import logging
from typing import Callable

from rawprinter.services.jobs.store import JobRecord, JobRepository
from rawprinter.services.pjl.parser import parse_pjl
from rawprinter.services.pjl.responder import build_status_response
from rawprinter.services.pjl.types import ParsedJob

_LOGGER = logging.getLogger(__name__)

Responder = Callable[[ParsedJob], bytes | None]


def decode_buffer(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


class JobAccumulator:
    def __init__(
        self,
        store: JobRepository,
        *,
        responder: Responder = build_status_response,
    ) -> None:
        self._store = store
        self._responder = responder

    @property
    def store(self) -> JobRepository:
        return self._store

    def on_data(self, connection_id: str, chunk: bytes) -> tuple[ParsedJob, bytes | None]:
        """Append ``chunk`` to the connection's buffer and re-parse all of it.

        The whole buffer is parsed on every call, so the outcome does not
        depend on where chunk boundaries fall. The record is saved before the
        response is handed back, which keeps it even if sending fails.
        """
        existing = self._store.get(connection_id)
        raw = existing.raw + chunk if existing is not None else chunk

        parsed = parse_pjl(decode_buffer(raw))
        _LOGGER.debug("Parsed job %s: %s", connection_id, parsed.as_dict())

        response = self._responder(parsed)
        self._store.save(JobRecord(id=connection_id, raw=raw, parsed=parsed))
        return parsed, response
