"""Raw printer emulator: TCP print listener plus the management API."""

from __future__ import annotations

import asyncio
import logging
import socket
from threading import Event, Thread
from typing import Any

import uvicorn

from rawprinter.config import get_settings
from rawprinter.listener import PrinterListener
from rawprinter.main import create_app
from rawprinter.services.jobs.accumulator import JobAccumulator
from rawprinter.services.jobs.store import JobStore

_LOGGER = logging.getLogger(__name__)


class RawPrinter:
    """Runs the print listener and the HTTP API over one shared job store.

    ``serve()`` runs both on the current event loop until ``stop()``;
    ``start()`` does the same from a background thread, which is the usual
    way to embed the emulator in a test suite::

        with RawPrinter(port=0, api_port=0) as printer:
            ...  # print to printer.port, inspect printer.store
    """

    def __init__(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        api_host: str | None = None,
        api_port: int | None = None,
        store: JobStore | None = None,
        read_size: int | None = None,
        log_level: str | None = None,
        startup_timeout_seconds: float | None = None,
    ) -> None:
        settings = get_settings()
        self.store = store if store is not None else JobStore()
        self.accumulator = JobAccumulator(self.store)
        self.listener = PrinterListener(
            self.accumulator,
            host=host if host is not None else settings.host,
            port=port if port is not None else settings.port,
            read_size=read_size if read_size is not None else settings.read_size,
        )
        self.app = create_app(self.store)
        self.api_host = api_host if api_host is not None else settings.api_host
        self.api_port = api_port if api_port is not None else settings.api_port
        self.log_level = (log_level if log_level is not None else settings.log_level).lower()
        self.startup_timeout_seconds = (
            startup_timeout_seconds
            if startup_timeout_seconds is not None
            else settings.startup_timeout_seconds
        )

        self._api_server: uvicorn.Server | None = None
        self._api_socket: socket.socket | None = None
        self._thread: Thread | None = None
        self._ready = Event()
        self._stop_requested = False
        self._error: BaseException | None = None

    @property
    def port(self) -> int | None:
        return self.listener.bound_port

    @property
    def bound_api_port(self) -> int | None:
        if self._api_socket is None or self._api_socket.fileno() == -1:
            return None
        return self._api_socket.getsockname()[1]

    async def serve(self) -> None:
        api_socket = socket.create_server((self.api_host, self.api_port))
        self._api_socket = api_socket
        server = uvicorn.Server(
            uvicorn.Config(self.app, log_level=self.log_level, lifespan="off")
        )
        self._api_server = server
        if self._stop_requested:
            server.should_exit = True

        try:
            await self.listener.start()
            api_task = asyncio.create_task(server.serve(sockets=[api_socket]))
            while not server.started and not api_task.done():
                await asyncio.sleep(0.05)
            if server.started:
                _LOGGER.info(
                    "Listening on %s:%s for http api",
                    self.api_host,
                    api_socket.getsockname()[1],
                )
                self._ready.set()
            await api_task
        finally:
            await self.listener.stop()
            api_socket.close()
            _LOGGER.info("Raw printer stopped")

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            _LOGGER.warning("Raw printer is already running")
            return

        self._ready.clear()
        self._stop_requested = False
        self._error = None
        self._thread = Thread(target=self._run, name="rawprinter", daemon=True)
        self._thread.start()

        if not self._ready.wait(self.startup_timeout_seconds) or self._error is not None:
            error = self._error
            self.stop()
            raise RuntimeError(f"Raw printer failed to start: {error!r}") from error

    def stop(self) -> None:
        _LOGGER.info("Stopping raw printer")
        self._stop_requested = True
        if self._api_server is not None:
            self._api_server.should_exit = True
        if self._thread is not None:
            self._thread.join(self.startup_timeout_seconds)
            self._thread = None

    def _run(self) -> None:
        try:
            asyncio.run(self.serve())
        except (Exception, SystemExit) as exc:
            # uvicorn exits via SystemExit when startup fails
            self._error = exc
            _LOGGER.exception("Raw printer failed")
        finally:
            self._ready.set()

    def __enter__(self) -> RawPrinter:
        self.start()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.stop()
