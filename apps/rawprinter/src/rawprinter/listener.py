"""TCP listener that feeds raw print streams into the job accumulator."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from uuid import uuid4

from rawprinter.services.jobs.accumulator import JobAccumulator

_LOGGER = logging.getLogger(__name__)


class PrinterConnection:
    """One accepted client socket; owns the connection id of its job."""

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        accumulator: JobAccumulator,
        *,
        read_size: int,
    ) -> None:
        self.reader = reader
        self.writer = writer
        self.accumulator = accumulator
        self.read_size = read_size
        self.connection_id = str(uuid4())
        self.peer = writer.get_extra_info("peername")

    async def handle(self) -> None:
        _LOGGER.info("Client connected: %s (job %s)", self.peer, self.connection_id)
        try:
            while True:
                chunk = await self.reader.read(self.read_size)
                if not chunk:
                    break
                _LOGGER.debug("Received %d byte(s) for job %s", len(chunk), self.connection_id)
                _, response = self.accumulator.on_data(self.connection_id, chunk)
                if response is not None:
                    await self._send(response)
        except Exception:
            _LOGGER.exception("Error handling client %s (job %s)", self.peer, self.connection_id)
        finally:
            _LOGGER.info("Client disconnected: %s (job %s)", self.peer, self.connection_id)
            self.close()
            with contextlib.suppress(ConnectionError, OSError):
                await self.writer.wait_closed()

    async def _send(self, response: bytes) -> None:
        try:
            self.writer.write(response)
            await self.writer.drain()
        except (ConnectionError, OSError) as exc:
            _LOGGER.warning("Failed to send status to job %s: %s", self.connection_id, exc)
            return
        _LOGGER.info("Sent %d byte status report to job %s", len(response), self.connection_id)

    def close(self) -> None:
        if not self.writer.is_closing():
            self.writer.close()


class PrinterListener:
    """Accepts raw print connections, one job per connection."""

    def __init__(
        self,
        accumulator: JobAccumulator,
        *,
        host: str = "0.0.0.0",
        port: int = 9100,
        read_size: int = 4096,
    ) -> None:
        self.accumulator = accumulator
        self.host = host
        self.port = port
        self.read_size = read_size
        self.connections: set[PrinterConnection] = set()
        self._server: asyncio.AbstractServer | None = None

    @property
    def bound_port(self) -> int | None:
        if self._server is None or not self._server.sockets:
            return None
        return self._server.sockets[0].getsockname()[1]

    def is_running(self) -> bool:
        return self._server is not None and self._server.is_serving()

    async def start(self) -> None:
        if self.is_running():
            _LOGGER.warning("Printer listener is already running")
            return

        self._server = await asyncio.start_server(self._handle_connection, self.host, self.port)
        _LOGGER.info("Listening on %s:%s for raw print data", self.host, self.bound_port)

    async def stop(self) -> None:
        if self._server is None:
            return

        _LOGGER.info("Stopping printer listener")
        self._server.close()
        for connection in list(self.connections):
            connection.close()
        await self._server.wait_closed()
        self._server = None

    async def _handle_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        connection = PrinterConnection(reader, writer, self.accumulator, read_size=self.read_size)
        self.connections.add(connection)
        try:
            await connection.handle()
        finally:
            self.connections.discard(connection)
