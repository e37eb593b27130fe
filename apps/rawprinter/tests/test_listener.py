import asyncio
import logging

import pytest

from rawprinter.listener import PrinterConnection, PrinterListener
from rawprinter.services.jobs.accumulator import JobAccumulator
from rawprinter.services.jobs.store import JobStore
from rawprinter.services.pjl.types import ParsedJob

EXPECTED_REPORT = (
    b'@PJL USTATUS JOB\r\nSTART\r\nNAME="Test"\r\n\f'
    b'@PJL USTATUS JOB\r\nEND\r\nNAME="Test"\r\nPAGES=1\f'
)


async def _wait_for(predicate, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


def _listener(store: JobStore) -> PrinterListener:
    return PrinterListener(JobAccumulator(store), host="127.0.0.1", port=0)


def test_listener_records_job_and_sends_status_report(store: JobStore, sample_job: bytes) -> None:
    async def scenario() -> bytes:
        listener = _listener(store)
        await listener.start()
        try:
            reader, writer = await asyncio.open_connection("127.0.0.1", listener.bound_port)
            writer.write(sample_job)
            await writer.drain()
            report = await asyncio.wait_for(reader.readexactly(len(EXPECTED_REPORT)), timeout=2)
            writer.close()
            await writer.wait_closed()
            return report
        finally:
            await listener.stop()

    report = asyncio.run(scenario())

    assert report == EXPECTED_REPORT
    records = store.list_jobs()
    assert len(records) == 1
    assert records[0].raw == sample_job
    assert records[0].parsed.job_name == "Test"


def test_listener_accumulates_chunks_per_connection(store: JobStore) -> None:
    async def scenario() -> None:
        listener = _listener(store)
        await listener.start()
        try:
            _, first = await asyncio.open_connection("127.0.0.1", listener.bound_port)
            _, second = await asyncio.open_connection("127.0.0.1", listener.bound_port)

            first.write(b"@PJL JOB NAME=\"one\"\r\nhel")
            await first.drain()
            second.write(b"other\r\n")
            await second.drain()
            await _wait_for(lambda: len(store) == 2)

            first.write(b"lo\r\n")
            await first.drain()
            await _wait_for(
                lambda: any(record.parsed.data == "hello" for record in store.list_jobs())
            )

            for writer in (first, second):
                writer.close()
                await writer.wait_closed()
        finally:
            await listener.stop()

    asyncio.run(scenario())

    by_data = {record.parsed.data: record for record in store.list_jobs()}
    assert by_data["hello"].raw == b'@PJL JOB NAME="one"\r\nhello\r\n'
    assert by_data["hello"].parsed.job_name == "one"
    assert by_data["other"].raw == b"other\r\n"
    assert by_data["hello"].id != by_data["other"].id


def test_record_survives_client_disconnect(store: JobStore) -> None:
    async def scenario() -> None:
        listener = _listener(store)
        await listener.start()
        try:
            _, writer = await asyncio.open_connection("127.0.0.1", listener.bound_port)
            writer.write(b"payload\n")
            await writer.drain()
            writer.close()
            await writer.wait_closed()
            await _wait_for(lambda: len(store) == 1 and not listener.connections)
        finally:
            await listener.stop()

    asyncio.run(scenario())

    assert [record.parsed.data for record in store.list_jobs()] == ["payload"]


def test_stop_closes_open_connections(store: JobStore) -> None:
    async def scenario() -> bytes:
        listener = _listener(store)
        await listener.start()
        reader, writer = await asyncio.open_connection("127.0.0.1", listener.bound_port)
        writer.write(b"x\n")
        await writer.drain()
        await _wait_for(lambda: len(store) == 1)

        await listener.stop()
        remaining = await asyncio.wait_for(reader.read(), timeout=2)
        writer.close()
        assert not listener.is_running()
        assert listener.bound_port is None
        return remaining

    assert asyncio.run(scenario()) == b""


class _BrokenWriter:
    def __init__(self) -> None:
        self.closed = False

    def get_extra_info(self, name: str) -> tuple[str, int]:
        del name
        return ("127.0.0.1", 50000)

    def write(self, data: bytes) -> None:
        del data
        raise ConnectionResetError("peer went away")

    async def drain(self) -> None:
        return None

    def is_closing(self) -> bool:
        return self.closed

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        return None


def test_failed_status_write_keeps_record(
    store: JobStore,
    sample_job: bytes,
    caplog: pytest.LogCaptureFixture,
) -> None:
    writer = _BrokenWriter()

    async def scenario() -> str:
        reader = asyncio.StreamReader()
        reader.feed_data(sample_job)
        reader.feed_eof()
        connection = PrinterConnection(reader, writer, JobAccumulator(store), read_size=4096)
        await connection.handle()
        return connection.connection_id

    with caplog.at_level(logging.WARNING, logger="rawprinter.listener"):
        connection_id = asyncio.run(scenario())

    record = store.get(connection_id)
    assert record is not None
    assert record.raw == sample_job
    assert record.parsed.end_of_job is True
    assert writer.closed is True
    assert "Failed to send status" in caplog.text
    assert "peer went away" in caplog.text


def test_handler_error_closes_only_that_connection(
    store: JobStore,
    caplog: pytest.LogCaptureFixture,
) -> None:
    def responder(parsed: ParsedJob) -> bytes | None:
        if parsed.data == "boom":
            raise ValueError("responder failed")
        return None

    async def scenario() -> bytes:
        listener = PrinterListener(
            JobAccumulator(store, responder=responder),
            host="127.0.0.1",
            port=0,
        )
        await listener.start()
        try:
            bad_reader, bad_writer = await asyncio.open_connection("127.0.0.1", listener.bound_port)
            _, good_writer = await asyncio.open_connection("127.0.0.1", listener.bound_port)

            bad_writer.write(b"boom\n")
            await bad_writer.drain()
            closed = await asyncio.wait_for(bad_reader.read(), timeout=2)

            good_writer.write(b"ok\n")
            await good_writer.drain()
            await _wait_for(lambda: len(store) == 1)

            for writer in (bad_writer, good_writer):
                writer.close()
                await writer.wait_closed()
            return closed
        finally:
            await listener.stop()

    with caplog.at_level(logging.ERROR, logger="rawprinter.listener"):
        closed = asyncio.run(scenario())

    assert closed == b""
    assert [record.parsed.data for record in store.list_jobs()] == ["ok"]
    assert "Error handling client" in caplog.text
