from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Request, Response

from rawprinter.config import get_settings
from rawprinter.models import JobSummary
from rawprinter.services.jobs.store import JobRepository, JobStore

_LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

API_HELP = """\
API:
  GET /jobs
    List printed jobs as JSON:
    [{"id": "<uuid4>", "raw": "<base64 payload>", "parsed": {...}}, ...]

  DELETE /jobs
    Clear the list of printed jobs. Returns 204.

  GET /jobs/{job_id}
    Raw bytes of one printed job, 404 if not found.

  DELETE /jobs/{job_id}
    Delete one printed job. Returns 204, 404 if not found.
"""


def get_job_store(request: Request) -> JobRepository:
    return request.app.state.job_store


def create_app(store: JobRepository | None = None) -> FastAPI:
    app = FastAPI(title="Raw Printer Mock API", version="0.1.0")
    app.state.job_store = store if store is not None else JobStore()

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/jobs", response_model=list[JobSummary])
    def list_jobs(store: Annotated[JobRepository, Depends(get_job_store)]) -> list[JobSummary]:
        return [JobSummary.from_record(record) for record in store.list_jobs()]

    @app.delete("/jobs", status_code=204)
    def clear_jobs(store: Annotated[JobRepository, Depends(get_job_store)]) -> Response:
        store.clear()
        return Response(status_code=204)

    @app.get("/jobs/{job_id}")
    def get_job(job_id: str, store: Annotated[JobRepository, Depends(get_job_store)]) -> Response:
        record = store.get(job_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Job not found")
        return Response(content=record.raw, media_type="application/octet-stream")

    @app.delete("/jobs/{job_id}", status_code=204)
    def delete_job(job_id: str, store: Annotated[JobRepository, Depends(get_job_store)]) -> Response:
        if not store.delete(job_id):
            raise HTTPException(status_code=404, detail="Job not found")
        return Response(status_code=204)

    return app


def _log_level(value: str) -> str:
    level = value.strip().upper()
    if level not in LOG_LEVELS:
        raise argparse.ArgumentTypeError(
            f"invalid log level {value!r} (choose from {', '.join(LOG_LEVELS)})"
        )
    return level


def _build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="rawprinter",
        description=(
            "Simple raw printer server mock. Listens for raw print data on a port "
            "and provides an API to retrieve the printed jobs."
        ),
        epilog=API_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--host", default=settings.host, help="Host to listen on for print data")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to listen on for print data")
    parser.add_argument("--api-host", default=settings.api_host, help="Host for the API server")
    parser.add_argument("--api-port", type=int, default=settings.api_port, help="Port for the API server")
    parser.add_argument(
        "--log-level",
        type=_log_level,
        default=settings.log_level,
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    return parser


def run(argv: list[str] | None = None) -> None:
    from rawprinter.emulator import RawPrinter

    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)

    printer = RawPrinter(
        host=args.host,
        port=args.port,
        api_host=args.api_host,
        api_port=args.api_port,
        log_level=args.log_level,
    )

    try:
        asyncio.run(printer.serve())
    except KeyboardInterrupt:
        _LOGGER.info("Interrupted")
    except Exception as exc:
        _LOGGER.error("Raw printer failed: %s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    run()
