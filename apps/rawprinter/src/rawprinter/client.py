from __future__ import annotations

import httpx

from rawprinter.models import JobSummary


class RawPrinterClientError(RuntimeError):
    pass


class RawPrinterClient:
    """HTTP client for the raw printer management API."""

    def __init__(self, *, base_url: str, timeout_seconds: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

    def health(self) -> bool:
        try:
            response = httpx.get(f"{self._base_url}/health", timeout=self._timeout_seconds)
        except httpx.HTTPError:
            return False
        return response.status_code == 200

    def list_jobs(self) -> list[JobSummary]:
        try:
            response = httpx.get(f"{self._base_url}/jobs", timeout=self._timeout_seconds)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise RawPrinterClientError(str(exc)) from exc

        payload = response.json()
        if not isinstance(payload, list):
            raise RawPrinterClientError("Invalid jobs payload: expected a list")
        return [JobSummary.model_validate(item) for item in payload]

    def get_job_raw(self, job_id: str) -> bytes | None:
        try:
            response = httpx.get(f"{self._base_url}/jobs/{job_id}", timeout=self._timeout_seconds)
            if response.status_code == 404:
                return None
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise RawPrinterClientError(str(exc)) from exc
        return response.content

    def delete_job(self, job_id: str) -> bool:
        try:
            response = httpx.delete(f"{self._base_url}/jobs/{job_id}", timeout=self._timeout_seconds)
            if response.status_code == 404:
                return False
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise RawPrinterClientError(str(exc)) from exc
        return True

    def clear_jobs(self) -> None:
        try:
            response = httpx.delete(f"{self._base_url}/jobs", timeout=self._timeout_seconds)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise RawPrinterClientError(str(exc)) from exc
