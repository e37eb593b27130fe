from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class StatusFlags:
    device: bool = False
    page: bool = False
    job: bool = False

    def as_dict(self) -> dict[str, bool]:
        return {"device": self.device, "page": self.page, "job": self.job}


@dataclass(frozen=True)
class ParsedJob:
    job_name: str | None = None
    status_flags: StatusFlags = field(default_factory=StatusFlags)
    end_of_job: bool = False
    data: str | None = None

    def is_any_status_flag(self) -> bool:
        return self.status_flags.device or self.status_flags.page or self.status_flags.job

    def as_dict(self) -> dict[str, Any]:
        """Wire view, keyed the way API consumers expect."""
        return {
            "data": self.data,
            "jobName": self.job_name,
            "statusFlags": self.status_flags.as_dict(),
            "endOfJob": self.end_of_job,
        }
