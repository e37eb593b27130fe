import base64

from pydantic import BaseModel, ConfigDict, Field

from rawprinter.services.jobs.store import JobRecord
from rawprinter.services.pjl.types import ParsedJob, StatusFlags


class StatusFlagsModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    device: bool = False
    page: bool = False
    job: bool = False


class ParsedJobModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    data: str | None = None
    job_name: str | None = Field(default=None, alias="jobName")
    status_flags: StatusFlagsModel = Field(default_factory=StatusFlagsModel, alias="statusFlags")
    end_of_job: bool = Field(default=False, alias="endOfJob")

    @classmethod
    def from_parsed(cls, parsed: ParsedJob) -> "ParsedJobModel":
        return cls.model_validate(parsed.as_dict())

    def to_parsed(self) -> ParsedJob:
        return ParsedJob(
            job_name=self.job_name,
            status_flags=StatusFlags(
                device=self.status_flags.device,
                page=self.status_flags.page,
                job=self.status_flags.job,
            ),
            end_of_job=self.end_of_job,
            data=self.data,
        )


class JobSummary(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    raw: str = Field(description="base64 encoded raw print stream")
    parsed: ParsedJobModel

    @classmethod
    def from_record(cls, record: JobRecord) -> "JobSummary":
        return cls(
            id=record.id,
            raw=base64.b64encode(record.raw).decode("ascii"),
            parsed=ParsedJobModel.from_parsed(record.parsed),
        )

    def raw_bytes(self) -> bytes:
        return base64.b64decode(self.raw)
