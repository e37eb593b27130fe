from rawprinter.services.jobs.accumulator import JobAccumulator
from rawprinter.services.jobs.store import JobRecord, JobRepository, JobStore

__all__ = ["JobAccumulator", "JobRecord", "JobRepository", "JobStore"]
