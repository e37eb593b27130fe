from __future__ import annotations

from rawprinter.services.pjl.types import ParsedJob

_JOB_STATUS_TEMPLATE = (
    "@PJL USTATUS JOB\r\n"
    "START\r\n"
    'NAME="{name}"\r\n'
    "\f"
    "@PJL USTATUS JOB\r\n"
    "END\r\n"
    'NAME="{name}"\r\n'
    "PAGES=1\f"
)


def build_status_response(parsed: ParsedJob) -> bytes | None:
    """Return the JOB START/END acknowledgement once the job has ended.

    Only fires when the sender asked for unsolicited status and the end of
    job was seen. There is no latch: every call that still satisfies both
    conditions returns the report again.
    """
    if not (parsed.is_any_status_flag() and parsed.end_of_job):
        return None

    name = parsed.job_name if parsed.job_name is not None else "null"
    return _JOB_STATUS_TEMPLATE.format(name=name).encode("utf-8")
