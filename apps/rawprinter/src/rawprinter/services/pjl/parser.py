from __future__ import annotations

import logging
import re

from rawprinter.services.pjl.types import ParsedJob, StatusFlags

_LOGGER = logging.getLogger(__name__)

UEL_SIGNATURE = "\x1b%-12345X"
PJL_PREFIX = "@PJL"

_JOB_NAME_PREFIX = "@PJL JOB NAME="
_JOB_NAME_PATTERN = re.compile(r'@PJL JOB NAME="([^"]+)"')
_USTATUS_PREFIX = "@PJL USTATUS"
_USTATUS_OFF = "@PJL USTATUSOFF"
_EOJ_PREFIX = "@PJL EOJ NAME"

# ECMAScript WhiteSpace and LineTerminator code points, BOM included
_TRIM_CHARS = (
    "\t\n\x0b\x0c\r \xa0\u1680\u2000\u2001\u2002\u2003\u2004\u2005"
    "\u2006\u2007\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def split_lines(buffer: str) -> list[str]:
    text = buffer.replace(UEL_SIGNATURE, "").replace("\r", "")
    lines = (line.strip(_TRIM_CHARS) for line in text.split("\n"))
    return [line for line in lines if line]


def parse_pjl(buffer: str) -> ParsedJob:
    """Parse a cumulative PJL buffer into a ParsedJob.

    Lines are visited once, in order. ``job_name`` and ``data`` keep only the
    last match, status flags stay set until ``@PJL USTATUSOFF`` and
    ``end_of_job`` never goes back to false. Unknown directives and malformed
    lines are ignored, so this never raises for any input string.
    """
    job_name: str | None = None
    device = False
    page = False
    job = False
    end_of_job = False
    data: str | None = None

    lines = split_lines(buffer)
    _LOGGER.debug("PJL lines: %r", lines)

    for line in lines:
        if line.startswith(_JOB_NAME_PREFIX):
            match = _JOB_NAME_PATTERN.search(line)
            if match is not None:
                job_name = match.group(1)
        elif line.startswith(_USTATUS_PREFIX):
            if line == _USTATUS_OFF:
                device = False
                page = False
                job = False
            else:
                if "DEVICE=ON" in line:
                    device = True
                if "PAGE=ON" in line:
                    page = True
                if "JOB=ON" in line:
                    job = True
        elif line.startswith(_EOJ_PREFIX):
            end_of_job = True
        elif not line.startswith(PJL_PREFIX):
            # a directive glued onto payload without a newline
            index = line.find(PJL_PREFIX)
            if index != -1:
                line = line[:index]
            data = line

    return ParsedJob(
        job_name=job_name,
        status_flags=StatusFlags(device=device, page=page, job=job),
        end_of_job=end_of_job,
        data=data,
    )
