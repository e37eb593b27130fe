from rawprinter.services.pjl.parser import parse_pjl
from rawprinter.services.pjl.responder import build_status_response
from rawprinter.services.pjl.types import ParsedJob, StatusFlags

__all__ = ["ParsedJob", "StatusFlags", "build_status_response", "parse_pjl"]
