from dataclasses import dataclass
from functools import lru_cache
import os


def _to_int(value: str | None, *, default: int, minimum: int) -> int:
    if value is None:
        return default
    parsed = int(value)
    return max(minimum, parsed)


def _to_float(value: str | None, *, default: float, minimum: float) -> float:
    if value is None:
        return default
    parsed = float(value)
    return max(minimum, parsed)


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    api_host: str
    api_port: int
    read_size: int
    log_level: str
    startup_timeout_seconds: float


@lru_cache
def get_settings() -> Settings:
    return Settings(
        host=os.getenv("RAWPRINTER_HOST", "0.0.0.0"),
        port=_to_int(os.getenv("RAWPRINTER_PORT"), default=9100, minimum=0),
        api_host=os.getenv("RAWPRINTER_API_HOST", "0.0.0.0"),
        api_port=_to_int(os.getenv("RAWPRINTER_API_PORT"), default=8080, minimum=0),
        read_size=_to_int(os.getenv("RAWPRINTER_READ_SIZE"), default=4096, minimum=1),
        log_level=os.getenv("RAWPRINTER_LOG_LEVEL", "INFO").strip().upper(),
        startup_timeout_seconds=_to_float(
            os.getenv("RAWPRINTER_STARTUP_TIMEOUT_SECONDS"),
            default=5.0,
            minimum=0.1,
        ),
    )
