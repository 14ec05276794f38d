import os
from dataclasses import dataclass
from typing import Mapping, Optional


DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        port_raw = env.get("PORT", str(DEFAULT_PORT))
        try:
            port = int(port_raw)
        except ValueError:
            raise ValueError(f"PORT must be an integer, got {port_raw!r}") from None
        return cls(
            host=env.get("HOST", DEFAULT_HOST),
            port=port,
            log_level=env.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )
