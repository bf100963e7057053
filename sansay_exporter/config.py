# sansay_exporter/config.py
from __future__ import annotations

import logging
import os

from pydantic import BaseModel

# *** Everything can be set from the environment, CLI flags win:
# export SANSAY_TARGET=sbc1.example.net:8888/SSConfig/webresources/stats/realtime
# export SANSAY_USERNAME=monitor SANSAY_PASSWORD=secret
# export SANSAY_TIMEOUT=5
# sansay_exporter serve

LOG_FORMAT = "%(asctime)s  %(levelname)s %(message)s"


class Settings(BaseModel):
    target: str | None = None
    username: str = ""
    password: str = ""
    timeout: float | None = 10.0
    host: str = "0.0.0.0"
    port: int = 9116
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            target=os.getenv("SANSAY_TARGET") or None,
            username=os.getenv("SANSAY_USERNAME", ""),
            password=os.getenv("SANSAY_PASSWORD", ""),
            timeout=float(os.getenv("SANSAY_TIMEOUT", 10)),
            host=os.getenv("SANSAY_LISTEN_HOST", "0.0.0.0"),
            port=int(os.getenv("SANSAY_LISTEN_PORT", 9116)),
            log_level=os.getenv("SANSAY_LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
