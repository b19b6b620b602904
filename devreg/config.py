"""Runtime configuration for the index server."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class DevregConfig:
    """Settings for the registry connection, the on-disk stacks and the server."""

    registry_host: str = "localhost:5000"
    registry_scheme: str = "http"
    stacks_dir: Path = Path("/registry/stacks")
    index_path: Path = Path("/registry/index.json")
    host: str = "0.0.0.0"
    port: int = 7070
    probe_interval: float = 1.0  # seconds between readiness probes
    request_timeout: float = 30.0  # deadline for every registry call
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> DevregConfig:
        """Build a config from ``DEVREG_*`` environment variables."""
        return cls(
            registry_host=os.environ.get("DEVREG_REGISTRY_HOST", "localhost:5000"),
            registry_scheme=os.environ.get("DEVREG_REGISTRY_SCHEME", "http"),
            stacks_dir=Path(os.environ.get("DEVREG_STACKS_DIR", "/registry/stacks")),
            index_path=Path(
                os.environ.get("DEVREG_INDEX_PATH", "/registry/index.json")
            ),
            host=os.environ.get("DEVREG_HOST", "0.0.0.0"),
            port=int(os.environ.get("DEVREG_PORT", "7070")),
            probe_interval=float(os.environ.get("DEVREG_PROBE_INTERVAL", "1.0")),
            request_timeout=float(os.environ.get("DEVREG_REQUEST_TIMEOUT", "30.0")),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
        )

    @property
    def registry_url(self) -> str:
        """Base URL of the registry, e.g. ``http://localhost:5000``."""
        return f"{self.registry_scheme}://{self.registry_host}"

    def with_overrides(self, **changes) -> DevregConfig:
        """Return a copy with every non-None keyword applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def configure_logging(level: str = "INFO") -> None:
    """Install the process-wide log format."""
    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
