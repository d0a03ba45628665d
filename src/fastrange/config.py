from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

from .io.base import DEFAULT_CHUNK_SIZE

ENV_PREFIX = "FASTRANGE_"


@dataclass(slots=True)
class ServerSettings:
    media_root: Path = Path("videos")
    host: str = "127.0.0.1"
    port: int = 3000
    chunk_size: int = DEFAULT_CHUNK_SIZE
    snapshot: bool = False       # freeze catalog indices at startup
    log_level: str = "info"

    def __post_init__(self):
        self.media_root = Path(self.media_root)
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.log_level = self.log_level.lower()
