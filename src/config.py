import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class Settings:
    git_dir: Path = Path(".")
    log_level: str = "INFO"
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        # In production, set ALLOWED_ORIGINS to a comma-separated list of domains
        allowed_origins_env = os.getenv("ALLOWED_ORIGINS", "*")
        return cls(
            git_dir=Path(os.getenv("GIT_DIR", ".")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            allowed_origins=[origin.strip() for origin in allowed_origins_env.split(",")],
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
