"""Application configuration from environment variables."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    swfpatcher_env: str = "development"
    swfpatcher_log_level: str = "info"

    # External script compiler. Placeholders: {source} {base} {output} {class_name} {mode}
    compiler_command: list[str] = [
        "ffdec",
        "-replace",
        "{base}",
        "{output}",
        "{class_name}",
        "{source}",
    ]
    compiler_timeout: float = 300.0

    # Parent directory for compiler scratch space (None = system temp dir)
    scratch_dir: str | None = None

    # Batch processing
    batch_jobs: int = 1
    output_compression: Literal["None", "Deflate", "Lzma"] | None = None

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()


def get_settings() -> Settings:
    return settings


def configure_logging(level: str | None = None) -> None:
    """Install the root log handler at the configured level."""
    name = (level or settings.swfpatcher_log_level).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
