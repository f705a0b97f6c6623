"""Environment driven settings and logging setup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class SlideGenConfig:
    gemini_api_key: Optional[str] = None
    text_model: str = "gemini-2.5-flash"
    image_model: str = "gemini-2.5-flash-image"
    image_aspect_ratio: str = "4:3"
    # None means one concurrent request per slide.
    max_image_concurrency: Optional[int] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, *, dotenv: bool = True
    ) -> "SlideGenConfig":
        """Build a config from ``environ`` (``os.environ`` after loading ``.env``)."""

        if environ is None:
            if dotenv:
                load_dotenv()
            environ = os.environ

        concurrency = (environ.get("SLIDEGEN_MAX_IMAGE_CONCURRENCY") or "").strip()
        if concurrency:
            try:
                max_image_concurrency: Optional[int] = int(concurrency)
            except ValueError as exc:
                raise ValueError(
                    f"SLIDEGEN_MAX_IMAGE_CONCURRENCY must be an integer, got {concurrency!r}"
                ) from exc
            if max_image_concurrency < 1:
                max_image_concurrency = None
        else:
            max_image_concurrency = None

        return cls(
            gemini_api_key=environ.get("GEMINI_API_KEY") or None,
            text_model=environ.get("SLIDEGEN_TEXT_MODEL") or cls.text_model,
            image_model=environ.get("SLIDEGEN_IMAGE_MODEL") or cls.image_model,
            image_aspect_ratio=environ.get("SLIDEGEN_IMAGE_ASPECT_RATIO") or cls.image_aspect_ratio,
            max_image_concurrency=max_image_concurrency,
            log_level=(environ.get("SLIDEGEN_LOG_LEVEL") or cls.log_level).upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Install a root handler once; later calls only adjust the level."""

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
