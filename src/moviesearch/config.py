"""
Client configuration — ~/.moviesearch/config.json plus environment overrides.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from moviesearch.models.query import DEFAULT_ALPHA, DEFAULT_RESULT_COUNT
from moviesearch.reveal import DEFAULT_INTERVAL_S
from moviesearch.transport.http import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_S

logger = logging.getLogger("moviesearch.config")

CONFIG_FILE = Path.home() / ".moviesearch" / "config.json"
API_URL_ENV = "MOVIESEARCH_API_URL"


class SearchConfig(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    result_count: int = Field(default=DEFAULT_RESULT_COUNT, ge=1, le=100)
    alpha: float = Field(default=DEFAULT_ALPHA, ge=0.0, le=1.0)
    reveal_interval: float = Field(default=DEFAULT_INTERVAL_S, ge=0.0)
    timeout: float = Field(default=DEFAULT_TIMEOUT_S, gt=0.0)


def load_config(path: Optional[Path] = None, apply_env: bool = True) -> SearchConfig:
    """Read the config file (defaults when missing or invalid), then apply env overrides."""
    path = path or CONFIG_FILE
    try:
        cfg = SearchConfig.model_validate(json.loads(path.read_text()))
    except FileNotFoundError:
        cfg = SearchConfig()
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Ignoring invalid config file {path}: {e}")
        cfg = SearchConfig()

    env_url = os.environ.get(API_URL_ENV)
    if env_url and apply_env:
        cfg = cfg.model_copy(update={"base_url": env_url})
    return cfg


def save_config(cfg: SearchConfig, path: Optional[Path] = None) -> None:
    path = path or CONFIG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(cfg.model_dump(), indent=2))
