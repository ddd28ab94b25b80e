"""User configuration loaded from YAML.

Precedence, highest first:
1) Explicit path (CLI --config)
2) VBA_BLOCKS_CONFIG environment variable
3) ./vba-blocks.yaml (or .yml) in the working directory
4) ~/.vba-blocks/config.yaml
5) Built-in defaults from Constants

Example::

    registries:
      vba-blocks: https://registry.vba-blocks.com/index
      internal: https://blocks.example.com/index
    cache_dir: ~/.cache/vba-blocks
    http:
      timeout: 10
      retries: 5
    log_level: DEBUG
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from .constants import Constants

logger = logging.getLogger(__name__)


@dataclass
class Config:
    registries: Dict[str, str] = field(
        default_factory=lambda: {Constants.DEFAULT_REGISTRY: Constants.REGISTRY_URL_DEFAULT}
    )
    cache_dir: str = Constants.CACHE_DIR
    request_timeout: int = Constants.REQUEST_TIMEOUT
    http_retries: int = Constants.HTTP_RETRY_MAX
    log_level: Optional[str] = None
    path: Optional[str] = None


def _candidate_paths(explicit: Optional[str]):
    if explicit:
        yield explicit
        return
    env_path = os.environ.get(Constants.ENV_CONFIG)
    if env_path:
        yield env_path
    for name in Constants.CONFIG_FILE_NAMES:
        yield os.path.join(os.getcwd(), name)
    yield Constants.USER_CONFIG_FILE


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Return the first readable config mapping, with its path under "__path__"."""
    for candidate in _candidate_paths(path):
        if not os.path.isfile(candidate):
            if path:
                logger.warning("Config file not found: %s", candidate)
            continue
        try:
            with open(candidate, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.error("Failed to load config %s: %s", candidate, exc)
            return {}
        if not isinstance(data, dict):
            logger.error("Ignoring config %s: top level must be a mapping", candidate)
            return {}
        data["__path__"] = candidate
        return data
    return {}


def _coerce_int(value: Any, default: int, key: str) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid %s value: %r", key, value)
        return default


def load_config(path: Optional[str] = None) -> Config:
    """Load configuration, falling back to defaults for anything missing."""
    data = _load_yaml_config(path)
    config = Config(path=data.pop("__path__", None))

    registries = data.get("registries")
    if isinstance(registries, dict):
        config.registries.update(
            {str(name): str(url).rstrip("/") for name, url in registries.items() if url}
        )
    elif registries is not None:
        logger.warning("Ignoring invalid registries value: %r", registries)

    cache_dir = data.get("cache_dir")
    if isinstance(cache_dir, str) and cache_dir.strip():
        config.cache_dir = os.path.expanduser(cache_dir.strip())

    http = data.get("http") or {}
    if isinstance(http, dict):
        config.request_timeout = _coerce_int(http.get("timeout"), config.request_timeout, "http.timeout")
        config.http_retries = _coerce_int(http.get("retries"), config.http_retries, "http.retries")

    log_level = data.get("log_level")
    if isinstance(log_level, str):
        config.log_level = log_level.upper()

    if config.path:
        logger.debug("Loaded config from %s", config.path)
    return config
