"""Credentials from the environment and YAML run settings."""
from __future__ import annotations
import logging
import os
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import httpx
import yaml

from completion_runner.common.errors import ConfigurationError

LOGGER = logging.getLogger("completion_runner.config")

OPENAI_KEY_VAR = "AZURE_OPENAI_KEY"
OPENAI_ENDPOINT_VAR = "AZURE_OPENAI_ENDPOINT"
LANGUAGE_KEY_VAR = "LANGUAGE_KEY"
LANGUAGE_ENDPOINT_VAR = "LANGUAGE_ENDPOINT"

DEFAULT_SETTINGS_PATH = "configs/settings.yaml"

DEFAULT_SETTINGS: dict[str, Any] = {
    "deployment": "GPT-35-turbo",
    "api_version": "2023-05-15",
    "prompt_file": "configs/prompts/hello.txt",
    "choice_count": 1,
    "max_tokens": 4000,
    "user_tag": "DGMJR",
    "timeout_seconds": 120.0,
    "log_level": "INFO",
    "language": {
        "api_version": "2023-04-01",
        "poll_interval_seconds": 5.0,
        "document_file": "configs/documents/summarization.txt",
    },
}


@dataclass(frozen=True)
class Credentials:
    """Key and endpoint, read once at startup."""
    key: str
    endpoint: str

    def __repr__(self) -> str:
        return f"Credentials(key='***', endpoint={self.endpoint!r})"


def load_credentials(
    key_var: str = OPENAI_KEY_VAR,
    endpoint_var: str = OPENAI_ENDPOINT_VAR,
    environ: Mapping[str, str] | None = None,
) -> Credentials:
    """
    Read the key and endpoint from the environment.

    Args:
        key_var: Name of the variable holding the API key.
        endpoint_var: Name of the variable holding the endpoint URI.
        environ: Mapping to read from; defaults to ``os.environ``.

    Raises:
        ConfigurationError: If either variable is unset or blank, or the
            endpoint is not an absolute http(s) URI.
    """
    env = os.environ if environ is None else environ
    key = (env.get(key_var) or "").strip()
    endpoint = (env.get(endpoint_var) or "").strip()

    missing = [name for name, value in ((key_var, key), (endpoint_var, endpoint)) if not value]
    if missing:
        raise ConfigurationError(f"Missing required environment variable(s): {', '.join(missing)}")

    try:
        url = httpx.URL(endpoint)
    except httpx.InvalidURL as exc:
        raise ConfigurationError(f"{endpoint_var} is not a valid URI: {exc}") from exc
    if url.scheme not in ("https", "http") or not url.host:
        raise ConfigurationError(f"{endpoint_var} must be an absolute http(s) URI, got {endpoint!r}")

    return Credentials(key=key, endpoint=endpoint.rstrip("/"))


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(
    path: str | Path = DEFAULT_SETTINGS_PATH,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """
    Load run settings from YAML and merge them onto defaults.

    A missing file is not an error. ``AZURE_OPENAI_DEPLOYMENT`` and
    ``AZURE_OPENAI_API_VERSION`` override the file when set.

    Args:
        path: YAML settings path.
        environ: Mapping to read overrides from; defaults to ``os.environ``.
    """
    env = os.environ if environ is None else environ
    settings = deepcopy(DEFAULT_SETTINGS)

    cfg_path = Path(path)
    if cfg_path.exists():
        with open(cfg_path, "r", encoding="utf-8") as f:
            try:
                user_cfg = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Invalid YAML in {cfg_path}: {exc}") from exc
        if not isinstance(user_cfg, dict):
            raise ConfigurationError(f"Settings file {cfg_path} must hold a mapping")
        settings = _deep_merge(settings, user_cfg)
    else:
        LOGGER.debug("No settings file at %s; using defaults", cfg_path)

    if env.get("AZURE_OPENAI_DEPLOYMENT"):
        settings["deployment"] = env["AZURE_OPENAI_DEPLOYMENT"]
    if env.get("AZURE_OPENAI_API_VERSION"):
        settings["api_version"] = env["AZURE_OPENAI_API_VERSION"]
    return settings
