import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from mailing_list.settings.models import Settings

ENV_PREFIX = "APP_"
ENV_SEPARATOR = "__"
SETTINGS_PATH_ENV = "APP_SETTINGS_PATH"
DEFAULT_SETTINGS_PATH = Path("settings.yaml")


def env_overrides(environ: Mapping[str, str]) -> dict[str, dict[str, str]]:
    """
    Collect APP_<SECTION>__<KEY>=value pairs into a nested dict.

    e.g. APP_APPLICATION__BASE_URL -> {"application": {"base_url": ...}}
    """
    overrides: dict[str, dict[str, str]] = {}
    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX) or ENV_SEPARATOR not in key:
            continue
        section, _, field = key[len(ENV_PREFIX):].lower().partition(ENV_SEPARATOR)
        if section and field:
            overrides.setdefault(section, {})[field] = value
    return overrides


def _merge(base: dict[str, Any], overrides: dict[str, dict[str, str]]) -> dict[str, Any]:
    merged = dict(base)
    for section, values in overrides.items():
        current = merged.get(section) or {}
        if not isinstance(current, dict):
            raise ValueError(f"Settings section '{section}' must be a mapping")
        merged[section] = {**current, **values}
    return merged


def load_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """
    Load settings from YAML and apply environment overrides.

    Raises FileNotFoundError if an explicitly requested file is missing.
    Raises ValueError if the YAML is malformed or the schema is invalid.
    """
    env = os.environ if environ is None else environ

    if path is None:
        path = Path(env.get(SETTINGS_PATH_ENV, str(DEFAULT_SETTINGS_PATH)))
        required = SETTINGS_PATH_ENV in env
    else:
        required = True

    data: dict[str, Any] = {}
    if path.exists():
        with open(path) as f:
            try:
                loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML syntax in settings file: {e}") from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ValueError("Settings file must contain a mapping at the top level")
        data = loaded or {}
    elif required:
        raise FileNotFoundError(f"Settings file not found at: {path}")

    data = _merge(data, env_overrides(env))

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Settings validation failed:\n{e}") from e
