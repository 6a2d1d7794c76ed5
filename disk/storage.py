"""Persistence helpers for Areatrace settings."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from models.params import SCHEMA_VERSION, Params
from models.version import get_app_version

log = logging.getLogger(__name__)

DEFAULT_SETTINGS_NAME = "areatrace.settings"


def default_settings_path() -> Path:
    """Return the default per-user settings path."""
    return Path.home() / DEFAULT_SETTINGS_NAME


def dict_to_params(dic: dict[str, Any]) -> Params:
    """Coerce a settings dictionary into Params, migrating if needed."""
    v = int(dic.get("version", 0))
    if v != SCHEMA_VERSION:
        dic = _migrate(dic, v)
    return Params.model_validate(dic)


class IO:
    """Read/write editor defaults to disk."""

    @staticmethod
    def save_defaults(params: Params, path: Path | None = None) -> Path:
        """Write defaults to disk and return the written path."""
        target = path or default_settings_path()
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = json.loads(params.profile_dump_json())
        payload["app_version"] = get_app_version()
        target.write_text(json.dumps(payload, indent=4), encoding="utf-8")
        log.debug("Saved settings to %s", target)
        return target

    @staticmethod
    def load_defaults(path: Path | None = None) -> Params:
        """Load defaults from disk, returning built-in defaults when missing."""
        target = path or default_settings_path()
        if not target.exists():
            return Params()
        raw = json.loads(target.read_text(encoding="utf-8"))
        raw.pop("app_version", None)
        return dict_to_params(raw)


def _migrate(data: dict[str, Any], from_version: int) -> dict[str, Any]:
    dic = dict(data)
    # the browser editor stored these two under its own names
    if "defaultColor" in dic:
        dic.setdefault("fill_colour", dic.pop("defaultColor"))
    if "defaultOpacity" in dic:
        dic.setdefault("fill_opacity", float(dic.pop("defaultOpacity")))
    dic["version"] = SCHEMA_VERSION
    return dic
