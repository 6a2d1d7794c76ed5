"""Version string for `areatrace --version` and the `appVersion` stamp in project files."""

from __future__ import annotations

import os
import subprocess
from collections.abc import Callable
from functools import cache
from importlib import metadata
from pathlib import Path

VERSION_ENV = "AREATRACE_VERSION"
DIST_NAME = "areatrace"
FALLBACK = "dev"


def _from_env() -> str | None:
    return os.getenv(VERSION_ENV, "").strip() or None


def _from_metadata() -> str | None:
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return None


def _from_git() -> str | None:
    checkout = next((p for p in Path(__file__).resolve().parents if (p / ".git").exists()), None)
    if checkout is None:
        return None
    try:
        tag = subprocess.run(
            ["git", "describe", "--tags", "--abbrev=0"],
            cwd=checkout,
            capture_output=True,
            text=True,
            check=True,
        ).stdout
    except (OSError, subprocess.CalledProcessError):
        return None
    return tag.strip() or None


SOURCES: tuple[Callable[[], str | None], ...] = (_from_env, _from_metadata, _from_git)


@cache
def get_app_version() -> str:
    """First version any source reports; an override in the environment wins."""
    return next((v for v in (source() for source in SOURCES) if v), FALLBACK)
