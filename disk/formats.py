import enum
from pathlib import Path

PROJECT_SUFFIX = ".areatrace.json"


class Formats(enum.StrEnum):
    svg = enum.auto()
    png = enum.auto()
    webp = enum.auto()

    @classmethod
    def check(cls, path: Path) -> "Formats | None":
        suf = path.suffix[1:].lower()
        return Formats(suf) if suf in Formats else None

    @property
    def is_raster(self) -> bool:
        return self is not Formats.svg


def is_project(path: Path) -> bool:
    return path.name.lower().endswith(PROJECT_SUFFIX) or path.suffix.lower() == ".json"
