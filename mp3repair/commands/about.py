"""
about command - version, build and dependency information in a box.
"""

import argparse
import platform
from datetime import datetime, timezone
from importlib import metadata
from typing import List, Optional

from .. import APP_NAME, __build_timestamp__, __version__
from ..output import quote, ERROR
from .base import BaseCommand

FIRST_YEAR = 2026
AUTHOR = "the mp3repair authors"
DEPENDENCIES = ["mutagen", "PyYAML"]


def parse_timestamp(timestamp: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(parsed: datetime) -> str:
    return f"{parsed:%A, %B} {parsed.day} {parsed:%Y, %H:%M:%S} {parsed.tzname()}"


def format_copyright(first_year: int, last_year: int) -> str:
    if last_year <= first_year:
        return f"Copyright © {first_year} {AUTHOR}"
    return f"Copyright © {first_year}-{last_year} {AUTHOR}"


def dependency_version(name: str) -> str:
    try:
        return metadata.version(name)
    except metadata.PackageNotFoundError:
        return "not installed"


def boxed(lines: List[str]) -> List[str]:
    """Frame lines in an ASCII box"""
    width = max((len(line) for line in lines), default=0)
    border = f"+-{'-' * width}-+"
    return [border] + [f"| {line.ljust(width)} |" for line in lines] + [border]


class AboutCommand(BaseCommand):
    """Shows information about the program"""

    @property
    def name(self) -> str:
        return "about"

    def execute(self, options: argparse.Namespace) -> bool:
        self.log_start(options)
        built = parse_timestamp(__build_timestamp__)
        if built is None:
            self.bus.write_error(f"The build time {quote(__build_timestamp__)} cannot be parsed")
            self.bus.log(ERROR, "parse error", {"value": __build_timestamp__})
            built_text = __build_timestamp__
            last_year = FIRST_YEAR
        else:
            built_text = format_timestamp(built)
            last_year = built.year
        lines = [
            f"{APP_NAME} version {__version__}, built on {built_text}",
            format_copyright(FIRST_YEAR, last_year),
            "Build Information",
            f" - Python version: {platform.python_version()}",
        ]
        lines.extend(f" - Dependency: {name} {dependency_version(name)}" for name in DEPENDENCIES)
        for line in boxed(lines):
            self.bus.write_console(line)
        return True
