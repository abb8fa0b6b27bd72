"""Commit history rows for the who command."""

from dataclasses import dataclass
from typing import Iterable, Optional

from gitaddons.logging_config import get_logger

logger = get_logger(__name__)

# Abbreviated hash, short date, ref names, subject; tab separated
LOG_FORMAT = "%h%x09%ad%x09%D%x09%s"

TIME_RANGES = (
    "1 day ago",
    "1 week ago",
    "2 weeks ago",
    "1 month ago",
    "3 months ago",
    "6 months ago",
)
DEFAULT_TIME_RANGE = "1 week ago"


@dataclass(frozen=True)
class Commit:
    hash: str
    date: str
    refs: str
    message: str


def parse_log_line(line: str) -> Optional[Commit]:
    """Parse one line produced with ``LOG_FORMAT``.

    Returns None for blank or unrecognised lines.
    """
    if not line.strip():
        return None
    parts = line.split("\t", 3)
    if len(parts) != 4 or not parts[0]:
        logger.warning("Ignoring log line %r", line)
        return None
    commit_hash, date, refs, message = parts
    return Commit(hash=commit_hash, date=date, refs=refs.strip(), message=message)


def parse_log(lines: Iterable[str]) -> list[Commit]:
    return [commit for commit in map(parse_log_line, lines) if commit is not None]


def unique_authors(names: Iterable[str]) -> list[str]:
    """Distinct author names in first-seen order."""
    return list(dict.fromkeys(name.strip() for name in names if name.strip()))
