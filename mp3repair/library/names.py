"""
Track file name parsing and name canonicalization.

File names look like "01 Track Name.mp3", "01 - Track Name.mp3" or
"01.Track Name.mp3". Names from the filesystem and names from tags are
canonicalized before they are compared, so that characters a filesystem
cannot hold do not count as differences.
"""

import re
from dataclasses import dataclass
from typing import List, Tuple

# Characters unsafe for file names, and what a file name uses instead
SUBSTITUTIONS: List[Tuple[str, str]] = [
    (':', ' -'),
    ('/', '-'),
    ('\\', '-'),
    ('|', '-'),
    ('"', "'"),
    ('?', ''),
    ('*', ''),
    ('<', ''),
    ('>', ''),
]
# Tab, newline and the other whitespace controls fold to a space instead
# Whitespace controls (tab, newline, etc.) are left for the whitespace fold
_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0e-\x1f]')
_LEADING_NUMBER = re.compile(r'^([0-9]+)(?=[\s\-._])[\s\-._]+')


@dataclass(frozen=True)
class ParsedTrackName:
    number: int
    name: str


def strip_extension(file_name: str, extension: str) -> str:
    """Remove extension from file_name if present (case-insensitive)."""
    if extension and file_name.lower().endswith(extension.lower()):
        return file_name[:len(file_name) - len(extension)]
    return file_name


def parse_track_name(file_name: str, extension: str) -> ParsedTrackName:
    """
    Split a track file name into its leading number and its name.

    Args:
        file_name: base name of the file, e.g. "03 - Song.mp3"
        extension: the audio file extension, e.g. ".mp3"

    Returns:
        ParsedTrackName; the number is 0 when the name has no leading digits
        followed by a separator.
    """
    base = strip_extension(file_name, extension)
    match = _LEADING_NUMBER.match(base)
    if not match:
        return ParsedTrackName(number=0, name=base.strip())
    return ParsedTrackName(number=int(match.group(1)), name=base[match.end():].strip())


def compose_track_name(number: int, name: str, extension: str) -> str:
    """Build a file name the parser splits back into (number, name)."""
    return f"{number:02d} {name}{extension}"


def canonicalize(value: str) -> str:
    """
    Normalize a name for comparison.

    Substitutes filesystem-illegal characters, drops non-whitespace control
    characters, then folds whitespace and case.
    canonicalize(canonicalize(s)) == canonicalize(s).
    """
    result = value
    for illegal, replacement in SUBSTITUTIONS:
        result = result.replace(illegal, replacement)
    result = _CONTROL_CHARS.sub('', result)
    result = ' '.join(result.split())
    return result.casefold()


def names_differ(filesystem_value: str, tag_value: str) -> bool:
    return canonicalize(filesystem_value) != canonicalize(tag_value)
