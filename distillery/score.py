"""Scoring of asset file names against a target platform and search terms."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

EXACT_NAME_SCORE = 200

# Extensions that have a recognised file type; all others share the "unknown" type.
_KNOWN_FILE_TYPES = frozenset(
    {
        # images
        "jpg", "jp2", "png", "gif", "webp", "cr2", "tif", "bmp", "jxr", "psd",
        "ico", "heif", "dwg", "avif",
        # video
        "mp4", "m4v", "mkv", "webm", "mov", "avi", "wmv", "mpg", "flv", "3gp",
        # audio
        "mid", "mp3", "m4a", "ogg", "flac", "wav", "amr", "aac", "aiff",
        # archives
        "epub", "zip", "tar", "rar", "gz", "bz2", "7z", "xz", "zst", "pdf",
        "exe", "swf", "rtf", "eot", "ps", "sqlite", "nes", "crx", "cab", "deb",
        "ar", "Z", "lz", "rpm", "elf", "dcm", "iso", "macho",
        # documents
        "doc", "docx", "xls", "xlsx", "ppt", "pptx",
        # fonts
        "woff", "woff2", "ttf", "otf",
        # applications
        "wasm", "dex", "dey",
    }
)

_TERM_SEPARATORS = re.compile(r"[-_]")


@dataclass
class ScoreOptions:
    """What a file name is scored against."""

    os: list[str] = field(default_factory=list)
    arch: list[str] = field(default_factory=list)
    extensions: list[str] = field(default_factory=list)
    names: list[str] = field(default_factory=list)
    versions: list[str] = field(default_factory=list)
    terms: list[str] = field(default_factory=list)
    weighted_terms: dict[str, int] = field(default_factory=dict)
    invalid_os: list[str] = field(default_factory=list)
    invalid_arch: list[str] = field(default_factory=list)
    invalid_extensions: list[str] = field(default_factory=list)

    def all_strings(self) -> list[str]:
        """Every known term, with each version also in its "v"-prefixed form."""
        return [
            *self.os,
            *self.arch,
            *self.terms,
            *self.names,
            *self.versions,
            *(f"v{version}" for version in self.versions),
        ]


@dataclass(frozen=True)
class Sorted:
    """A scored name."""

    key: str
    value: int


def _file_ext(path: str) -> str:
    """The suffix from the last dot of the final path element, dot included."""
    tail = path.rpartition("/")[2]
    dot = tail.rfind(".")
    return tail[dot:] if dot >= 0 else ""


def _remove_extensions(filename: str) -> str:
    while ext := _file_ext(filename):
        filename = filename[: -len(ext)]
    return filename


def _file_type(ext: str) -> str | None:
    return ext if ext in _KNOWN_FILE_TYPES else None


def _weights(opts: ScoreOptions) -> dict[str, int]:
    weights = {"update": -100, "-keyless.sig": -10}
    groups = (
        (opts.os, 40),
        (opts.arch, 30),
        (opts.extensions, 20),
        (opts.terms, 10),
        (opts.invalid_os, -40),
        (opts.invalid_arch, -30),
        (opts.invalid_extensions, -20),
    )
    for values, weight in groups:
        for value in values:
            weights[value.lower()] = weight
    for term, weight in opts.weighted_terms.items():
        weights[term.lower()] = weight
    return weights


def _accuracy(filename: str, known_terms: Iterable[str]) -> int:
    base = _remove_extensions(filename)
    known = set(known_terms)
    total = 0
    for term in filter(None, _TERM_SEPARATORS.split(base)):
        if term == base:
            total += 10
        elif term in known:
            total += 2
        else:
            total -= 5
    return total


def _score_name(name: str, opts: ScoreOptions, weights: dict[str, int]) -> int:
    lowered = name.lower()
    ext = _file_ext(lowered).removeprefix(".")
    ext_type = _file_type(ext)
    total = 0
    for key, weight in weights.items():
        if weight == 20:
            # A weight of 20 marks an extension: compare file types instead of text.
            if ext and any(_file_type(candidate) == ext_type for candidate in opts.extensions):
                total += weight
        elif key in lowered:
            total += weight
    return total + _accuracy(name, opts.all_strings())


def score(names: Iterable[str], opts: ScoreOptions) -> list[Sorted]:
    """Score each name and return them best first.

    A name listed in ``opts.names`` wins outright and is returned alone.
    """
    names = list(names)
    exact = next((name for name in names if name in opts.names), None)
    if exact is not None:
        return [Sorted(exact, EXACT_NAME_SCORE)]

    weights = _weights(opts)
    scores = {name: _score_name(name, opts, weights) for name in names}
    logger.debug("scores: %s", scores)
    return sort_by_value(scores)


def sort_by_value(scores: dict[str, int]) -> list[Sorted]:
    """Order scores by value descending, then by key ascending."""
    return [
        Sorted(key, value)
        for key, value in sorted(scores.items(), key=lambda item: (-item[1], item[0]))
    ]