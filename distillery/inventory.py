"""Inventory of installed binaries, built from the version symlinks in the bin directory."""

from __future__ import annotations

import logging
import os
import posixpath
from collections.abc import Iterator
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

LATEST = "latest"


def _to_slash(path: str) -> str:
    return path.replace(os.sep, "/") if os.sep != "/" else path


@dataclass
class Version:
    """One installed version of a binary."""

    version: str
    path: str
    latest: bool = False
    target: str = ""


@dataclass
class Bin:
    """A binary together with all of its installed versions."""

    name: str
    versions: list[Version] = field(default_factory=list)
    source: str = ""
    owner: str = ""
    repo: str = ""

    def list_versions(self) -> list[str]:
        """The distinct version strings, in the order they were added."""
        return list(dict.fromkeys(version.version for version in self.versions))

    def install_path(self, base: str) -> str:
        """Where this binary's versions live under ``base``."""
        return os.path.join(base, self.source, self.owner, self.repo)


@dataclass
class Inventory:
    """Installed binaries keyed by ``source/owner/repo``."""

    opt_path: str
    bins: dict[str, Bin] = field(default_factory=dict)
    _latest_paths: dict[str, str] = field(default_factory=dict, init=False, repr=False)

    def sorted_keys(self) -> list[str]:
        """The keys of all binaries in ascending order."""
        return sorted(self.bins)

    def add_version(self, path: str, target: str) -> None:
        """Record the symlink ``path`` that points at ``target``.

        A link named ``name@version`` adds a version; a plain ``name`` link marks
        the version it points at as the latest one.
        """
        path = _to_slash(path)
        target = _to_slash(target)
        opt_path = _to_slash(self.opt_path)

        parts = posixpath.basename(path).split("@")
        bin_name = parts[0]
        if len(parts) == 2:
            version, latest = parts[1], False
        else:
            version, latest = LATEST, True

        relative = posixpath.relpath(target, opt_path)
        relative_parts = relative.split("/")
        if len(relative_parts) < 3:
            raise ValueError(f"target {target!r} is not inside {opt_path!r}")
        base_source = posixpath.normpath(posixpath.join(*relative_parts[:3]))

        if base_source not in self.bins:
            source_parts = target.removeprefix(opt_path).removeprefix("/").split("/")
            if len(source_parts) < 3:
                raise ValueError(f"target {target!r} is not inside {opt_path!r}")
            source, owner, repo = source_parts[:3]
            self.bins[base_source] = Bin(name=bin_name, source=source, owner=owner, repo=repo)

        if latest:
            self._latest_paths[base_source] = target
            return

        self.bins[base_source].versions.append(
            Version(
                version=version,
                path=path,
                latest=self._latest_paths.get(base_source) == target,
                target=target,
            )
        )

    def count(self) -> int:
        """Number of distinct binaries."""
        return len(self.bins)

    def full_count(self) -> int:
        """Number of installed versions over all binaries."""
        return sum(len(item.versions) for item in self.bins.values())

    def get_bin_versions(self, name: str) -> Bin | None:
        """The binary stored under ``name``, if any."""
        return self.bins.get(name)

    def get_bin_version(self, name: str, version: str) -> Version | None:
        """A specific version of a binary; ``"latest"`` selects the latest one."""
        item = self.get_bin_versions(name)
        if item is None:
            return None
        for candidate in item.versions:
            if candidate.latest and version == LATEST:
                return candidate
            if candidate.version == version:
                return candidate
        return None

    def get_latest_version(self, name: str) -> Version | None:
        """The version of a binary marked as latest, if any."""
        item = self.get_bin_versions(name)
        if item is None:
            return None
        return next((candidate for candidate in item.versions if candidate.latest), None)

    def _set_latest_version(self) -> None:
        for base_source, item in self.bins.items():
            latest_path = self._latest_paths.get(base_source)
            if latest_path is None:
                continue
            for candidate in item.versions:
                if candidate.target == latest_path:
                    candidate.latest = True


def _walk_symlinks(root: str, prefix: str = "") -> Iterator[str]:
    """Slash-separated paths, relative to ``root``, of every symlink below it."""
    directory = os.path.join(root, prefix) if prefix else root
    try:
        with os.scandir(directory) as scan:
            entries = sorted(scan, key=lambda entry: entry.name)
    except OSError as exc:
        logger.warning("unable to read directory %s: %s", directory, exc)
        return

    for entry in entries:
        relative = f"{prefix}/{entry.name}" if prefix else entry.name
        if entry.is_dir(follow_symlinks=False):
            yield from _walk_symlinks(root, relative)
        elif entry.is_symlink():
            yield relative


def new(base_path: str, opt_path: str) -> Inventory:
    """Scan ``base_path`` for version symlinks and build an inventory from them."""
    inventory = Inventory(opt_path=opt_path)

    for relative in _walk_symlinks(base_path):
        try:
            target = os.readlink(os.path.join(base_path, relative))
        except OSError as exc:
            logger.warning("failed to read symlink %s: %s", relative, exc)
            continue

        target = _to_slash(target)
        logger.debug("adding version path=%s target=%s", relative, target)
        try:
            inventory.add_version(relative, target)
        except ValueError as exc:
            logger.warning("failed to add version: %s", exc)

    inventory._set_latest_version()
    return inventory