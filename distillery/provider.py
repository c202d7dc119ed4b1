"""Discovery of the binary, checksum, signature and key among a release's assets."""

from __future__ import annotations

import enum
import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

from distillery import osconfig
from distillery.osconfig import OSConfig
from distillery.score import ScoreOptions, Sorted, score

logger = logging.getLogger(__name__)

VERSION_LATEST = "latest"

SIGNATURE_NONE = "none"
SIGNATURE_FILE = "file"
SIGNATURE_CHECKSUM = "checksum"

SCORE_THRESHOLD = 40

_LOW_SCORE_MESSAGE = "no matching asset found, score too low"


class AssetType(enum.Enum):
    """What kind of file a release asset is."""

    UNKNOWN = "unknown"
    ARCHIVE = "archive"
    BINARY = "binary"
    INSTALLER = "installer"
    CHECKSUM = "checksum"
    SIGNATURE = "signature"
    KEY = "key"
    SBOM = "sbom"


_SIGNATURE_SUFFIXES = (".sig", ".asc", ".gpg")
_KEY_SUFFIXES = (".pem", ".pub", ".cert", ".crt")
_SBOM_MARKERS = (".sbom", ".spdx", ".cdx", ".bom.json")
_CHECKSUM_SUFFIXES = (".sha256", ".sha512", ".sha1", ".md5", "sums", ".sha256sum")
_CHECKSUM_MARKERS = ("checksums",)
_INSTALLER_SUFFIXES = (".deb", ".rpm", ".apk", ".msi", ".dmg", ".pkg")
_ARCHIVE_SUFFIXES = (
    ".tar.gz", ".tgz", ".tar.xz", ".txz", ".tar.bz2", ".tbz", ".tbz2", ".tar.zst",
    ".tar", ".zip", ".gz", ".xz", ".bz2", ".zst", ".7z",
)
_BINARY_EXTENSIONS = ("", ".exe", ".appimage")
_CHECKSUM_ALGORITHMS = ("sha512", "sha256", "sha1", "md5")

_BINARY_TYPES = (AssetType.BINARY, AssetType.UNKNOWN, AssetType.ARCHIVE)


def _ext(name: str) -> str:
    """The suffix from the last dot of the final path element, dot included."""
    tail = name.rpartition("/")[2]
    dot = tail.rfind(".")
    return tail[dot:] if dot >= 0 else ""


def _trim_ext(name: str) -> str:
    ext = _ext(name)
    return name[: -len(ext)] if ext else name


def _classify(name: str) -> AssetType:
    lowered = name.lower()
    if lowered.endswith(_SIGNATURE_SUFFIXES):
        return AssetType.SIGNATURE
    if lowered.endswith(_KEY_SUFFIXES):
        return AssetType.KEY
    if any(marker in lowered for marker in _SBOM_MARKERS):
        return AssetType.SBOM
    if lowered.endswith(_CHECKSUM_SUFFIXES) or any(m in lowered for m in _CHECKSUM_MARKERS):
        return AssetType.CHECKSUM
    if lowered.endswith(_INSTALLER_SUFFIXES):
        return AssetType.INSTALLER
    if lowered.endswith(_ARCHIVE_SUFFIXES):
        return AssetType.ARCHIVE
    if _ext(lowered) in _BINARY_EXTENSIONS:
        return AssetType.BINARY
    return AssetType.UNKNOWN


@dataclass(eq=False)
class Asset:
    """A file published with a release, classified by its name."""

    name: str
    display_name: str = ""
    os: str = ""
    arch: str = ""
    version: str = ""
    asset_type: AssetType = field(default=AssetType.UNKNOWN, init=False)
    parent_type: AssetType = field(default=AssetType.UNKNOWN, init=False)
    matched_asset: Asset | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.asset_type = _classify(self.name)
        ext = _ext(self.name)
        self.parent_type = _classify(self.name.replace(ext, "") if ext else self.name)

    @property
    def checksum_type(self) -> str:
        """The hash algorithm named by the file, or ``"unknown"``."""
        lowered = self.name.lower()
        return next((algo for algo in _CHECKSUM_ALGORITHMS if algo in lowered), "unknown")


@dataclass(eq=False)
class GPGAsset(Asset):
    """A public key fetched from a key server to check an armored signature."""

    key_id: int = 0
    source: Source | None = field(default=None, repr=False)

    def id(self) -> str:
        """Identifier built from the asset type and the key id."""
        return f"{self.asset_type.value}-{self.key_id}"

    def path(self) -> str:
        """Relative location of the key in the install tree."""
        return os.path.join("gpg", str(self.key_id))


class Source(Protocol):
    """A place releases are fetched from."""

    @property
    def source(self) -> str: ...

    @property
    def owner(self) -> str: ...

    @property
    def repo(self) -> str: ...

    @property
    def app(self) -> str: ...

    @property
    def id(self) -> str: ...

    @property
    def downloads_dir(self) -> str: ...

    @property
    def version(self) -> str: ...

    def pre_run(self) -> None: ...

    def run(self) -> None: ...


class DiscoveryError(Exception):
    """No suitable asset could be found."""


@dataclass
class Provider:
    """Sorts a release's assets into the binary and its verification files."""

    os_name: str
    arch: str
    os_config: OSConfig | None = None
    settings: dict[str, object] = field(default_factory=dict)
    assets: list[Asset] = field(default_factory=list)
    binary: Asset | None = None
    signature: Asset | None = None
    checksum: Asset | None = None
    key: Asset | None = None
    checksum_type: str = "none"
    signature_type: str = SIGNATURE_NONE

    def __post_init__(self) -> None:
        if self.os_config is None:
            self.os_config = osconfig.new(self.os_name, self.arch)

    def discover(self, names: Iterable[str], version: str) -> None:
        """Pick the binary, checksum, signature and key for ``names`` at ``version``.

        Raises :class:`DiscoveryError` when no binary scores high enough.
        """
        self._discover_match()
        self._discover_binary(list(names), version)
        self._discover_checksum()
        self._determine_checksum_sig_types()
        self._discover_signature(version)

    def _names_by_type(self) -> dict[AssetType, list[str]]:
        grouped: dict[AssetType, list[str]] = {}
        for item in self.assets:
            grouped.setdefault(item.asset_type, []).append(item.name)
        return grouped

    def _find(self, name: str) -> Asset | None:
        return next((item for item in self.assets if item.name == name), None)

    def _top(self, results: list[Sorted], kind: AssetType) -> Asset | None:
        if not results:
            return None
        top = results[0]
        if top.value < SCORE_THRESHOLD:
            logger.debug("skipped (%s) too low: %s (%d)", kind.value, top.key, top.value)
            return None
        return self._find(top.key)

    def _discover_binary(self, names: list[str], version: str) -> None:
        grouped = self._names_by_type()
        config = self.os_config
        scored: dict[AssetType, list[Sorted]] = {}
        for kind in _BINARY_TYPES:
            if kind not in grouped:
                continue
            scored[kind] = score(
                grouped[kind],
                ScoreOptions(
                    os=config.os_names(),
                    arch=list(config.architectures),
                    extensions=list(config.extensions),
                    terms=list(names),
                    versions=[version],
                    invalid_os=config.invalid_os(),
                    invalid_arch=config.invalid_architectures(),
                    invalid_extensions=[".zst"],
                ),
            )

        high_enough = any(
            entry.value >= SCORE_THRESHOLD for results in scored.values() for entry in results
        )
        if not high_enough and not self.settings.get("no-score-check", False):
            closest = next(
                (
                    entry
                    for kind in _BINARY_TYPES
                    for entry in scored.get(kind, [])
                    if entry.value < SCORE_THRESHOLD
                ),
                None,
            )
            if closest is not None:
                logger.error(
                    "closest matching: %s (%d) (threshold: %d) -- override with --no-score-check",
                    closest.key,
                    closest.value,
                    SCORE_THRESHOLD,
                )
            raise DiscoveryError(_LOW_SCORE_MESSAGE)

        for kind in (AssetType.UNKNOWN, AssetType.BINARY, AssetType.ARCHIVE):
            self.binary = self._top(scored.get(kind, []), kind)
            if self.binary is not None:
                break

        if self.binary is None:
            raise DiscoveryError("no binary found")

    def _discover_checksum(self) -> None:
        candidates = self._names_by_type().get(AssetType.CHECKSUM)
        if not candidates:
            return
        results = score(
            candidates,
            ScoreOptions(
                extensions=["sha256", "md5", "sha1", "txt"],
                weighted_terms={
                    "checksums": 80,
                    "SHA512": 50,
                    "SHA256": 40,
                    "MD5": 30,
                    "SHA1": 20,
                    "SHA": 15,
                    "SUMS": 10,
                },
                invalid_os=self.os_config.invalid_os(),
                invalid_arch=self.os_config.invalid_architectures(),
            ),
        )
        self.checksum = self._top(results, AssetType.CHECKSUM)

    def _determine_checksum_sig_types(self) -> None:
        self.checksum_type = self.checksum.checksum_type if self.checksum else "none"

        self.signature_type = SIGNATURE_NONE
        for item in self.assets:
            if item.asset_type is not AssetType.SIGNATURE:
                continue
            if item.parent_type in _BINARY_TYPES:
                self.signature_type = SIGNATURE_FILE
                break
            if item.parent_type is AssetType.CHECKSUM:
                self.signature_type = SIGNATURE_CHECKSUM

        logger.debug("checksum type: %s", self.checksum_type)
        logger.debug("signature type: %s", self.signature_type)

    def _discover_signature(self, version: str) -> None:
        signed: Asset | None = None
        if self.signature_type == SIGNATURE_CHECKSUM:
            signed = self.checksum
        elif self.signature_type == SIGNATURE_FILE:
            signed = self.binary
        names = [] if signed is None else [signed.name, f"{signed.name}.sig", f"{signed.name}.asc"]

        candidates = self._names_by_type().get(AssetType.SIGNATURE)
        if not candidates:
            return
        results = score(
            candidates,
            ScoreOptions(
                extensions=["sig", "asc", "sig.asc", "gpg", "keyless.sig"],
                names=names,
                versions=[version],
                invalid_os=self.os_config.invalid_os(),
                invalid_arch=self.os_config.invalid_architectures(),
            ),
        )
        self.signature = self._top(results, AssetType.SIGNATURE)
        if self.signature is not None:
            self.key = self.signature.matched_asset

    def _discover_match(self) -> None:
        signatures = [a for a in self.assets if a.asset_type is AssetType.SIGNATURE]
        keys = [a for a in self.assets if a.asset_type is AssetType.KEY]

        for sig in signatures:
            if sig.matched_asset is not None:
                continue
            sig_base = _trim_ext(sig.name).lower()
            for key in keys:
                if _trim_ext(key.name).lower() == sig_base:
                    logger.debug("matched key: %s to signature: %s", key.name, sig.name)
                    sig.matched_asset = key
                    key.matched_asset = sig
                    break

        # Keys used for several files, such as a release-wide public key.
        for key in keys:
            if key.matched_asset is not None:
                continue
            for sig in signatures:
                if sig.matched_asset is None:
                    sig.matched_asset = key
                    logger.debug("matched key: %s to signature: %s", key.name, sig.name)

        found_gpg = False
        for sig in signatures:
            if sig.matched_asset is not None or not sig.name.endswith(".asc"):
                continue
            gpg_key = GPGAsset(
                name=sig.name.replace(".asc", ".pub"), os=self.os_name, arch=self.arch
            )
            if not found_gpg:
                logger.info("gpg detected will fetch public key for signature")
                found_gpg = True
            gpg_key.matched_asset = sig
            sig.matched_asset = gpg_key
            self.assets.append(gpg_key)