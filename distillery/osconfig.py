"""Operating system and architecture descriptions used to match release assets."""

from __future__ import annotations

from dataclasses import dataclass, field

WINDOWS = "windows"
LINUX = "linux"
DARWIN = "darwin"
FREEBSD = "freebsd"

AMD64 = "amd64"
ARM64 = "arm64"

AMD64_ARCHITECTURES: tuple[str, ...] = (
    "amd64",
    "x86_64",
    "x86-64",
    "64bit",
    "x64",
    "x86",
    "64-bit",
)
ARM64_ARCHITECTURES: tuple[str, ...] = ("arm64", "aarch64", "armv8-a", "arm64-bit")

_OS_ALIASES: dict[str, tuple[str, ...]] = {
    WINDOWS: ("win",),
    LINUX: (),
    DARWIN: ("osx", "macos", "apple", "ventura", "sonoma", "sequoia"),
}

_OS_EXTENSIONS: dict[str, tuple[str, ...]] = {
    WINDOWS: (".exe",),
    LINUX: (".AppImage",),
}

_INVALID_OS: dict[str, tuple[str, ...]] = {
    WINDOWS: (LINUX, DARWIN, FREEBSD),
    LINUX: (WINDOWS, DARWIN),
    DARWIN: (WINDOWS, LINUX, FREEBSD),
}

_ARCH_FAMILIES: dict[str, tuple[str, ...]] = {
    AMD64: AMD64_ARCHITECTURES,
    ARM64: ARM64_ARCHITECTURES,
}

_INVALID_ARCH: dict[str, tuple[str, ...]] = {
    ARM64: AMD64_ARCHITECTURES,
    AMD64: ARM64_ARCHITECTURES,
}


@dataclass
class OSConfig:
    """The names, architectures and extensions that identify a target platform."""

    name: str
    arch: str
    aliases: list[str] = field(default_factory=list)
    architectures: list[str] = field(default_factory=list)
    extensions: list[str] = field(default_factory=list)

    def os_names(self) -> list[str]:
        """The operating system name followed by its aliases."""
        return [self.name, *self.aliases]

    def invalid_os(self) -> list[str]:
        """Operating system names that must not match this platform."""
        return list(_INVALID_OS.get(self.name, ()))

    def invalid_architectures(self) -> list[str]:
        """Architecture names that must not match this platform."""
        return list(_INVALID_ARCH.get(self.arch, ()))


def new(os_name: str, arch: str) -> OSConfig:
    """Build the configuration for an operating system and architecture."""
    architectures = [arch]
    if os_name == DARWIN:
        architectures.append("universal")
    architectures.extend(_ARCH_FAMILIES.get(arch, ()))

    return OSConfig(
        name=os_name,
        arch=arch,
        aliases=list(_OS_ALIASES.get(os_name, ())),
        architectures=list(dict.fromkeys(architectures)),
        extensions=list(_OS_EXTENSIONS.get(os_name, ())),
    )