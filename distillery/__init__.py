"""Match release assets to a platform, pair them with checksums, signatures and keys, and inventory installed binaries."""

__version__ = "0.1.0"