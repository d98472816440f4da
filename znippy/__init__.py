"""Archive format with per-file zstd compression, a chunk index and checksum verification."""

__version__ = "0.1.0"

__all__ = ["__version__"]