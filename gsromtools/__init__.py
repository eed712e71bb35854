"""Build helpers for Game Boy Color ROM projects: palettes, tiles, LZ, checksums and patches."""

__version__ = "1.0.0"