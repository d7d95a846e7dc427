"""Client/server mapping merge with fingerprint caching and reproducible archives."""

__version__ = "0.1.0"
