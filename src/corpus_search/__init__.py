"""In-memory full-text search over a fixed document corpus."""

__version__ = "0.1.0"
