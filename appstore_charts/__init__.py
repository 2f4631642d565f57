"""Daily App Store ranking snapshots: ingestion, storage and read API."""

__version__ = "2.0.0"
