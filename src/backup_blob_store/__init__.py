"""Azure Blob Storage object store for backup artifacts."""

__version__ = "0.1.0"
