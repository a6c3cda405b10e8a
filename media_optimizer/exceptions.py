"""
Custom exception hierarchy for the media optimizer.

Fatal errors (missing source, missing encoders, catalog failures) abort the
run. Probe and conversion errors are recorded per file and the run continues.
"""
from pathlib import Path
from typing import Iterable


class MediaOptimizerError(Exception):
    """Base exception for all media optimizer errors."""
    pass


class NotFoundError(MediaOptimizerError):
    """Raised when the source directory is missing or is not a directory."""
    pass


class MissingDependencyError(MediaOptimizerError):
    """Raised when required external encoders are not installed."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"Please install {', '.join(self.missing)}")


class ProbeError(MediaOptimizerError):
    """Raised when a file's mime type or codec cannot be probed."""

    def __init__(self, path: Path, cause: str):
        self.path = path
        self.cause = cause
        super().__init__(f"Probe failed for {path}: {cause}")


class ConversionError(MediaOptimizerError):
    """Raised when an external encoder fails on a file."""

    def __init__(self, path: Path, stderr: str):
        self.path = path
        self.stderr = stderr
        super().__init__(f"Conversion failed for {path}: {stderr}")


class CatalogWriteError(MediaOptimizerError):
    """Raised when the catalog database cannot be written."""
    pass
