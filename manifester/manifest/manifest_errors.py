"""
Custom exceptions for the manifest module.

Date and coordinate failures during generation reuse IdentifierMismatch and
MissingCoordinate from the places module; only writing the generated module
has its own error.
"""


class ManifestError(Exception):
    """Base exception for manifest generation failures."""
    pass


class ArtifactWriteError(ManifestError):
    """Raised when the generated module cannot be written."""
    pass
