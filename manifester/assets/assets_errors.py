"""
Custom exceptions for the assets module.
"""


class AssetError(Exception):
    """Raised when a gallery image cannot be read or a derivative cannot be written."""
    pass
