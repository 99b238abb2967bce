"""Domain-specific exceptions for media storage."""


class MediaError(Exception):
    """Base class for media-related errors."""


class InvalidUploadError(MediaError):
    """Raised when required fields or files are missing from an upload."""


class UnsupportedMediaError(MediaError):
    """Raised when Content-Type is not allowed."""


class PayloadTooLargeError(MediaError):
    """Raised when an uploaded file exceeds the configured limit."""


class OwnershipMismatchError(MediaError):
    """Raised when the caller's company does not own the target slot."""


class AssetNotFoundError(MediaError):
    """Raised when no blob is stored under the requested key."""


class LogoNotFoundError(AssetNotFoundError):
    """Raised when a company has no logo."""


class InvalidStorageKeyError(AssetNotFoundError):
    """Raised when a key would escape its storage namespace."""


class MetadataCorruptedError(MediaError):
    """Raised when an existing metadata document cannot be parsed."""
