"""Custom exception hierarchy for riseadmin."""

from __future__ import annotations


class RiseAdminError(Exception):
    """Base class for all custom errors raised by riseadmin."""


# --- 3-layer hierarchy ---

class DomainError(RiseAdminError):
    """Base class for domain-level errors."""


class InfrastructureError(RiseAdminError):
    """Base class for infrastructure-level errors."""


class ApplicationError(RiseAdminError):
    """Base class for application-level errors."""


# --- Crop pipeline errors ---

class CropError(DomainError):
    """Base class for failures of the crop-and-encode pipeline."""


class ImageLoadError(CropError):
    """Raised when the source image is unreachable or cannot be decoded."""


class InvalidCropRegionError(CropError):
    """Raised when crop geometry is non-finite or has no area."""


class SurfaceUnavailableError(CropError):
    """Raised when the off-screen destination surface cannot be created."""


class EncodeFailedError(CropError):
    """Raised when serialising the cropped surface yields no payload."""


# --- Domain errors ---

class ValidationError(DomainError):
    """Raised when submitted form data is incomplete or malformed."""


class RecordNotFoundError(DomainError):
    """Raised when an update or delete matches no row."""


# --- Infrastructure errors ---

class DatabaseError(InfrastructureError):
    """Raised when a database operation fails."""


class ConnectionPoolExhausted(InfrastructureError):
    """Raised when no connections are available in the pool."""


class StorageError(InfrastructureError):
    """Raised when an object cannot be written to or removed from storage."""


class EmailDeliveryError(InfrastructureError):
    """Raised when the transactional email provider rejects a message."""


# --- Settings errors ---

class SettingsError(RiseAdminError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""
