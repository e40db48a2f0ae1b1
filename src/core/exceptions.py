"""
Photo lifecycle exceptions.

Every error raised by the photo service, its repositories and the storage
gateway derives from PhotoServiceError so the HTTP boundary can map them to
responses without knowing the call site.
"""
from typing import Optional


class PhotoServiceError(Exception):
    """Base exception for all photo lifecycle errors."""

    error_code = "PHOTO_SERVICE_ERROR"

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[dict] = None):
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert exception to dictionary for API responses."""
        result = {
            'error': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
        }
        if self.details:
            result['details'] = self.details
        return result


class ValidationError(PhotoServiceError):
    """Raised when an upload fails size or type validation."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, error_code: Optional[str] = None, field: Optional[str] = None, value=None):
        details = {}
        if field:
            details['field'] = field
        if value is not None:
            details['value'] = value
        super().__init__(message, error_code, details)


class NotFoundError(PhotoServiceError):
    """Raised when a parent entity or photo does not exist."""

    error_code = "NOT_FOUND"
    entity_type = "entity"

    def __init__(self, entity_id, message: Optional[str] = None):
        self.entity_id = entity_id
        message = message or f"{self.entity_type.capitalize()} '{entity_id}' not found"
        super().__init__(message, details={'entity_type': self.entity_type, 'entity_id': entity_id})


class ParentNotFoundError(NotFoundError):
    error_code = "PARENT_NOT_FOUND"
    entity_type = "parent"


class PhotoNotFoundError(NotFoundError):
    error_code = "PHOTO_NOT_FOUND"
    entity_type = "photo"


class LimitExceededError(PhotoServiceError):
    """Raised when a parent already holds the maximum number of photos."""

    error_code = "PHOTO_MAX_REACHED"

    def __init__(self, parent_id, limit: int):
        self.parent_id = parent_id
        self.limit = limit
        super().__init__(
            f"Maximum {limit} photos per parent reached",
            details={'parent_id': parent_id, 'limit': limit},
        )


class ForbiddenError(PhotoServiceError):
    """Raised when the caller may not act on a photo or its parent."""

    error_code = "FORBIDDEN"

    def __init__(self, message: str = "Access denied", resource: Optional[str] = None, action: Optional[str] = None):
        details = {}
        if resource:
            details['resource'] = resource
        if action:
            details['action'] = action
        super().__init__(message, details=details)


class StorageError(PhotoServiceError):
    """Raised when an object store operation fails."""

    error_code = "STORAGE_ERROR"

    def __init__(self, message: str, operation: Optional[str] = None, key: Optional[str] = None):
        self.operation = operation
        self.key = key
        details = {}
        if operation:
            details['operation'] = operation
        if key:
            details['key'] = key
        super().__init__(message, details=details)


class PersistenceError(PhotoServiceError):
    """Raised when a metadata store operation fails."""

    error_code = "PERSISTENCE_ERROR"

    def __init__(self, message: str, operation: Optional[str] = None, original_error: Optional[str] = None):
        self.operation = operation
        details = {}
        if operation:
            details['operation'] = operation
        if original_error:
            details['original_error'] = original_error
        super().__init__(message, details=details)


class DecodeError(PhotoServiceError):
    """Raised when uploaded bytes cannot be decoded as an image."""

    error_code = "IMAGE_DECODE_ERROR"
