class LibraryError(Exception):
    """Base error for all user-facing Edu Library exceptions."""


class ConfigurationError(LibraryError):
    """Raised when configuration is invalid or incomplete."""


class ProjectNotInitializedError(LibraryError):
    """Raised when .edulib metadata is missing."""


class ValidationError(LibraryError):
    """Raised when a draft or request fails model invariants."""


class ResourceNotFoundError(LibraryError):
    """Raised when no catalog row matches the requested id."""

    def __init__(self, resource_id: str) -> None:
        super().__init__(f"Resource not found: {resource_id}")
        self.resource_id = resource_id


class StoreError(LibraryError):
    """Raised when the metadata store fails an operation."""


class BackendUnavailableError(StoreError):
    """Raised when the metadata store cannot be reached."""


class StoreWriteError(StoreError):
    """Raised when the metadata store rejects a write."""

    def __init__(self, message: str, orphaned_key: str | None = None) -> None:
        super().__init__(message)
        self.orphaned_key = orphaned_key


class UploadFailedError(LibraryError):
    """Raised when the blob store rejects or cannot receive an upload."""


class AuthorizationError(LibraryError):
    """Raised when an admin-only operation has no valid session."""
