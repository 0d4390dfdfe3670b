class LibraryError(Exception):
    """Base class for every error raised by the component library."""


class ValidationError(LibraryError):
    """A component record failed client-side validation."""


class StoreError(LibraryError):
    """The component store rejected or failed an operation."""


class AuthError(LibraryError):
    """Authentication failed or the auth system is not ready."""
