"""Typed errors for fragstore."""


class FragstoreError(Exception):
    """Base exception for all fragstore errors."""


class ValidationError(FragstoreError):
    """Raised when a Fragment is constructed from malformed input."""


class UnsupportedTypeError(ValidationError):
    """Raised when a Content-Type is not in the supported set."""

    def __init__(self, media_type: object) -> None:
        """Initialize with the rejected Content-Type value."""
        self.media_type = media_type
        super().__init__(f"Unsupported media type: {media_type!r}")


class NotFoundError(FragstoreError):
    """Raised when no fragment exists for an (owner_id, fragment_id) pair."""

    def __init__(self, owner_id: str, fragment_id: str) -> None:
        """Initialize with the missing fragment's key."""
        self.owner_id = owner_id
        self.fragment_id = fragment_id
        super().__init__(f"Fragment not found: {fragment_id}")


class TypeMismatchError(FragstoreError):
    """Raised when an update supplies a base type different from the stored one."""

    def __init__(self, expected: str, actual: str) -> None:
        """Initialize with the stored and supplied base types."""
        self.expected = expected
        self.actual = actual
        super().__init__(f"Content-Type must match existing fragment type: expected {expected}, got {actual}")


class UnsupportedConversionError(FragstoreError):
    """Raised when a target type is not a legal conversion for a fragment."""

    def __init__(self, source: str, target: str) -> None:
        """Initialize with the source and requested target types."""
        self.source = source
        self.target = target
        super().__init__(f"Conversion not supported from {source} to {target}")


class ConversionError(FragstoreError):
    """Raised when source data is malformed for its type or a codec fails."""

    def __init__(self, source: str, target: str, reason: str) -> None:
        """Initialize with the conversion pair and a human-readable reason."""
        self.source = source
        self.target = target
        self.reason = reason
        super().__init__(f"Conversion from {source} to {target} failed: {reason}")


class StoreError(FragstoreError):
    """Raised for backend failures that are not otherwise classified."""


class FragmentIntegrityError(StoreError):
    """Raised when stored data length does not match the metadata size."""

    def __init__(self, fragment_id: str, expected: int, actual: int) -> None:
        """Initialize with the fragment ID and mismatched sizes."""
        self.fragment_id = fragment_id
        self.expected = expected
        self.actual = actual
        super().__init__(f"Fragment data size mismatch for {fragment_id}: expected {expected} bytes, got {actual}")
