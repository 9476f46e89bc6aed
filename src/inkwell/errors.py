"""Exception classes for Inkwell.

Provides standardized exceptions for error handling throughout Inkwell.
Nothing here is meant to be fatal to a host: the editor surface catches
``InvalidPathError`` and degrades the offending step to a no-op.
"""

from __future__ import annotations


class InkwellError(Exception):
    """Base exception for all Inkwell errors.

    Subclass this for specific error categories.
    """

    pass


class InvalidPathError(InkwellError):
    """A path does not resolve to a node in the document.

    Usually the path went stale after a structural change above it.
    """

    def __init__(self, path: tuple[int, ...], message: str = "") -> None:
        """Initialize invalid path error.

        Args:
            path: The path that failed to resolve
            message: Extra detail (optional)
        """
        self.path = path
        detail = f": {message}" if message else ""
        super().__init__(f"Cannot resolve path {list(path)}{detail}")


class NodeTypeError(InkwellError):
    """An operation was applied to the wrong node variant.

    Raised, for example, when merging a Text into an Element or inserting
    text into an Element.
    """

    pass


class NormalizationError(InkwellError):
    """Normalization did not converge.

    Raised when the normalization rules keep producing fixes beyond the
    configured iteration budget, which indicates a rule bug.
    """

    def __init__(self, iterations: int) -> None:
        self.iterations = iterations
        super().__init__(
            f"Could not completely normalize the document after {iterations} iterations"
        )


class SerializationError(InkwellError):
    """Malformed serialized document data."""

    pass
