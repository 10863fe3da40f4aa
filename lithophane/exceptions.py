"""Custom exceptions for the lithophane package."""


class LithophaneError(Exception):
    """Base exception for lithophane package."""

    pass


class DegenerateGeometryError(LithophaneError):
    """Points are collinear or coincident, so no face normal exists."""

    pass


class ExpressionError(LithophaneError):
    """Invalid coordinate expression.

    Args:
        axis: Name of the coordinate the expression was meant for ("x", "y" or "z").
        reason: Description of what went wrong.
    """

    def __init__(self, axis: str, reason: str):
        self.axis = axis
        self.reason = reason
        super().__init__(f"invalid {axis} expression: {reason}")


class ImageLoadError(LithophaneError):
    """Failed to read or decode an image."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"error with image: {reason}")


class MeshGenerationError(LithophaneError):
    """Mesh generation could not be configured or its output not written."""

    pass
