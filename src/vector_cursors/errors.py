"""Exceptions raised while loading, rendering and writing cursor themes."""


class CursorThemeError(Exception):
    """Base class for every error raised by vector_cursors."""


class DocumentIoError(CursorThemeError):
    """The theme document could not be read from disk."""

    def __init__(self, path, cause):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to read input file {path}: {cause}")

    def __reduce__(self):
        return (type(self), (self.path, self.cause))


class DocumentEvaluationError(CursorThemeError):
    """The theme document does not have the expected shape."""

    def __init__(self, source, message):
        self.source = source
        self.message = message
        super().__init__(f"{source}: {message}")

    def __reduce__(self):
        return (type(self), (self.source, self.message))


class PathSyntaxError(CursorThemeError):
    """Path data could not be parsed.

    `fragment` is the text at which parsing stopped and `offset` its
    position in the path data.
    """

    def __init__(self, message, fragment="", offset=0):
        self.message = message
        self.fragment = fragment
        self.offset = offset
        super().__init__(f"{message} at offset {offset}: {fragment!r}")

    def __reduce__(self):
        return (type(self), (self.message, self.fragment, self.offset))


class RenderError(CursorThemeError):
    """A cursor could not be rendered at a given size."""

    def __init__(self, message, path=None, size=None):
        self.message = message
        self.path = path
        self.size = size
        details = []
        if size is not None:
            details.append(f"size {size}")
        if path is not None:
            details.append(f"path {path!r}")
        if details:
            message = f"{message} ({', '.join(details)})"
        super().__init__(message)

    def __reduce__(self):
        # keep the context when crossing process boundaries
        return (type(self), (self.message, self.path, self.size))


class CursorWriteError(CursorThemeError):
    """Encoded cursor bytes could not be written to their sink."""
