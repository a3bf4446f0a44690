class EditorError(RuntimeError):
    """Base class for recoverable editor failures."""
    pass


class LoadFailure(EditorError):
    """Raised when an existing template cannot be fetched or parsed."""
    pass


class SaveFailure(EditorError):
    """Raised when the backend rejects a template submission."""
    pass
