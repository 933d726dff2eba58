class UIActionError(Exception):
    """Exception raised when a guarded UI interaction fails."""

    def __init__(self, description: str, message: str | None = None):
        # The description names the element for whoever reads the test failure.
        self.description = description
        self.message = (
            message if message is not None else f"UI action on '{description}' failed"
        )
        super().__init__(self.message)


class ElementNotVisibleError(UIActionError):
    """Exception raised when an element does not become visible in time."""

    def __init__(self, description: str, timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__(
            description,
            f"Timed out after {timeout_ms}ms waiting for '{description}' to become visible",
        )
