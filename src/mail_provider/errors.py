"""Mail transport errors."""


class TransportError(Exception):
    """The send call failed. Not retried; reported to the caller."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
