class DevdashError(RuntimeError):
    """Base error for the collection / storage core."""
    pass


class CollectorError(DevdashError):
    """External API call failed (transport, timeout, HTTP status, invalid JSON)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StoreError(DevdashError):
    """Persisting a record failed."""
    pass
