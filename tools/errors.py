"""
Error taxonomy shared by connectors, the extraction service and the engine.
"""

from __future__ import annotations


class AppError(Exception):
    """An error with an HTTP-like status code and an optional inner cause."""

    def __init__(self, message: str, status_code: int = 400, inner: object = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.inner = inner

    def to_error_list(self) -> list[str]:
        """Flatten the inner-error chain, outermost first."""
        errors: list[str] = []
        cur: object = self

        while cur is not None:
            if isinstance(cur, AppError):
                errors.append(f"[{cur.status_code}] {cur.message}")
                cur = cur.inner
            else:
                errors.append(str(cur))
                cur = None

        return errors


class NotFound(AppError):
    """Upstream resource does not exist (404). Never retried."""

    def __init__(self, message: str, inner: object = None) -> None:
        super().__init__(message, 404, inner)


class RequestFailed(AppError):
    """Upstream 5xx, timeout or transport failure."""

    def __init__(self, message: str, inner: object = None) -> None:
        super().__init__(message, 500, inner)


class RateLimited(AppError):
    """AI completion was throttled (429-class)."""

    def __init__(self, message: str, inner: object = None) -> None:
        super().__init__(message, 429, inner)


class ValidationFailed(AppError):
    """Malformed schema input or output. Fails fast."""

    def __init__(self, message: str, inner: object = None) -> None:
        super().__init__(message, 400, inner)
