"""Error taxonomy for client-side mutations and backend calls."""


class TechProError(Exception):
    """Base class for all TechPro client errors."""


class AuthRequired(TechProError):
    """Raised when an action needs an authenticated actor and there is none."""

    def __init__(self, action: str = "this action") -> None:
        super().__init__(f"Sign in required for {action}")
        self.action = action


class PermissionDenied(TechProError):
    """Raised when the local cache shows the viewer cannot perform an action."""


class RemoteError(TechProError):
    """A backend call failed.

    Attributes:
        status_code: HTTP status code, if the failure came from a response.
        reason: Short human readable reason.
    """

    def __init__(self, reason: str, status_code: int | None = None) -> None:
        super().__init__(reason if status_code is None else f"{reason} (status {status_code})")
        self.reason = reason
        self.status_code = status_code


class RemoteRejected(RemoteError):
    """The backend refused the request (permission, constraint violation, not found)."""


class RemoteUnavailable(RemoteError):
    """Transport failure, timeout, throttling or a server-side error."""


class PartialCleanupFailure(TechProError):
    """Secondary cleanup failed after the primary mutation already succeeded."""

    def __init__(self, message: str, orphaned: list[str] | None = None) -> None:
        super().__init__(message)
        self.orphaned = orphaned or []
