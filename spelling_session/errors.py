from __future__ import annotations


class SessionError(Exception):
    pass


class LoadFailure(SessionError):
    """Word batch or plan snapshot could not be obtained; the session aborts."""


class SyncFailure(SessionError):
    """Progress or plan-advance call failed; the session keeps going."""


class StorageFailure(SessionError):
    """Preference storage could not be read or written."""


class BackendError(Exception):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
