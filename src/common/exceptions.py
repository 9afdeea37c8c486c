from typing import Optional


class SignalError(Exception):
    """Base exception for all traffic signal module errors."""
    pass

class ConfigurationError(SignalError):
    """Raised when configuration is invalid."""
    pass

class PersistenceError(SignalError):
    """Raised when the stored intersection snapshot cannot be read or written."""
    pass

class RecorderStateError(SignalError):
    """Raised when a duration recorder is driven after it finished or was cancelled."""
    pass

class GeocodingError(SignalError):
    """Raised when the reverse geocoding lookup fails."""
    pass

class PositionError(SignalError):
    """
    Raised when the device position cannot be acquired.
    Codes follow the browser geolocation API: 1 permission denied,
    2 position unavailable, 3 timeout.
    """
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3

    def __init__(self, code: int, message: Optional[str] = None):
        self.code = code
        self.message = message or ""
        super().__init__(f"[{code}] {self.message}")
