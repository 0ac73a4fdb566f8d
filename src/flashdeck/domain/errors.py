"""
Error taxonomy shared by every layer.

The scheduling engine only ever raises InvalidRating. Everything else originates at
the boundary (store, services, HTTP, CLI). Each error carries the HTTP status it maps
to so the server can translate them with a single handler.
"""


class FlashdeckError(Exception):
    """Base class for all flashdeck errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRating(FlashdeckError, ValueError):
    """Rating outside 1 (Again) .. 4 (Easy)."""

    status_code = 400

    def __init__(self, value: object = None):
        super().__init__("Rating must be 1 (Again), 2 (Hard), 3 (Good), or 4 (Easy)")
        self.value = value


class InvalidRequest(FlashdeckError):
    status_code = 400


class Unauthorized(FlashdeckError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class NotFound(FlashdeckError):
    status_code = 404


class Conflict(FlashdeckError):
    status_code = 409


class StoreFailure(FlashdeckError):
    """I/O or serialization failure inside a store. Never shown verbatim to clients."""

    status_code = 500
    public_message = "Storage operation failed"
