from __future__ import annotations


class BoothError(Exception):
    """Base for failures that map onto a user-facing message and HTTP status."""

    status = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequest(BoothError):
    status = 400


class ConfigError(BoothError):
    status = 500


class VendorError(BoothError):
    status = 502


class NoImageError(VendorError):
    def __init__(self, message: str = "No image returned from AI") -> None:
        super().__init__(message)


class JobCancelled(BoothError):
    status = 503


class VendorTimeout(BoothError):
    status = 504

    def __init__(self, message: str = "Generation timed out. Please try again.") -> None:
        super().__init__(message)
