"""Domain errors raised by the booking core

Every failure carries a kind and a human readable reason. The request layer
maps `status_code` onto the HTTP response; services never raise HTTPException.
"""


class AppError(Exception):
    """Base class for errors surfaced to the caller"""

    kind = "AppError"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UserNotFound(AppError):
    kind = "UserNotFound"
    status_code = 404


class VehicleNotFound(AppError):
    kind = "VehicleNotFound"
    status_code = 404


class ResourceNotFound(AppError):
    kind = "ResourceNotFound"
    status_code = 404


class Unauthorized(AppError):
    kind = "Unauthorized"
    status_code = 403


class InvalidArgument(AppError):
    kind = "InvalidArgument"
    status_code = 400


class DuplicateResource(AppError):
    kind = "DuplicateResource"
    status_code = 409


class IllegalState(AppError):
    kind = "IllegalState"
    status_code = 409
