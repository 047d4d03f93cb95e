"""
Service errors

Raised by the credential, entity and analytics modules and turned into JSON
responses by the handlers registered in main.py.
"""
from typing import Optional


class ServiceError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Conflict(ServiceError):
    status_code = 400
    default_message = "Already exists"


class NotFound(ServiceError):
    status_code = 404
    default_message = "Not found"


class InvalidCredentials(ServiceError):
    status_code = 400
    default_message = "Invalid username or password"


class InvalidArgument(ServiceError):
    status_code = 400
    default_message = "Invalid argument"


class Internal(ServiceError):
    pass
