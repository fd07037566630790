"""Client-visible error kinds raised by the services and routes.

Each kind carries the HTTP status the application maps it to; the
handlers in ``machinehub.main`` turn them into JSON responses of the form
``{"error": <kind>, "message": <text>, "details": <object or null>}``.
"""
from typing import Any


class MachineHubError(Exception):
    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class InvalidPathParamError(MachineHubError):
    status_code = 400


class InvalidBodyError(MachineHubError):
    status_code = 400

    def __init__(self, message: str = "Invalid request body", details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details)


class NotFoundError(MachineHubError):
    status_code = 404
