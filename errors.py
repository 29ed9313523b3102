"""
Error taxonomy for the storefront.

Every error carries the HTTP status it maps to; main.py renders them as
``{"success": false, "message": ...}``.
"""


class StoreError(Exception):
    status_code = 500

    def __init__(self, message: str = "Server error"):
        super().__init__(message)
        self.message = message


class InvalidArgument(StoreError):
    status_code = 400


class Unauthorized(StoreError):
    status_code = 401


class Forbidden(StoreError):
    status_code = 403


class NotFound(StoreError):
    status_code = 404


class Conflict(StoreError):
    status_code = 409
