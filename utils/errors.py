"""
Error taxonomy for the portal.

Routes raise these and the handler registered in ``create_app`` renders them
as ``{"error": message, "code": code}`` with the matching status code.
"""


class PortalError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message, status_code=None, code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code

    def to_dict(self):
        return {"error": self.message, "code": self.code}


class ValidationError(PortalError):
    """Missing or malformed input, caught before any store call."""
    status_code = 400
    code = "VALIDATION_ERROR"


class AuthenticationError(PortalError):
    status_code = 401
    code = "UNAUTHENTICATED"

    def __init__(self, message="Unauthorized"):
        super().__init__(message)


class AuthorizationError(PortalError):
    status_code = 403
    code = "FORBIDDEN"

    def __init__(self, message="Forbidden"):
        super().__init__(message)


class InvalidTransitionError(PortalError):
    status_code = 409
    code = "INVALID_TRANSITION"


class ReferentialIntegrityError(PortalError):
    status_code = 409
    code = "REFERENTIAL_INTEGRITY"


class StoreError(PortalError):
    """Transient store failure. Safe to retry."""
    status_code = 503
    code = "STORE_UNAVAILABLE"

    def __init__(self, message="Temporary storage problem, please try again"):
        super().__init__(message)
