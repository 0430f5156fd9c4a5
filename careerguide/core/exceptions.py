"""
Domain exceptions.

Services raise these; routes translate them to HTTP responses:
- AdmissionsValidationError -> 422 (caller can fix the request)
- UnauthenticatedError      -> 401
- PermissionDeniedError     -> 403
- AdmissionsCommitError     -> 409 (retryable, nothing was applied)
- ApplicationRejectedError  -> 400
- ProfileNotFoundError      -> 404
"""


class CareerGuideError(Exception):
    """Base class for all portal errors."""


class AdmissionsValidationError(CareerGuideError):
    """Malformed admissions request (missing institution, bad intake limit)."""


class AuthorizationError(CareerGuideError):
    """Caller is not allowed to run the operation."""


class UnauthenticatedError(AuthorizationError):
    pass


class PermissionDeniedError(AuthorizationError):
    pass


class AdmissionsCommitError(CareerGuideError):
    """
    The atomic status update for an intake run was rejected.

    No application changed status; the run is safe to retry in full.
    """

    retryable = True

    def __init__(self, institution_id, reason: str = "commit rejected"):
        self.institution_id = institution_id
        self.reason = reason
        super().__init__(f"Admissions for institution {institution_id} not applied: {reason}")


class ApplicationRejectedError(CareerGuideError):
    """A student application broke a business rule."""


class ProfileNotFoundError(CareerGuideError):
    def __init__(self, student_id):
        self.student_id = student_id
        super().__init__(f"Student profile {student_id} not found")
