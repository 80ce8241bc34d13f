"""
Error taxonomy shared by services and controllers.

Services raise these; controllers turn them into JSON responses using
``status_code``. They derive from ValueError so older ``except ValueError``
handlers keep working.
"""


class LibraryError(ValueError):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(LibraryError):
    status_code = 404


class PolicyViolation(LibraryError):
    status_code = 400


class ForbiddenError(LibraryError):
    status_code = 403


class ConflictError(LibraryError):
    status_code = 409
