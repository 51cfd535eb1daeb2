"""
Domain errors raised by the store-facing services.
Routers translate these into HTTP responses.
"""


class LearnHubError(Exception):
    """Base exception for LearnHub"""
    status_code: int = 500

    def __init__(self, message: str, status_code: int = None):
        self.message = message
        if status_code:
            self.status_code = status_code
        super().__init__(self.message)


class DuplicateEmailError(LearnHubError):
    """Raised when registering an email that already has an account."""
    status_code = 409

    def __init__(self, email: str):
        self.email = email
        super().__init__("User already exists", self.status_code)


class LessonOrderConflictError(LearnHubError):
    """
    Raised when a lesson append keeps losing the lesson_seq guard.

    Another writer appended to the same course between our read and our
    conditional write on every attempt.
    """
    status_code = 409

    def __init__(self, course_id: str, attempts: int):
        self.course_id = course_id
        self.attempts = attempts
        super().__init__(
            f"Could not assign a lesson order for course {course_id} after {attempts} attempts",
            self.status_code,
        )


class EnrollmentConsistencyError(LearnHubError):
    """
    Raised when the course roster was updated but the user's enrolled list
    was not. The enrollment is one-sided until reconcile_enrollments runs.
    """
    status_code = 500

    def __init__(self, course_id: str, user_id: str):
        self.course_id = course_id
        self.user_id = user_id
        super().__init__(
            f"Enrollment of {user_id} in {course_id} is incomplete; it will be repaired by reconciliation",
            self.status_code,
        )
