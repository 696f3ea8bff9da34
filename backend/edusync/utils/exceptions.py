"""Attendance error taxonomy.

Every failure the attendance core can report is one of the classes below.
Each carries a stable ``code`` for clients, a human readable ``message`` and
the HTTP status the API layer answers with.
"""
from typing import Any, Dict, Optional

class AttendanceError(Exception):
    """Base class for expected, operator-recoverable attendance failures."""

    code = 'ATTENDANCE_ERROR'
    status_code = 400
    default_message = 'Attendance operation failed'

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.default_message
        self.extra: Dict[str, Any] = extra
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        data = {'reason': self.code, 'message': self.message}
        data.update(self.extra)
        return data

class MalformedToken(AttendanceError):
    code = 'MALFORMED_TOKEN'
    status_code = 400
    default_message = 'Invalid QR: Decryption failed'

class TokenExpired(AttendanceError):
    code = 'TOKEN_EXPIRED'
    status_code = 400
    default_message = 'QR Expired: Code is too old'

class StudentNotFound(AttendanceError):
    code = 'STUDENT_NOT_FOUND'
    status_code = 404
    default_message = 'Student not found'

class NotEnrolled(AttendanceError):
    code = 'NOT_ENROLLED'
    status_code = 403
    default_message = 'Student is not enrolled in this class'

class ClassNotFound(AttendanceError):
    code = 'CLASS_NOT_FOUND'
    status_code = 404
    default_message = 'Class not found'

class SessionNotFound(AttendanceError):
    code = 'SESSION_NOT_FOUND'
    status_code = 404
    default_message = 'Session not found or not active for this class'

class SessionAlreadyActive(AttendanceError):
    code = 'SESSION_ALREADY_ACTIVE'
    status_code = 409
    default_message = 'An active session already exists for this class'

class AlreadyEnded(AttendanceError):
    code = 'ALREADY_ENDED'
    status_code = 409
    default_message = 'Session is already completed'

class NotOwner(AttendanceError):
    code = 'NOT_OWNER'
    status_code = 403
    default_message = 'Only the lecturer who started this session can do that'

class AlreadyMarked(AttendanceError):
    code = 'ALREADY_MARKED'
    status_code = 409
    default_message = 'Student already marked in this session'

    def __init__(self, message: Optional[str] = None, **extra: Any):
        extra.setdefault('already_marked', True)
        super().__init__(message, **extra)

class InvalidConfirmation(AttendanceError):
    code = 'INVALID_CONFIRMATION'
    status_code = 401
    default_message = 'Invalid confirmation password'

class StorageFailure(AttendanceError):
    code = 'STORAGE_FAILURE'
    status_code = 500
    default_message = 'Attendance could not be saved'
