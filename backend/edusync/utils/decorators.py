"""Custom decorators for authorization and validation."""
from functools import wraps
from flask import g, request
from edusync.models.user import UserRole
from edusync.services.auth_service import AuthService
from edusync.utils.helpers import error_response

def _role_required(allowed, message):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = AuthService.current_user()

            if not user or not user.is_active:
                return error_response("User not found", 404)

            if user.role not in allowed:
                return error_response(message, 403)

            g.current_user = user
            return f(*args, **kwargs)
        return decorated_function
    return decorator

admin_required = _role_required(
    [UserRole.ADMIN], "Admin access required"
)
lecturer_required = _role_required(
    [UserRole.LECTURER, UserRole.ADMIN], "Lecturer access required"
)
student_required = _role_required(
    [UserRole.STUDENT], "Student access required"
)
any_role_required = _role_required(
    list(UserRole), "Access denied"
)

def json_required(*fields):
    """Reject requests whose JSON body lacks any of ``fields``."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            data = request.get_json(silent=True)
            if not isinstance(data, dict):
                return error_response("Request body must be JSON", 400)

            missing = [field for field in fields if data.get(field) in (None, '')]
            if missing:
                return error_response(f"Missing required field: {', '.join(missing)}", 400)

            return f(*args, **kwargs)
        return decorated_function
    return decorator
