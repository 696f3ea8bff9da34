"""Authentication service: the caller-identity collaborator."""
from flask_jwt_extended import create_access_token, create_refresh_token, get_jwt_identity
from edusync.models.user import User
from edusync.utils.helpers import utcnow
import re

class AuthService:
    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return re.match(pattern, email) is not None

    @staticmethod
    def issue_tokens(user: User) -> dict:
        """Access and refresh tokens for a user."""
        identity = str(user.id)
        return {
            "access_token": create_access_token(identity=identity, additional_claims={"role": user.role.value}),
            "refresh_token": create_refresh_token(identity=identity)
        }

    @staticmethod
    def login(email: str, password: str) -> tuple[dict, str]:
        """Authenticate user and return tokens."""
        if not email or not password:
            return None, "Email and password are required"

        if not AuthService.validate_email(email):
            return None, "Invalid email format"

        user = User.query.filter_by(email=email.lower().strip()).first()

        if not user or not user.check_password(password):
            return None, "Invalid email or password"

        if not user.is_active:
            return None, "Account is deactivated"

        user.last_login = utcnow()
        user.save()

        result = AuthService.issue_tokens(user)
        result["user"] = user.to_dict()
        return result, None

    @staticmethod
    def current_user() -> User:
        """User behind the JWT of the current request, if any."""
        identity = get_jwt_identity()
        try:
            return User.get_by_id(int(identity))
        except (TypeError, ValueError):
            return None

    @staticmethod
    def refresh_token(user_id: int) -> tuple[dict, str]:
        """Generate new access token."""
        user = User.get_by_id(user_id)
        if not user or not user.is_active:
            return None, "User not found or inactive"

        access_token = create_access_token(identity=str(user.id), additional_claims={"role": user.role.value})

        return {
            "access_token": access_token,
            "user": user.to_dict()
        }, None
