"""User model for authentication and authorization."""
from enum import Enum
from werkzeug.security import generate_password_hash, check_password_hash
from edusync import db
from edusync.models.base import BaseModel

class UserRole(Enum):
    """User roles enumeration."""
    STUDENT = 'student'
    LECTURER = 'lecturer'
    ADMIN = 'admin'

class User(BaseModel):
    """User model for all system users."""

    __tablename__ = 'users'

    # Basic Information
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False, default='')
    role = db.Column(db.Enum(UserRole), nullable=False, default=UserRole.STUDENT)

    # Academic profile (students only)
    index_no = db.Column(db.String(50), unique=True, nullable=True, index=True)
    department = db.Column(db.String(100), nullable=True)
    academic_year = db.Column(db.String(20), nullable=True)  # "Year 2"
    semester = db.Column(db.String(20), nullable=True)  # "Semester 1"

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)

    @property
    def full_name(self) -> str:
        return f'{self.first_name} {self.last_name}'.strip()

    def set_password(self, password: str) -> None:
        """Set user password with hashing."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Check if provided password matches user's password."""
        return check_password_hash(self.password_hash, password)

    def is_lecturer(self) -> bool:
        """Lecturers and admins may run attendance sessions."""
        return self.role in [UserRole.LECTURER, UserRole.ADMIN]

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def is_student(self) -> bool:
        """Check if user is a student."""
        return self.role == UserRole.STUDENT

    def to_dict(self, exclude: list = None) -> dict:
        """Convert to dictionary excluding sensitive data."""
        default_exclude = ['password_hash']
        exclude = (exclude or []) + default_exclude
        return super().to_dict(exclude=exclude)

    def __repr__(self) -> str:
        return f'<User {self.email}>'
