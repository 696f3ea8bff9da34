"""Attendance session: one live attendance-taking window for a class."""
from edusync import db
from edusync.models.base import BaseModel
from edusync.utils.helpers import utcnow

class AttendanceSession(BaseModel):
    """Session for tracking attendance of one class meeting."""

    __tablename__ = 'attendance_sessions'

    class_code = db.Column(db.String(20), db.ForeignKey('classes.class_code'), nullable=False, index=True)
    lecturer_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    start_time = db.Column(db.DateTime, default=utcnow, nullable=False)
    end_time = db.Column(db.DateTime, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)

    # At most one active session per class
    __table_args__ = (
        db.Index(
            'uq_active_session_per_class',
            class_code,
            unique=True,
            sqlite_where=is_active == db.true(),
            postgresql_where=is_active == db.true(),
        ),
    )

    # Relationships
    lecturer = db.relationship('User', foreign_keys=[lecturer_id])
    records = db.relationship('AttendanceRecord', backref='session', lazy='dynamic')

    def is_owned_by(self, user) -> bool:
        """Creator or admin."""
        return user.is_admin() or self.lecturer_id == user.id

    def to_dict(self):
        """Convert to dictionary."""
        return {
            'id': self.id,
            'class_code': self.class_code,
            'lecturer_id': self.lecturer_id,
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    def __repr__(self):
        return f'<AttendanceSession {self.id} {self.class_code}>'
