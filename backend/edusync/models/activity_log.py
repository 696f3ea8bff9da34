"""Audit trail of user actions."""
from edusync import db
from edusync.models.base import BaseModel

class ActivityLog(BaseModel):
    """One audited action (session started, mark recorded, ...)."""

    __tablename__ = 'activity_logs'

    action = db.Column(db.String(100), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    level = db.Column(db.String(10), nullable=False, default='info')
    details = db.Column(db.JSON, nullable=True)

    def __repr__(self):
        return f'<ActivityLog {self.action} by {self.user_id}>'
