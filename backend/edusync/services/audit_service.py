"""Audit logging of attendance actions."""
from typing import Dict, Optional
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from edusync import db
from edusync.models.activity_log import ActivityLog

class AuditService:
    """Writes user actions to the application log and the activity_logs table."""

    @staticmethod
    def log_action(action: str, user_id: Optional[int], details: Dict = None) -> None:
        """Record a successful user action."""
        details = details or {}
        current_app.logger.info('User Action %s by %s: %s', action, user_id, details)
        AuditService._persist(action, user_id, details, level='info')

    @staticmethod
    def log_error(error: Exception, action: str, user_id: Optional[int], details: Dict = None) -> None:
        """Record a failure that is not an expected operator condition."""
        details = dict(details or {})
        details['error'] = str(error)
        current_app.logger.error('Action %s by %s failed: %s', action, user_id, error, exc_info=error)
        AuditService._persist(action, user_id, details, level='error')

    @staticmethod
    def _persist(action: str, user_id: Optional[int], details: Dict, level: str) -> None:
        try:
            db.session.add(ActivityLog(
                action=action,
                user_id=user_id,
                level=level,
                details=details
            ))
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.warning('Could not persist audit entry %s: %s', action, e)
