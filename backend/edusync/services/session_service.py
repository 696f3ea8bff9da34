"""Attendance session lifecycle: start, resolve, end and clear."""
import hmac
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from edusync import db
from edusync.models.attendance import AttendanceRecord, AttendanceStatus
from edusync.models.attendance_session import AttendanceSession
from edusync.models.course import Course, Enrollment
from edusync.models.user import User
from edusync.services.audit_service import AuditService
from edusync.services.notification_service import NotificationService
from edusync.services.reconciliation_service import AbsenceReconciler
from edusync.utils.exceptions import (
    AlreadyEnded, ClassNotFound, InvalidConfirmation, NotOwner,
    SessionAlreadyActive, SessionNotFound, StorageFailure
)
from edusync.utils.helpers import utcnow

class SessionService:
    """Service for attendance session lifecycle.

    Session state is always re-read from the database; nothing is cached
    between requests.
    """

    @staticmethod
    def find_active(class_code: str) -> Optional[AttendanceSession]:
        """The active session for a class, if any."""
        return (
            AttendanceSession.query
            .filter_by(class_code=class_code, is_active=True)
            .order_by(AttendanceSession.start_time.desc())
            .first()
        )

    @staticmethod
    def get_session(session_id) -> AttendanceSession:
        """Load a session by id or raise SessionNotFound."""
        try:
            session = AttendanceSession.get_by_id(int(session_id))
        except (TypeError, ValueError):
            session = None

        if session is None:
            raise SessionNotFound('Session not found')
        return session

    @staticmethod
    def _create(class_code: str, lecturer_id: int, now: datetime) -> Optional[AttendanceSession]:
        """Insert a new active session; None when another one won the race."""
        session = AttendanceSession(
            class_code=class_code,
            lecturer_id=lecturer_id,
            start_time=now,
            is_active=True
        )
        db.session.add(session)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            return None
        return session

    @staticmethod
    def start_session(class_code: str, lecturer_id: int, now: Optional[datetime] = None) -> AttendanceSession:
        """Start attendance for a class.

        Raises:
            ClassNotFound: unknown class code
            SessionAlreadyActive: the class already has an active session
        """
        if Course.get_by_code(class_code) is None:
            raise ClassNotFound()

        active = SessionService.find_active(class_code)
        if active:
            raise SessionAlreadyActive(session_id=active.id)

        session = SessionService._create(class_code, lecturer_id, now or utcnow())
        if session is None:
            winner = SessionService.find_active(class_code)
            raise SessionAlreadyActive(session_id=winner.id if winner else None)

        AuditService.log_action('attendance_session_started', lecturer_id, {
            'sessionId': session.id,
            'classCode': class_code
        })
        NotificationService.publish('session_started', session.to_dict())

        return session

    @staticmethod
    def resolve_active_session(
        class_code: str,
        lecturer_id: int,
        session_id=None,
        now: Optional[datetime] = None
    ) -> AttendanceSession:
        """Find the session a scan belongs to.

        With an explicit ``session_id`` the session must belong to the class
        and still be active. Without one, the class's active session is used
        and one is created when none exists.
        """
        if session_id is not None:
            try:
                session = AttendanceSession.query.filter_by(
                    id=int(session_id),
                    class_code=class_code
                ).first()
            except (TypeError, ValueError):
                session = None

            if session is None:
                raise SessionNotFound('Provided session ID not found or does not match class')
            if not session.is_active:
                raise SessionNotFound('Session is not active. Please start a new session.')
            return session

        session = SessionService.find_active(class_code)
        if session:
            return session

        session = SessionService._create(class_code, lecturer_id, now or utcnow())
        if session is None:
            # Lost a concurrent creation; use the winner's session
            session = SessionService.find_active(class_code)
            if session is None:
                error = StorageFailure('Failed to create attendance session')
                AuditService.log_error(error, 'create_attendance_session', lecturer_id, {
                    'classCode': class_code
                })
                raise error
            return session

        current_app.logger.info('Created session %s implicitly for %s', session.id, class_code)
        AuditService.log_action('attendance_session_started', lecturer_id, {
            'sessionId': session.id,
            'classCode': class_code,
            'implicit': True
        })
        NotificationService.publish('session_started', session.to_dict())

        return session

    @staticmethod
    def end_session(session_id, user: User, now: Optional[datetime] = None) -> Dict:
        """Close a session and mark every unscanned enrolled student absent.

        Raises:
            SessionNotFound, NotOwner, AlreadyEnded, StorageFailure
        """
        session = SessionService.get_session(session_id)

        if not session.is_owned_by(user):
            raise NotOwner('Session not found or access denied')
        if not session.is_active:
            raise AlreadyEnded()

        now = now or utcnow()
        sid = session.id
        class_code = session.class_code

        try:
            absent_count = AbsenceReconciler.reconcile(session, user.id, now)

            closed = AttendanceSession.query.filter_by(id=sid, is_active=True).update(
                {'is_active': False, 'end_time': now, 'updated_at': now},
                synchronize_session=False
            )
            if closed != 1:
                db.session.rollback()
                raise AlreadyEnded()

            db.session.commit()
        except IntegrityError as e:
            # A concurrent end already inserted the absent rows
            db.session.rollback()
            if not SessionService.get_session(sid).is_active:
                raise AlreadyEnded()
            AuditService.log_error(e, 'end_attendance_session', user.id, {'sessionId': sid})
            raise StorageFailure('Could not record absences for this session')
        except SQLAlchemyError as e:
            db.session.rollback()
            AuditService.log_error(e, 'end_attendance_session', user.id, {'sessionId': sid})
            raise StorageFailure('Could not end the attendance session')

        session = SessionService.get_session(sid)
        stats = SessionService.session_statistics(sid)
        all_marks = SessionService.session_marks(sid)

        AuditService.log_action('attendance_session_ended', user.id, {
            'sessionId': sid,
            'classCode': class_code,
            'stats': stats,
            'autoAbsentCount': absent_count
        })
        NotificationService.publish('session_ended', {
            'session': session.to_dict(),
            'stats': stats
        })

        return {
            'session': session,
            'stats': stats,
            'absent_count': absent_count,
            'all_marks': all_marks
        }

    @staticmethod
    def clear_session(session_id, confirmation_secret: str, user_id: int) -> int:
        """Delete every mark of a session and reopen it.

        Returns:
            Number of marks deleted
        """
        expected = current_app.config.get('SESSION_RESET_PASSPHRASE') or ''
        supplied = confirmation_secret if isinstance(confirmation_secret, str) else ''
        if not expected or not hmac.compare_digest(supplied.encode(), expected.encode()):
            raise InvalidConfirmation()

        session = SessionService.get_session(session_id)
        sid = session.id
        class_code = session.class_code

        deleted = AttendanceRecord.query.filter_by(session_id=sid).delete(synchronize_session=False)
        session.is_active = True
        session.end_time = None

        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            other = SessionService.find_active(class_code)
            raise SessionAlreadyActive(
                'Another session is already active for this class',
                session_id=other.id if other else None
            )

        AuditService.log_action('session_cleared_reset', user_id, {
            'sessionId': sid,
            'classCode': class_code,
            'recordsDeleted': deleted
        })
        NotificationService.publish('session_cleared', {'session_id': sid, 'class_code': class_code})

        return deleted

    @staticmethod
    def get_active_session(class_code: str) -> Tuple[Optional[AttendanceSession], int]:
        """Active session of a class plus how many marks it holds."""
        session = SessionService.find_active(class_code)
        if session is None:
            return None, 0
        return session, AttendanceRecord.marked_count(session.id)

    @staticmethod
    def session_statistics(session_id: int) -> Dict[str, int]:
        """Mark counts per status for a session."""
        rows = (
            db.session.query(AttendanceRecord.status, func.count(AttendanceRecord.id))
            .filter(AttendanceRecord.session_id == session_id)
            .group_by(AttendanceRecord.status)
            .all()
        )

        stats = {status.value: 0 for status in AttendanceStatus}
        for status, count in rows:
            stats[status.value] = count
        stats['total'] = sum(count for _, count in rows)

        return stats

    @staticmethod
    def session_marks(session_id: int) -> List[AttendanceRecord]:
        return AttendanceRecord.for_session(session_id)

    @staticmethod
    def get_session_stats(session_id) -> Dict:
        """Session details with roster size and per-status counts."""
        session = SessionService.get_session(session_id)
        stats = SessionService.session_statistics(session.id)

        return {
            'session': session.to_dict(),
            'stats': {
                'total_enrolled': Enrollment.roster_size(session.class_code),
                'total_marked': stats['total'],
                'present_count': stats['present'],
                'late_count': stats['late'],
                'excused_count': stats['excused'],
                'absent_count': stats['absent']
            }
        }
