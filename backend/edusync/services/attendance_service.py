"""Smart attendance marking from scanned student QR codes."""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Optional
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
from edusync.services.session_service import SessionService
from edusync.services.token_codec import QRTokenCodec
from edusync.utils.exceptions import (
    AlreadyMarked, ClassNotFound, NotEnrolled, StorageFailure, StudentNotFound
)
from edusync.utils.helpers import to_epoch_millis, utcnow

DEFAULT_LATE_THRESHOLD_MINUTES = 30

@dataclass
class ScanResult:
    """Outcome of a successful scan."""
    mark: AttendanceRecord
    session: AttendanceSession
    student: User
    marked_count: int

    @property
    def status(self) -> AttendanceStatus:
        return self.mark.status

    def to_dict(self) -> Dict:
        return {
            'status': self.mark.status.value,
            'mark': self.mark.to_dict(),
            'student': {
                'id': self.student.id,
                'first_name': self.student.first_name,
                'last_name': self.student.last_name,
                'index_no': self.student.index_no,
                'email': self.student.email,
                'status': self.mark.status.value,
                'attendance_id': self.mark.id
            },
            'session_id': self.session.id,
            'marked_count': self.marked_count
        }

class AttendanceService:
    """Service for recording attendance marks."""

    @staticmethod
    def classify_status(
        start_time: datetime,
        now: datetime,
        threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES
    ) -> AttendanceStatus:
        """Present up to and including the threshold, late afterwards."""
        elapsed_minutes = (now - start_time).total_seconds() / 60
        if elapsed_minutes <= threshold_minutes:
            return AttendanceStatus.PRESENT
        return AttendanceStatus.LATE

    @staticmethod
    def record_scan(
        token: str,
        class_code: str,
        recorded_by: int,
        session_id=None,
        now: Optional[datetime] = None
    ) -> ScanResult:
        """
        Turn a scanned QR token into an attendance mark.

        Args:
            token: Encrypted QR token shown by the student
            class_code: Class the scan is taken for
            recorded_by: Id of the lecturer operating the scanner
            session_id: Explicit session to mark into (optional)
            now: Scan time, defaults to the current UTC time

        Raises:
            MalformedToken, TokenExpired, StudentNotFound, ClassNotFound,
            NotEnrolled, SessionNotFound, AlreadyMarked, StorageFailure
        """
        now = now or utcnow()
        config = current_app.config

        # Step 1: decode the QR token
        codec = QRTokenCodec.from_config(config)
        identity = codec.decode(token, now_ms=to_epoch_millis(now))

        # Step 2: student, class and roster
        student = User.get_by_id(identity.student_id)
        if student is None or not student.is_student() or not student.is_active:
            raise StudentNotFound()

        if Course.get_by_code(class_code) is None:
            raise ClassNotFound()

        if not Enrollment.is_enrolled(class_code, student.id):
            raise NotEnrolled(f'{student.full_name} is not enrolled in {class_code}')

        # Step 3: session for this class
        session = SessionService.resolve_active_session(
            class_code, recorded_by, session_id=session_id, now=now
        )

        # Step 4: one mark per student per session
        existing = AttendanceRecord.find_mark(session.id, student.id)
        if existing:
            raise AlreadyMarked(session_id=session.id, existing_status=existing.status.value)

        # Step 5: present or late
        status = AttendanceService.classify_status(
            session.start_time,
            now,
            config.get('LATE_THRESHOLD_MINUTES', DEFAULT_LATE_THRESHOLD_MINUTES)
        )

        # Step 6: persist
        mark = AttendanceRecord.from_student(
            student,
            session,
            status,
            recorded_by=recorded_by,
            now=now,
            notes=f'QR Code scanned at {now:%H:%M:%S}',
            scanned_at=now
        )
        db.session.add(mark)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise AlreadyMarked(session_id=session.id)
        except SQLAlchemyError as e:
            db.session.rollback()
            AuditService.log_error(e, 'mark_smart_attendance', recorded_by, {
                'studentId': student.id,
                'classCode': class_code,
                'sessionId': session.id
            })
            raise StorageFailure()

        marked_count = AttendanceRecord.marked_count(session.id)

        AuditService.log_action('smart_attendance_marked', recorded_by, {
            'studentId': student.id,
            'classCode': class_code,
            'sessionId': session.id,
            'status': status.value,
            'elapsedMinutes': round((now - session.start_time).total_seconds() / 60, 2)
        })
        NotificationService.publish('attendance_marked', {
            'session_id': session.id,
            'student_id': student.id,
            'status': status.value,
            'marked_count': marked_count
        })

        return ScanResult(
            mark=mark,
            session=session,
            student=student,
            marked_count=marked_count
        )

    @staticmethod
    def scoped_marks(
        user: User,
        class_code: Optional[str] = None,
        student_id: Optional[int] = None,
        on_date: Optional[date] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        department: Optional[str] = None,
        academic_year: Optional[int] = None,
        semester: Optional[int] = None
    ):
        """Marks visible to ``user`` narrowed by the given filters.

        Students only see their own marks and lecturers only the marks of
        classes they teach. Admins see everything.
        """
        query = AttendanceRecord.query

        if user.is_student():
            query = query.filter(AttendanceRecord.student_id == user.id)
        elif not user.is_admin():
            query = query.join(Course, Course.class_code == AttendanceRecord.class_code).filter(
                Course.lecturer_id == user.id
            )

        if class_code:
            query = query.filter(AttendanceRecord.class_code == class_code)
        if student_id:
            query = query.filter(AttendanceRecord.student_id == student_id)
        if on_date:
            query = query.filter(AttendanceRecord.date == on_date)
        if start_date:
            query = query.filter(AttendanceRecord.date >= start_date)
        if end_date:
            query = query.filter(AttendanceRecord.date <= end_date)
        if department:
            query = query.filter(AttendanceRecord.department == department)
        if academic_year:
            query = query.filter(AttendanceRecord.academic_year == academic_year)
        if semester:
            query = query.filter(AttendanceRecord.semester == semester)

        return query

    @staticmethod
    def list_marks(user: User, page: int = 1, per_page: int = 50, **filters) -> Dict:
        """Paginated attendance marks, newest day first."""
        query = AttendanceService.scoped_marks(user, **filters).order_by(
            AttendanceRecord.date.desc(),
            AttendanceRecord.class_code,
            AttendanceRecord.index_no,
            AttendanceRecord.id
        )
        pagination = query.paginate(page=page, per_page=per_page, error_out=False)

        return {
            'attendance': [mark.to_dict() for mark in pagination.items],
            'pagination': {
                'page': page,
                'per_page': per_page,
                'total': pagination.total,
                'pages': pagination.pages
            }
        }

    @staticmethod
    def attendance_stats(user: User, **filters) -> Dict:
        """Per-status mark counts and the share of present marks."""
        rows = (
            AttendanceService.scoped_marks(user, **filters)
            .with_entities(AttendanceRecord.status, func.count(AttendanceRecord.id))
            .group_by(AttendanceRecord.status)
            .all()
        )
        counts = {status: count for status, count in rows}
        total = sum(counts.values())
        present = counts.get(AttendanceStatus.PRESENT, 0)

        return {
            'total_days': total,
            'present_days': present,
            'late_days': counts.get(AttendanceStatus.LATE, 0),
            'absent_days': counts.get(AttendanceStatus.ABSENT, 0),
            'excused_days': counts.get(AttendanceStatus.EXCUSED, 0),
            'attendance_percentage': round(present / total * 100, 2) if total else 0
        }
