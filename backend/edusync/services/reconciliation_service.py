"""Absence reconciliation at session end."""
from datetime import datetime
from typing import Optional
from flask import current_app
from edusync import db
from edusync.models.attendance import AttendanceRecord, AttendanceStatus
from edusync.models.attendance_session import AttendanceSession
from edusync.models.course import Enrollment
from edusync.utils.helpers import utcnow

class AbsenceReconciler:
    """Turns "no scan received" into explicit absent marks.

    Only ``SessionService.end_session`` calls this, inside its transaction:
    rows are flushed here and committed (or rolled back) by the caller.
    """

    ABSENT_NOTE = 'Auto-marked as absent upon session completion'

    @staticmethod
    def reconcile(session: AttendanceSession, recorded_by: int, now: Optional[datetime] = None) -> int:
        """Insert an absent mark for every enrolled student without one.

        Students that already have a mark for the session are skipped, so
        running this twice never produces duplicate rows.

        Returns:
            Number of absent marks inserted
        """
        now = now or utcnow()

        roster = Enrollment.roster(session.class_code)
        marked = {
            student_id for (student_id,) in
            db.session.query(AttendanceRecord.student_id)
            .filter(AttendanceRecord.session_id == session.id)
        }

        inserted = 0
        for student in roster:
            if student.id in marked:
                continue

            db.session.add(AttendanceRecord.from_student(
                student,
                session,
                AttendanceStatus.ABSENT,
                recorded_by=recorded_by,
                now=now,
                notes=AbsenceReconciler.ABSENT_NOTE
            ))
            marked.add(student.id)
            inserted += 1

        if inserted:
            db.session.flush()

        current_app.logger.info(
            'Session %s reconciled: %d enrolled, %d auto-marked absent',
            session.id, len(roster), inserted
        )
        return inserted
