"""Attendance mark model with denormalized student details."""
from enum import Enum
from edusync import db
from edusync.models.base import BaseModel
from edusync.utils.helpers import extract_number

class AttendanceStatus(Enum):
    """Attendance outcome. Live scans only produce PRESENT and LATE."""
    PRESENT = 'present'
    LATE = 'late'
    ABSENT = 'absent'
    EXCUSED = 'excused'

class AttendanceRecord(BaseModel):
    """One attendance outcome for one student in one session."""

    __tablename__ = 'attendance'
    __table_args__ = (
        db.UniqueConstraint('session_id', 'student_id', name='unique_session_student'),
    )

    student_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    session_id = db.Column(db.Integer, db.ForeignKey('attendance_sessions.id'), nullable=False, index=True)
    class_code = db.Column(db.String(20), db.ForeignKey('classes.class_code'), nullable=False)
    date = db.Column(db.Date, nullable=False)
    status = db.Column(
        db.Enum(
            AttendanceStatus,
            name='attendance_status',
            native_enum=False,
            values_callable=lambda statuses: [s.value for s in statuses]
        ),
        nullable=False
    )
    recorded_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    scanned_at = db.Column(db.DateTime, nullable=True)  # null for reconciled absences
    notes = db.Column(db.Text, nullable=True)

    # Student details captured at write time
    name = db.Column(db.String(255), nullable=True)
    index_no = db.Column(db.String(50), nullable=True)
    department = db.Column(db.String(100), nullable=True)
    academic_year = db.Column(db.Integer, nullable=True)
    semester = db.Column(db.Integer, nullable=True)

    # Relationships
    student = db.relationship('User', foreign_keys=[student_id])
    recorder = db.relationship('User', foreign_keys=[recorded_by])

    @classmethod
    def from_student(cls, student, session, status: AttendanceStatus, recorded_by: int,
                     now, notes: str = None, scanned_at=None) -> 'AttendanceRecord':
        """Build a mark, copying the student's current profile details."""
        return cls(
            student_id=student.id,
            session_id=session.id,
            class_code=session.class_code,
            date=now.date(),
            status=status,
            recorded_by=recorded_by,
            scanned_at=scanned_at,
            notes=notes,
            name=student.full_name,
            index_no=student.index_no,
            department=student.department,
            academic_year=extract_number(student.academic_year),
            semester=extract_number(student.semester)
        )

    @classmethod
    def for_session(cls, session_id: int) -> list:
        """All marks of a session ordered by student index."""
        return cls.query.filter_by(session_id=session_id).order_by(cls.index_no, cls.id).all()

    @classmethod
    def find_mark(cls, session_id: int, student_id: int):
        return cls.query.filter_by(session_id=session_id, student_id=student_id).first()

    @classmethod
    def marked_count(cls, session_id: int) -> int:
        return cls.query.filter_by(session_id=session_id).count()

    def to_dict(self, exclude: list = None) -> dict:
        data = super().to_dict(exclude=exclude)
        if self.recorder is not None:
            data['recorded_by_name'] = self.recorder.full_name
        return data

    def __repr__(self):
        return f'<AttendanceRecord {self.session_id}-{self.student_id} {self.status}>'
