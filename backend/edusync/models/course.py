"""Class (course) and enrollment models.

Both are collaborator data for the attendance core: classes are looked up by
their external ``class_code`` and the enrollment table is the roster.
"""
from typing import List
from edusync import db
from edusync.models.base import BaseModel
from edusync.models.user import User

class Course(BaseModel):
    """A class students enroll in and lecturers take attendance for."""

    __tablename__ = 'classes'

    class_code = db.Column(db.String(20), unique=True, nullable=False, index=True)
    class_name = db.Column(db.String(255), nullable=False)
    lecturer_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    academic_year = db.Column(db.String(20), nullable=True)
    semester = db.Column(db.String(20), nullable=True)

    # Relationships
    lecturer = db.relationship('User', foreign_keys=[lecturer_id])
    enrollments = db.relationship('Enrollment', backref='course', lazy='dynamic')

    @classmethod
    def get_by_code(cls, class_code: str) -> 'Course':
        return cls.query.filter_by(class_code=class_code).first()

    def __repr__(self):
        return f'<Course {self.class_code}>'

class Enrollment(BaseModel):
    """One student enrolled in one class."""

    __tablename__ = 'enrollments'
    __table_args__ = (
        db.UniqueConstraint('class_code', 'student_id', name='uq_enrollment_class_student'),
    )

    class_code = db.Column(db.String(20), db.ForeignKey('classes.class_code'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    student = db.relationship('User')

    @staticmethod
    def roster(class_code: str) -> List[User]:
        """All students currently enrolled in the class."""
        return (
            User.query
            .join(Enrollment, Enrollment.student_id == User.id)
            .filter(Enrollment.class_code == class_code)
            .order_by(User.index_no)
            .all()
        )

    @staticmethod
    def roster_size(class_code: str) -> int:
        return Enrollment.query.filter_by(class_code=class_code).count()

    @staticmethod
    def is_enrolled(class_code: str, student_id: int) -> bool:
        return db.session.query(
            Enrollment.query.filter_by(class_code=class_code, student_id=student_id).exists()
        ).scalar()

    def __repr__(self):
        return f'<Enrollment {self.class_code}-{self.student_id}>'
