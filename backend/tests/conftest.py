"""Shared fixtures for the attendance test suite."""
from types import SimpleNamespace

import pytest
from flask_jwt_extended import create_access_token

from edusync import create_app, db
from edusync.models.course import Course, Enrollment
from edusync.models.user import User, UserRole
from edusync.services.token_codec import QRTokenCodec
from edusync.utils.helpers import to_epoch_millis

CLASS_CODE = 'CS101'

@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

def _user(email, first_name, last_name, role, **profile):
    user = User(
        email=email,
        first_name=first_name,
        last_name=last_name,
        role=role,
        **profile
    )
    user.set_password('password123')
    db.session.add(user)
    return user

@pytest.fixture
def school(app):
    """A class CS101 with lecturer, admin and a roster of students A, B and C."""
    lecturer = _user('lecturer@example.com', 'Nadia', 'Perera', UserRole.LECTURER)
    other_lecturer = _user('other@example.com', 'Ravi', 'Silva', UserRole.LECTURER)
    admin = _user('admin@example.com', 'Ada', 'Admin', UserRole.ADMIN)
    students = [
        _user(f'{name.lower()}@example.com', name, 'Student', UserRole.STUDENT,
              index_no=f'CS2026{number:03d}', department='Computer Science',
              academic_year='Year 2', semester='Semester 1')
        for number, name in enumerate(['Alice', 'Bob', 'Carol'], start=1)
    ]
    outsider = _user('dave@example.com', 'Dave', 'Student', UserRole.STUDENT,
                     index_no='EE2026001', department='Electrical')
    db.session.flush()

    db.session.add(Course(class_code=CLASS_CODE, class_name='Programming', lecturer_id=lecturer.id))
    db.session.add(Course(class_code='MA201', class_name='Calculus', lecturer_id=other_lecturer.id))
    db.session.flush()
    for student in students:
        db.session.add(Enrollment(class_code=CLASS_CODE, student_id=student.id))
    db.session.commit()

    return SimpleNamespace(
        class_code=CLASS_CODE,
        lecturer_id=lecturer.id,
        other_lecturer_id=other_lecturer.id,
        admin_id=admin.id,
        alice_id=students[0].id,
        bob_id=students[1].id,
        carol_id=students[2].id,
        roster_ids=[student.id for student in students],
        outsider_id=outsider.id
    )

@pytest.fixture
def codec(app):
    return QRTokenCodec.from_config(app.config)

@pytest.fixture
def token_at(codec):
    """Token for a student issued at the given naive UTC time."""
    def make(student_id, when):
        return codec.encode(student_id, issued_at_ms=to_epoch_millis(when))
    return make

@pytest.fixture
def auth_headers(app):
    """Bearer headers for a user id."""
    def make(user_id):
        token = create_access_token(identity=str(user_id))
        return {'Authorization': f'Bearer {token}'}
    return make
