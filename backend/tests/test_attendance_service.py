"""Tests for recording attendance from scanned QR codes."""
from datetime import date, datetime, timedelta

import pytest

from edusync import db
from edusync.models.attendance import AttendanceRecord, AttendanceStatus
from edusync.models.attendance_session import AttendanceSession
from edusync.models.course import Enrollment
from edusync.models.user import User
from edusync.services.attendance_service import AttendanceService
from edusync.services.session_service import SessionService
from edusync.utils.exceptions import (
    AlreadyMarked, ClassNotFound, MalformedToken, NotEnrolled,
    SessionNotFound, StudentNotFound, TokenExpired
)

T0 = datetime(2026, 10, 19, 9, 0, 0)

@pytest.mark.parametrize('elapsed, expected', [
    (timedelta(0), AttendanceStatus.PRESENT),
    (timedelta(minutes=29, seconds=59), AttendanceStatus.PRESENT),
    (timedelta(minutes=30), AttendanceStatus.PRESENT),
    (timedelta(minutes=30, milliseconds=1), AttendanceStatus.LATE),
    (timedelta(minutes=31), AttendanceStatus.LATE),
    (timedelta(hours=2), AttendanceStatus.LATE),
])
def test_classify_status(elapsed, expected):
    assert AttendanceService.classify_status(T0, T0 + elapsed, 30) == expected

def test_classify_status_custom_threshold():
    assert AttendanceService.classify_status(T0, T0 + timedelta(minutes=11), 10) == AttendanceStatus.LATE

def test_scan_marks_present(school, token_at):
    session = SessionService.start_session(school.class_code, school.lecturer_id, now=T0)
    at = T0 + timedelta(minutes=5)

    result = AttendanceService.record_scan(
        token_at(school.alice_id, at), school.class_code, school.lecturer_id, now=at
    )

    assert result.status == AttendanceStatus.PRESENT
    assert result.session.id == session.id
    assert result.marked_count == 1
    mark = result.mark
    assert mark.student_id == school.alice_id
    assert mark.recorded_by == school.lecturer_id
    assert mark.scanned_at == at
    assert mark.date == at.date()
    assert mark.name == 'Alice Student'
    assert mark.index_no == 'CS2026001'
    assert mark.academic_year == 2

def test_scan_marks_late_after_threshold(school, token_at):
    SessionService.start_session(school.class_code, school.lecturer_id, now=T0)
    at = T0 + timedelta(minutes=35)

    result = AttendanceService.record_scan(
        token_at(school.bob_id, at), school.class_code, school.lecturer_id, now=at
    )

    assert result.status == AttendanceStatus.LATE

def test_marked_count_grows(school, token_at):
    SessionService.start_session(school.class_code, school.lecturer_id, now=T0)
    counts = []
    for minute, student_id in enumerate(school.roster_ids, start=1):
        at = T0 + timedelta(minutes=minute)
        result = AttendanceService.record_scan(
            token_at(student_id, at), school.class_code, school.lecturer_id, now=at
        )
        counts.append(result.marked_count)

    assert counts == [1, 2, 3]

def test_first_scan_creates_session(school, token_at):
    at = T0 + timedelta(minutes=1)

    result = AttendanceService.record_scan(
        token_at(school.alice_id, at), school.class_code, school.lecturer_id, now=at
    )

    assert result.session.is_active is True
    assert result.session.start_time == at
    assert result.session.lecturer_id == school.lecturer_id
    assert result.status == AttendanceStatus.PRESENT
    assert AttendanceSession.query.count() == 1

def test_scan_with_explicit_session_id(school, token_at):
    session = SessionService.start_session(school.class_code, school.lecturer_id, now=T0)
    at = T0 + timedelta(minutes=2)

    result = AttendanceService.record_scan(
        token_at(school.alice_id, at), school.class_code, school.lecturer_id,
        session_id=session.id, now=at
    )

    assert result.session.id == session.id

def test_scan_into_unknown_session(school, token_at):
    at = T0 + timedelta(minutes=2)

    with pytest.raises(SessionNotFound):
        AttendanceService.record_scan(
            token_at(school.alice_id, at), school.class_code, school.lecturer_id,
            session_id=4242, now=at
        )
    assert AttendanceRecord.query.count() == 0

def test_duplicate_scan_is_rejected(school, token_at):
    SessionService.start_session(school.class_code, school.lecturer_id, now=T0)
    first_at = T0 + timedelta(minutes=1)
    AttendanceService.record_scan(
        token_at(school.alice_id, first_at), school.class_code, school.lecturer_id, now=first_at
    )

    # A later scan would classify as late; it must not overwrite the mark
    second_at = T0 + timedelta(minutes=45)
    with pytest.raises(AlreadyMarked) as excinfo:
        AttendanceService.record_scan(
            token_at(school.alice_id, second_at), school.class_code, school.lecturer_id, now=second_at
        )

    assert excinfo.value.extra['already_marked'] is True
    assert excinfo.value.extra['existing_status'] == 'present'
    marks = AttendanceRecord.query.filter_by(student_id=school.alice_id).all()
    assert len(marks) == 1
    assert marks[0].status == AttendanceStatus.PRESENT

def test_expired_token_is_rejected(school, token_at):
    SessionService.start_session(school.class_code, school.lecturer_id, now=T0)
    issued = T0 + timedelta(minutes=1)

    with pytest.raises(TokenExpired):
        AttendanceService.record_scan(
            token_at(school.alice_id, issued), school.class_code, school.lecturer_id,
            now=issued + timedelta(seconds=36)
        )
    assert AttendanceRecord.query.count() == 0

def test_token_at_window_edge_is_accepted(school, token_at):
    SessionService.start_session(school.class_code, school.lecturer_id, now=T0)
    issued = T0 + timedelta(minutes=1)

    result = AttendanceService.record_scan(
        token_at(school.alice_id, issued), school.class_code, school.lecturer_id,
        now=issued + timedelta(seconds=35)
    )

    assert result.status == AttendanceStatus.PRESENT

def test_malformed_token_is_rejected(school):
    with pytest.raises(MalformedToken):
        AttendanceService.record_scan('definitely-not-a-token', school.class_code, school.lecturer_id)

def test_unknown_student(school, token_at):
    with pytest.raises(StudentNotFound):
        AttendanceService.record_scan(token_at(99999, T0), school.class_code, school.lecturer_id, now=T0)

def test_non_student_user_is_not_a_student(school, token_at):
    with pytest.raises(StudentNotFound):
        AttendanceService.record_scan(
            token_at(school.lecturer_id, T0), school.class_code, school.lecturer_id, now=T0
        )

def test_unknown_class(school, token_at):
    with pytest.raises(ClassNotFound):
        AttendanceService.record_scan(token_at(school.alice_id, T0), 'NOPE999', school.lecturer_id, now=T0)

def test_student_not_enrolled(school, token_at):
    SessionService.start_session(school.class_code, school.lecturer_id, now=T0)

    with pytest.raises(NotEnrolled):
        AttendanceService.record_scan(
            token_at(school.outsider_id, T0), school.class_code, school.lecturer_id, now=T0
        )
    assert AttendanceRecord.query.count() == 0

def test_failed_scan_does_not_create_session(school, token_at):
    with pytest.raises(NotEnrolled):
        AttendanceService.record_scan(
            token_at(school.outsider_id, T0), school.class_code, school.lecturer_id, now=T0
        )
    assert AttendanceSession.query.count() == 0

def test_storage_rejects_duplicate_when_precheck_misses(school, token_at, monkeypatch):
    SessionService.start_session(school.class_code, school.lecturer_id, now=T0)
    first_at = T0 + timedelta(minutes=1)
    first = AttendanceService.record_scan(
        token_at(school.alice_id, first_at), school.class_code, school.lecturer_id, now=first_at
    )

    # Two scanners racing: neither sees the other's mark yet
    monkeypatch.setattr(AttendanceRecord, 'find_mark', lambda session_id, student_id: None)
    second_at = T0 + timedelta(minutes=2)
    with pytest.raises(AlreadyMarked) as excinfo:
        AttendanceService.record_scan(
            token_at(school.alice_id, second_at), school.class_code, school.lecturer_id, now=second_at
        )

    assert excinfo.value.extra['session_id'] == first.session.id
    assert AttendanceRecord.marked_count(first.session.id) == 1

@pytest.fixture
def marked_term(school, token_at):
    """CS101: Alice present, Bob late, Carol absent. MA201: Alice present."""
    session = SessionService.start_session(school.class_code, school.lecturer_id, now=T0)
    for student_id, minutes in [(school.alice_id, 1), (school.bob_id, 40)]:
        at = T0 + timedelta(minutes=minutes)
        AttendanceService.record_scan(
            token_at(student_id, at), school.class_code, school.lecturer_id, now=at
        )
    SessionService.end_session(session.id, User.get_by_id(school.lecturer_id), now=T0 + timedelta(hours=1))

    db.session.add(Enrollment(class_code='MA201', student_id=school.alice_id))
    db.session.commit()
    at = T0 + timedelta(hours=2)
    AttendanceService.record_scan(token_at(school.alice_id, at), 'MA201', school.other_lecturer_id, now=at)

    return school

def _listed(user_id, **filters):
    data = AttendanceService.list_marks(User.get_by_id(user_id), **filters)
    return [(mark['class_code'], mark['student_id']) for mark in data['attendance']]

def test_marks_are_scoped_by_role(marked_term):
    school = marked_term

    assert sorted(_listed(school.lecturer_id)) == sorted(
        ('CS101', student_id) for student_id in school.roster_ids
    )
    assert _listed(school.other_lecturer_id) == [('MA201', school.alice_id)]
    assert len(_listed(school.admin_id)) == 4
    assert sorted(_listed(school.alice_id)) == [('CS101', school.alice_id), ('MA201', school.alice_id)]
    assert _listed(school.bob_id) == [('CS101', school.bob_id)]

def test_marks_filters(marked_term):
    school = marked_term

    assert _listed(school.admin_id, class_code='MA201') == [('MA201', school.alice_id)]
    assert len(_listed(school.admin_id, student_id=school.alice_id)) == 2
    assert len(_listed(school.admin_id, on_date=T0.date())) == 4
    assert _listed(school.admin_id, end_date=date(2026, 10, 18)) == []
    assert len(_listed(school.admin_id, start_date=T0.date(), department='Computer Science')) == 4
    assert len(_listed(school.admin_id, academic_year=2, semester=1)) == 4
    assert _listed(school.admin_id, academic_year=3) == []
    # A student cannot widen their scope with a filter
    assert _listed(school.alice_id, student_id=school.bob_id) == []

def test_marks_pagination(marked_term):
    data = AttendanceService.list_marks(
        User.get_by_id(marked_term.lecturer_id), page=2, per_page=2
    )

    assert len(data['attendance']) == 1
    assert data['pagination'] == {'page': 2, 'per_page': 2, 'total': 3, 'pages': 2}

def test_attendance_stats(marked_term):
    school = marked_term
    lecturer = User.get_by_id(school.lecturer_id)

    stats = AttendanceService.attendance_stats(lecturer, class_code=school.class_code)

    assert stats == {
        'total_days': 3,
        'present_days': 1,
        'late_days': 1,
        'absent_days': 1,
        'excused_days': 0,
        'attendance_percentage': 33.33
    }

def test_attendance_stats_per_student(marked_term):
    alice = User.get_by_id(marked_term.alice_id)

    stats = AttendanceService.attendance_stats(alice)

    assert stats['total_days'] == 2
    assert stats['present_days'] == 2
    assert stats['attendance_percentage'] == 100.0

def test_attendance_stats_without_marks(school):
    stats = AttendanceService.attendance_stats(User.get_by_id(school.admin_id))

    assert stats['total_days'] == 0
    assert stats['attendance_percentage'] == 0
