"""Attendance API endpoints."""
from flask import Blueprint, request, g
from flask_jwt_extended import jwt_required
from edusync import limiter
from edusync.services.attendance_service import AttendanceService
from edusync.services.session_service import SessionService
from edusync.utils.decorators import lecturer_required, any_role_required, json_required
from edusync.utils.helpers import success_response, error_response, parse_date

attendance_bp = Blueprint('attendance', __name__)

@attendance_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Attendance service is running')

@attendance_bp.route('/mark-smart', methods=['POST'])
@jwt_required()
@lecturer_required
@limiter.limit("120 per minute")
@json_required('qr_token', 'class_code')
def mark_smart_attendance():
    """Mark attendance from a scanned student QR code."""
    data = request.get_json()

    result = AttendanceService.record_scan(
        token=data['qr_token'],
        class_code=str(data['class_code']).strip(),
        recorded_by=g.current_user.id,
        session_id=data.get('session_id')
    )

    return success_response(
        data=result.to_dict(),
        message=f'Attendance marked as {result.status.value.upper()}'
    )

@attendance_bp.route('/session/<int:session_id>', methods=['GET'])
@jwt_required()
@lecturer_required
def get_session_marks(session_id):
    """List all marks of a session."""
    session = SessionService.get_session(session_id)
    marks = SessionService.session_marks(session.id)

    return success_response(data={
        'session': session.to_dict(),
        'marks': [mark.to_dict() for mark in marks],
        'stats': SessionService.session_statistics(session.id)
    })

def _mark_filters():
    """Filters shared by the listing and stats endpoints."""
    args = request.args
    return {
        'class_code': args.get('class_code') or args.get('class_id'),
        'student_id': args.get('student_id', type=int),
        'on_date': parse_date(args.get('date')),
        'start_date': parse_date(args.get('start_date')),
        'end_date': parse_date(args.get('end_date')),
        'department': args.get('department'),
        'academic_year': args.get('academic_year', type=int),
        'semester': args.get('semester', type=int)
    }

@attendance_bp.route('', methods=['GET'])
@jwt_required()
@any_role_required
def get_attendance():
    """List attendance marks with filters and pagination."""
    try:
        filters = _mark_filters()
    except ValueError:
        return error_response('Dates must use the YYYY-MM-DD format', 400)

    page = max(request.args.get('page', 1, type=int), 1)
    per_page = min(max(request.args.get('per_page', 50, type=int), 1), 100)

    data = AttendanceService.list_marks(g.current_user, page=page, per_page=per_page, **filters)

    return success_response(
        data=data,
        message=f"Found {data['pagination']['total']} attendance records"
    )

@attendance_bp.route('/stats', methods=['GET'])
@jwt_required()
@any_role_required
def get_attendance_stats():
    """Present/late/absent counts and attendance percentage."""
    try:
        start_date = parse_date(request.args.get('start_date'))
        end_date = parse_date(request.args.get('end_date'))
    except ValueError:
        return error_response('Dates must use the YYYY-MM-DD format', 400)

    stats = AttendanceService.attendance_stats(
        g.current_user,
        class_code=request.args.get('class_code'),
        student_id=request.args.get('student_id', type=int),
        start_date=start_date,
        end_date=end_date
    )

    return success_response(data={'stats': stats})
