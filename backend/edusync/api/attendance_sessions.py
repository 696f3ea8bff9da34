"""Attendance session API endpoints."""
from flask import Blueprint, request, g
from flask_jwt_extended import jwt_required
from edusync import limiter
from edusync.services.session_service import SessionService
from edusync.utils.decorators import lecturer_required, any_role_required, json_required
from edusync.utils.helpers import success_response, error_response

sessions_bp = Blueprint('attendance_sessions', __name__)

@sessions_bp.route('/start', methods=['POST'])
@jwt_required()
@lecturer_required
@json_required('class_code')
def start_session():
    """Start a new attendance session for a class."""
    data = request.get_json()

    session = SessionService.start_session(
        class_code=str(data['class_code']).strip(),
        lecturer_id=g.current_user.id
    )

    return success_response(
        data={'session': session.to_dict()},
        message='Attendance session started successfully',
        status_code=201
    )

@sessions_bp.route('/end', methods=['POST'])
@jwt_required()
@lecturer_required
@json_required('session_id')
def end_session():
    """Complete a session; unscanned enrolled students become absent."""
    data = request.get_json()

    result = SessionService.end_session(data['session_id'], g.current_user)

    return success_response(
        data={
            'session': result['session'].to_dict(),
            'stats': result['stats'],
            'absent_count': result['absent_count'],
            'all_marks': [mark.to_dict() for mark in result['all_marks']]
        },
        message='Attendance session completed successfully'
    )

@sessions_bp.route('/clear', methods=['POST'])
@jwt_required()
@lecturer_required
@json_required('session_id', 'confirmation_secret')
def clear_session():
    """Delete all marks of a session and reopen it (password protected)."""
    data = request.get_json()

    deleted = SessionService.clear_session(
        data['session_id'],
        data['confirmation_secret'],
        g.current_user.id
    )

    return success_response(
        data={'deleted_count': deleted},
        message='Session cleared and reset successfully. You can start scanning again.'
    )

@sessions_bp.route('/active', methods=['GET'])
@jwt_required()
@any_role_required
@limiter.limit("120 per minute")
def get_active_session():
    """Get the active session of a class with its running mark count."""
    class_code = request.args.get('class_code')
    if not class_code:
        return error_response('Class code is required', 400)

    session, marked_count = SessionService.get_active_session(class_code)

    return success_response(
        data={
            'session': session.to_dict() if session else None,
            'marked_count': marked_count
        },
        message='Active session found' if session else 'No active session found'
    )

@sessions_bp.route('/stats', methods=['GET'])
@jwt_required()
@lecturer_required
def get_session_stats():
    """Get enrollment and per-status counts for a session."""
    session_id = request.args.get('session_id')
    if not session_id:
        return error_response('Session ID is required', 400)

    return success_response(data=SessionService.get_session_stats(session_id))
