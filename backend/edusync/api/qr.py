"""QR code API endpoints."""
from flask import Blueprint, current_app, request, g
from flask_jwt_extended import jwt_required
from edusync import limiter
from edusync.services.token_codec import QRTokenCodec
from edusync.models.user import User
from edusync.utils.decorators import student_required, lecturer_required, json_required
from edusync.utils.helpers import success_response

qr_bp = Blueprint('qr', __name__)

@qr_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='QR service is running')

@qr_bp.route('/my-token', methods=['GET'])
@jwt_required()
@student_required
@limiter.limit("30 per minute")
def my_token():
    """Issue a fresh attendance QR code for the logged-in student."""
    codec = QRTokenCodec.from_config(current_app.config)
    token = codec.encode(g.current_user.id)

    data = {
        'qr_token': token,
        'expires_in': codec.replay_window_seconds
    }
    if request.args.get('image', '1') != '0':
        data['qr_image'] = QRTokenCodec.render_qr_image(token)

    return success_response(data=data, message='QR code generated successfully')

@qr_bp.route('/validate', methods=['POST'])
@jwt_required()
@lecturer_required
@json_required('qr_token')
def validate_qr():
    """Decode a QR token without recording attendance."""
    codec = QRTokenCodec.from_config(current_app.config)
    identity = codec.decode(request.get_json()['qr_token'])
    student = User.get_by_id(identity.student_id)

    return success_response(
        data={
            'valid': True,
            'student_id': identity.student_id,
            'issued_at_ms': identity.issued_at_ms,
            'student_name': student.full_name if student else None
        },
        message='QR code is valid'
    )
