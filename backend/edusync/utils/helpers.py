"""Helper functions for the application."""
import re
from datetime import date, datetime, timezone
from flask import jsonify
from typing import Any, Optional

def handle_error(error, status_code: int):
    """Handle application errors with consistent format."""
    return jsonify({
        'error': True,
        'message': str(error),
        'status_code': status_code
    }), status_code

def success_response(data: Any = None, message: str = "Success", status_code: int = 200):
    """Return consistent success response."""
    response = {
        'error': False,
        'message': message
    }

    if data is not None:
        response['data'] = data

    return jsonify(response), status_code

def error_response(message: str, status_code: int = 400, reason: Optional[str] = None, **extra):
    """Return consistent error response."""
    response = {
        'error': True,
        'message': message,
        'status_code': status_code
    }

    if reason:
        response['reason'] = reason
    response.update(extra)

    return jsonify(response), status_code

def utcnow() -> datetime:
    """Naive UTC timestamp, matching how the database stores datetimes."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def to_epoch_millis(value: datetime) -> int:
    """Convert a naive UTC datetime to milliseconds since the epoch."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)

def extract_number(value: Any) -> int:
    """Pull the first integer out of free text such as 'Year 2'; 0 when absent."""
    if value is None:
        return 0
    match = re.search(r'\d+', str(value))
    return int(match.group()) if match else 0

def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse an ISO ``YYYY-MM-DD`` query value; None when empty."""
    if not value:
        return None
    return date.fromisoformat(value)
