"""QR identity token encoding and validation.

A student's QR code carries an encrypted ``{studentId, timestamp}`` payload.
Tokens are Fernet blobs (AES-CBC with an HMAC-SHA256 tag), so any tampering
fails authentication instead of yielding a different identity. A decoded
token is only accepted inside the replay window measured from its issue
timestamp; a photographed code stops working after a few seconds.
"""
import base64
import binascii
import io
import json
import re
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional

import qrcode
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from edusync.utils.exceptions import MalformedToken, TokenExpired

TOKEN_TYPE = 'attendance'
DEFAULT_REPLAY_WINDOW_SECONDS = 35

_TOKEN_ALPHABET = re.compile(r'^[A-Za-z0-9_\-]+={0,2}$')

@dataclass(frozen=True)
class IdentityToken:
    """Decoded contents of a student QR code."""
    student_id: int
    issued_at_ms: int

    def age_ms(self, now_ms: int) -> int:
        return now_ms - self.issued_at_ms

@lru_cache(maxsize=8)
def _fernet_for(secret: str) -> Fernet:
    """Derive the Fernet key for a configured secret (cached, PBKDF2 is slow)."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=b'edusync:qr-attendance',
        iterations=100000,
    )
    key = kdf.derive(secret.encode())
    return Fernet(base64.urlsafe_b64encode(key))

def _now_ms() -> int:
    return int(time.time() * 1000)

class QRTokenCodec:
    """Encrypts and validates short-lived student identity tokens."""

    def __init__(self, secret: str, replay_window_seconds: int = DEFAULT_REPLAY_WINDOW_SECONDS):
        if not secret:
            raise ValueError('QR secret key must be configured')
        self.replay_window_ms = int(replay_window_seconds * 1000)
        self._fernet = _fernet_for(secret)

    @classmethod
    def from_config(cls, config: Mapping) -> 'QRTokenCodec':
        """Build a codec from a Flask config mapping."""
        return cls(
            secret=config.get('QR_SECRET_KEY'),
            replay_window_seconds=config.get('QR_REPLAY_WINDOW_SECONDS', DEFAULT_REPLAY_WINDOW_SECONDS)
        )

    @property
    def replay_window_seconds(self) -> float:
        return self.replay_window_ms / 1000

    def encode(self, student_id: int, issued_at_ms: Optional[int] = None) -> str:
        """Encrypt a student identity into a printable token."""
        payload = {
            'studentId': student_id,
            'timestamp': _now_ms() if issued_at_ms is None else int(issued_at_ms),
            'type': TOKEN_TYPE
        }
        plaintext = json.dumps(payload, separators=(',', ':')).encode()
        return self._fernet.encrypt(plaintext).decode('ascii')

    @staticmethod
    def is_valid_format(token) -> bool:
        """Cheap shape check before attempting decryption."""
        if not token or not isinstance(token, str):
            return False
        return len(token) > 10 and _TOKEN_ALPHABET.match(token) is not None

    def decode(self, token: str, now_ms: Optional[int] = None) -> IdentityToken:
        """
        Decrypt and validate a token.

        Raises:
            MalformedToken: the token cannot be decrypted or lacks required fields
            TokenExpired: the token is older than the replay window
        """
        if not self.is_valid_format(token):
            raise MalformedToken('Invalid QR: Unrecognized code format')

        try:
            plaintext = self._fernet.decrypt(token.encode('ascii'))
        except (InvalidToken, binascii.Error, ValueError):
            raise MalformedToken('Invalid QR: Decryption failed')

        try:
            payload = json.loads(plaintext)
        except ValueError:
            raise MalformedToken('Invalid QR: Decryption failed')

        if not isinstance(payload, dict) or payload.get('type') != TOKEN_TYPE:
            raise MalformedToken('Invalid QR: Not an attendance code')

        student_id = payload.get('studentId')
        issued_at = payload.get('timestamp')
        if not student_id or not issued_at:
            raise MalformedToken('Invalid QR: Missing required fields')

        try:
            identity = IdentityToken(student_id=int(student_id), issued_at_ms=int(issued_at))
        except (TypeError, ValueError):
            raise MalformedToken('Invalid QR: Missing required fields')

        now_ms = _now_ms() if now_ms is None else now_ms
        if identity.age_ms(now_ms) > self.replay_window_ms:
            raise TokenExpired(
                f'QR Expired: Code is older than {self.replay_window_seconds:g} seconds'
            )

        return identity

    @staticmethod
    def render_qr_image(token: str) -> str:
        """Render a token as a base64 PNG data URI."""
        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(token)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        img_str = base64.b64encode(buffered.getvalue()).decode()

        return f"data:image/png;base64,{img_str}"
