"""Tests for QR identity token encoding and replay-window checks."""
import pytest

from edusync.services.token_codec import QRTokenCodec, IdentityToken, _fernet_for
from edusync.utils.exceptions import MalformedToken, TokenExpired

ISSUED_AT = 1_760_000_000_000
WINDOW_MS = 35_000

@pytest.fixture
def codec():
    return QRTokenCodec('unit-test-secret', replay_window_seconds=35)

def test_round_trip(codec):
    token = codec.encode(42, issued_at_ms=ISSUED_AT)

    identity = codec.decode(token, now_ms=ISSUED_AT + 1_000)

    assert identity == IdentityToken(student_id=42, issued_at_ms=ISSUED_AT)

def test_token_is_printable_and_hides_identity(codec):
    token = codec.encode(42, issued_at_ms=ISSUED_AT)

    assert QRTokenCodec.is_valid_format(token)
    assert 'studentId' not in token
    assert str(ISSUED_AT) not in token

@pytest.mark.parametrize('age_ms', [0, 1, 15_000, WINDOW_MS - 1, WINDOW_MS])
def test_accepts_tokens_inside_window(codec, age_ms):
    token = codec.encode(7, issued_at_ms=ISSUED_AT)
    assert codec.decode(token, now_ms=ISSUED_AT + age_ms).student_id == 7

@pytest.mark.parametrize('age_ms', [WINDOW_MS + 1, 60_000, 3_600_000])
def test_rejects_tokens_outside_window(codec, age_ms):
    token = codec.encode(7, issued_at_ms=ISSUED_AT)
    with pytest.raises(TokenExpired):
        codec.decode(token, now_ms=ISSUED_AT + age_ms)

def test_window_is_configurable():
    short = QRTokenCodec('unit-test-secret', replay_window_seconds=15)
    token = short.encode(7, issued_at_ms=ISSUED_AT)

    with pytest.raises(TokenExpired):
        short.decode(token, now_ms=ISSUED_AT + 20_000)

def test_from_config_uses_flask_settings():
    codec = QRTokenCodec.from_config({'QR_SECRET_KEY': 's3cret', 'QR_REPLAY_WINDOW_SECONDS': 10})
    assert codec.replay_window_ms == 10_000

def test_tampered_token_is_malformed(codec):
    token = codec.encode(42, issued_at_ms=ISSUED_AT)
    position = len(token) // 2
    replacement = 'A' if token[position] != 'A' else 'B'
    tampered = token[:position] + replacement + token[position + 1:]

    with pytest.raises(MalformedToken):
        codec.decode(tampered, now_ms=ISSUED_AT)

def test_token_from_another_secret_is_malformed(codec):
    foreign = QRTokenCodec('some-other-secret').encode(42, issued_at_ms=ISSUED_AT)

    with pytest.raises(MalformedToken):
        codec.decode(foreign, now_ms=ISSUED_AT)

@pytest.mark.parametrize('garbage', [None, '', 'short', 'not a token at all!!', 12345])
def test_garbage_is_malformed(codec, garbage):
    with pytest.raises(MalformedToken):
        codec.decode(garbage, now_ms=ISSUED_AT)

@pytest.mark.parametrize('plaintext', [
    b'not json',
    b'{"timestamp": 1760000000000, "type": "attendance"}',
    b'{"studentId": 5, "type": "attendance"}',
    b'{"studentId": 5, "timestamp": 1760000000000, "type": "library"}',
    b'{"studentId": 5, "timestamp": 1760000000000}',
    b'[1, 2, 3]',
])
def test_encrypted_but_invalid_payload_is_malformed(codec, plaintext):
    token = _fernet_for('unit-test-secret').encrypt(plaintext).decode()

    with pytest.raises(MalformedToken):
        codec.decode(token, now_ms=ISSUED_AT)

def test_missing_secret_is_rejected():
    with pytest.raises(ValueError):
        QRTokenCodec('')

def test_render_qr_image(codec):
    image = QRTokenCodec.render_qr_image(codec.encode(1))
    assert image.startswith('data:image/png;base64,')
