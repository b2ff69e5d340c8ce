"""
Human-readable ticket numbers and signed QR payloads.

Ticket number: ``TKT`` + last 6 digits of the epoch-millisecond timestamp
+ 4 random digits + 2-digit checksum ``(timestamp + random) % 100``.
The checksum only depends on the last two timestamp digits, so a number can be
validated without knowing when it was issued.

QR payload: compact JSON carrying the ticket coordinates and a 16-hex-char
HMAC-SHA256 over ``ticket_id:event_id:user_id``.
"""

import hashlib
import hmac
import re
import secrets
import time
from typing import Any

import attrs
import orjson

from src.platform.exception.exceptions import DomainError


QR_PAYLOAD_TYPE = 'EVENT_TICKET'
QR_PAYLOAD_VERSION = '1.0'
_HASH_LENGTH = 16
_TICKET_NUMBER_PATTERN = re.compile(r'^TKT(?P<time>\d{6})(?P<rand>\d{4})(?P<checksum>\d{2})$')


def generate_ticket_number(*, now_ms: int | None = None, random_part: int | None = None) -> str:
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    rand = random_part if random_part is not None else secrets.randbelow(10_000)
    checksum = (timestamp + rand) % 100
    return f'TKT{timestamp % 1_000_000:06d}{rand:04d}{checksum:02d}'


def is_valid_ticket_number(value: str) -> bool:
    match = _TICKET_NUMBER_PATTERN.match(value)
    if not match:
        return False
    expected = (int(match['time']) + int(match['rand'])) % 100
    return expected == int(match['checksum'])


def sign_ticket(*, ticket_id: str, event_id: int, user_id: int, secret: str) -> str:
    message = f'{ticket_id}:{event_id}:{user_id}'.encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()[:_HASH_LENGTH]


@attrs.frozen
class QrClaims:
    ticket_id: str
    event_id: int
    user_id: int
    ticket_number: str


def build_qr_payload(
    *, ticket_id: str, event_id: int, user_id: int, ticket_number: str, secret: str
) -> str:
    payload = {
        'type': QR_PAYLOAD_TYPE,
        'ticket_id': ticket_id,
        'event_id': event_id,
        'user_id': user_id,
        'ticket_number': ticket_number,
        'version': QR_PAYLOAD_VERSION,
        'hash': sign_ticket(
            ticket_id=ticket_id, event_id=event_id, user_id=user_id, secret=secret
        ),
    }
    return orjson.dumps(payload).decode()


def parse_qr_payload(raw: str, *, secret: str) -> QrClaims:
    """Decode and verify a scanned QR payload; any defect is a DomainError"""
    try:
        payload: Any = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise DomainError('Invalid QR code format') from e

    if not isinstance(payload, dict) or payload.get('type') != QR_PAYLOAD_TYPE:
        raise DomainError('Invalid QR code type')

    try:
        claims = QrClaims(
            ticket_id=str(payload['ticket_id']),
            event_id=int(payload['event_id']),
            user_id=int(payload['user_id']),
            ticket_number=str(payload['ticket_number']),
        )
        signature = str(payload['hash'])
    except (KeyError, TypeError, ValueError) as e:
        raise DomainError('Incomplete QR code payload') from e

    expected = sign_ticket(
        ticket_id=claims.ticket_id,
        event_id=claims.event_id,
        user_id=claims.user_id,
        secret=secret,
    )
    if not hmac.compare_digest(expected, signature):
        raise DomainError('QR code signature mismatch')

    return claims
