from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Optional

import attrs


class AuditEventType(StrEnum):
    PAYMENT = 'payment'
    TICKET = 'ticket'
    SECURITY = 'security'


class AuditAction(StrEnum):
    INITIATED = 'initiated'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'
    REFUNDED = 'refunded'
    SCANNED = 'scanned'
    TRANSFERRED = 'transferred'
    PERMISSION_DENIED = 'permission_denied'
    RATE_LIMITED = 'rate_limited'


class AuditStatus(StrEnum):
    SUCCESS = 'success'
    FAILURE = 'failure'


class AuditSeverity(StrEnum):
    INFO = 'INFO'
    WARN = 'WARN'
    ERROR = 'ERROR'
    CRITICAL = 'CRITICAL'


@attrs.frozen
class AuditEntry:
    """One append-only record of an issuance, redemption or transfer decision"""

    event_type: AuditEventType
    action: AuditAction
    status: AuditStatus
    resource_type: str
    resource_id: Optional[str]
    severity: AuditSeverity = AuditSeverity.INFO
    actor_user_id: Optional[int] = None
    actor_role: Optional[str] = None
    error_code: Optional[str] = None
    description: str = ''
    metadata: dict[str, Any] = attrs.field(factory=dict)
    occurred_at: datetime = attrs.field(factory=lambda: datetime.now(timezone.utc))
