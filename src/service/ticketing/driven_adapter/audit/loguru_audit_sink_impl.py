import orjson

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_audit_sink import IAuditSink
from src.service.ticketing.domain.entity.audit_entry import AuditEntry, AuditSeverity


_LOG_LEVEL: dict[AuditSeverity, str] = {
    AuditSeverity.INFO: 'INFO',
    AuditSeverity.WARN: 'WARNING',
    AuditSeverity.ERROR: 'ERROR',
    AuditSeverity.CRITICAL: 'CRITICAL',
}


class LoguruAuditSinkImpl(IAuditSink):
    """Writes each entry as one JSON line to the audit log sink"""

    async def record(self, *, entry: AuditEntry) -> None:
        Logger.audit().bind(
            event_type=str(entry.event_type),
            action=str(entry.action),
            status=str(entry.status),
            severity=str(entry.severity),
            resource_type=entry.resource_type,
            resource_id=entry.resource_id,
            actor_user_id=entry.actor_user_id,
            actor_role=str(entry.actor_role) if entry.actor_role else None,
            error_code=str(entry.error_code) if entry.error_code else None,
            occurred_at=entry.occurred_at.isoformat(),
            metadata=orjson.loads(orjson.dumps(entry.metadata, default=str)),
        ).log(
            _LOG_LEVEL[entry.severity],
            f'📝 [AUDIT] {entry.event_type}.{entry.action} {entry.status}: {entry.description}',
        )
