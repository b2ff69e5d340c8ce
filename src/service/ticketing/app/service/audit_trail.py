from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_audit_sink import IAuditSink
from src.service.ticketing.domain.entity.audit_entry import AuditEntry


async def record_audit(audit_sink: IAuditSink, entry: AuditEntry) -> None:
    """Write an audit entry; a sink failure is logged and never changes the caller's outcome"""
    try:
        await audit_sink.record(entry=entry)
    except Exception as e:
        Logger.base.opt(exception=e).error(
            f'❌ [AUDIT] Failed to record {entry.event_type}/{entry.action} '
            f'for {entry.resource_type}:{entry.resource_id}: {e}'
        )
