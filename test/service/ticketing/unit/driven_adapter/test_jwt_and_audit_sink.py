import orjson
import pytest

from src.platform.exception.exceptions import AuthenticationError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.entity.audit_entry import (
    AuditAction,
    AuditEntry,
    AuditEventType,
    AuditSeverity,
    AuditStatus,
)
from src.service.ticketing.domain.enum.user_role import UserRole
from src.service.ticketing.driven_adapter.audit.loguru_audit_sink_impl import LoguruAuditSinkImpl
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth
from test.service.ticketing.fakes import make_caller


@pytest.mark.unit
class TestJwtAuth:
    def test_round_trips_caller_identity(self) -> None:
        auth = JwtAuth()
        caller = make_caller(5, role=UserRole.VENUE_ADMIN, venue_id=10)

        restored = auth.get_caller_from_jwt(auth.create_jwt_token(caller))

        assert restored == caller

    def test_missing_token(self) -> None:
        with pytest.raises(AuthenticationError, match='Not authenticated'):
            JwtAuth().get_caller_from_jwt(None)

    def test_token_signed_with_another_key(self) -> None:
        foreign = JwtAuth()
        foreign.secret = 'someone_elses_secret'
        token = foreign.create_jwt_token(make_caller(5))

        with pytest.raises(AuthenticationError):
            JwtAuth().get_caller_from_jwt(token)

    def test_unknown_role_is_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        auth = JwtAuth()
        token = auth.create_jwt_token(make_caller(5))
        payload = auth.decode_jwt_token(token)
        payload['role'] = 'superuser'
        monkeypatch.setattr(auth, 'decode_jwt_token', lambda _token: payload)

        with pytest.raises(AuthenticationError):
            auth.get_caller_from_jwt(token)


@pytest.mark.unit
class TestLoguruAuditSink:
    @pytest.mark.asyncio
    async def test_writes_structured_record(self) -> None:
        lines: list[str] = []
        sink_id = Logger.base.add(
            lambda message: lines.append(str(message)),
            level='INFO',
            serialize=True,
            filter=lambda record: record['extra'].get('audit') is True,
        )
        entry = AuditEntry(
            event_type=AuditEventType.TICKET,
            action=AuditAction.SCANNED,
            status=AuditStatus.FAILURE,
            severity=AuditSeverity.WARN,
            resource_type='ticket',
            resource_id='abc',
            actor_user_id=50,
            actor_role=UserRole.SCANNER,
            error_code='already_used',
            metadata={'event_id': 1},
        )

        try:
            await LoguruAuditSinkImpl().record(entry=entry)
        finally:
            Logger.base.remove(sink_id)

        record = orjson.loads(lines[0])['record']
        assert record['level']['name'] == 'WARNING'
        assert record['extra']['action'] == 'scanned'
        assert record['extra']['actor_role'] == 'scanner'
        assert record['extra']['metadata'] == {'event_id': 1}
