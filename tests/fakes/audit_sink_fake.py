"""Fake audit sink keeping records in a list."""

from clockwork_auth.domain.services.audit_sink import AuditAction, IAuditSink, RequestContext


class FakeAuditSink(IAuditSink):
    def __init__(self) -> None:
        self.records: list[dict] = []

    async def record(
        self,
        subject_id: int | None,
        action: AuditAction,
        resource: str,
        details: str,
        context: RequestContext | None = None,
    ) -> None:
        self.records.append(
            {
                "subject_id": subject_id,
                "action": str(action),
                "resource": resource,
                "details": details,
                "context": context,
            }
        )

    def actions(self) -> list[str]:
        return [r["action"] for r in self.records]
