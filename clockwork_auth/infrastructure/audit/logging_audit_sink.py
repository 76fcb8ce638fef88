"""Audit sink writing structured records to a dedicated logger.

Records go to the "clockwork_auth.audit" logger as one JSON object per
line, so the deployment decides where the trail is persisted (file,
syslog, log aggregation) without touching the services.
"""

import json
import logging
from datetime import UTC, datetime

from clockwork_auth.domain.services.audit_sink import AuditAction, IAuditSink, RequestContext

audit_logger = logging.getLogger("clockwork_auth.audit")


class LoggingAuditSink(IAuditSink):
    """Append-only audit trail on top of stdlib logging."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or audit_logger

    async def record(
        self,
        subject_id: int | None,
        action: AuditAction,
        resource: str,
        details: str,
        context: RequestContext | None = None,
    ) -> None:
        context = context or RequestContext()
        entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "user_id": subject_id,
            "action": str(action),
            "resource": resource,
            "details": details,
            "ip_address": context.ip_address,
            "user_agent": context.user_agent,
        }
        self._logger.info(json.dumps(entry))
