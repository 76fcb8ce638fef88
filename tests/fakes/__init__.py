"""Fake implementations for testing."""

from tests.fakes.audit_sink_fake import FakeAuditSink
from tests.fakes.notification_dispatcher_fake import FakeNotificationDispatcher
from tests.fakes.password_hasher_fake import FakePasswordHasher
from tests.fakes.principal_repository_fake import FakePrincipalRepository
from tests.fakes.session_store_fake import FakeSessionStore
from tests.fakes.unit_of_work_fake import FakeUnitOfWork

__all__ = [
    "FakeAuditSink",
    "FakeNotificationDispatcher",
    "FakePasswordHasher",
    "FakePrincipalRepository",
    "FakeSessionStore",
    "FakeUnitOfWork",
]
