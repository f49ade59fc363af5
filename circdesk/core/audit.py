import logging
from sqlalchemy.exc import SQLAlchemyError
from circdesk.core.exceptions import AuditFailure, PersistenceFailure
from circdesk.core.models import OperationLog

logger = logging.getLogger(__name__)


class AuditSink:
    """Writes operation_log rows in a transaction of their own."""

    def __init__(self, store):
        self.store = store

    def record(self, actor_id, action: str, detail: str):
        try:
            with self.store.transaction() as session:
                session.add(OperationLog(user_id=actor_id, operation=action, details=detail))
        except (PersistenceFailure, SQLAlchemyError) as e:
            raise AuditFailure(f"Failed to record '{action}': {e}") from e


class NullAuditSink:
    def record(self, actor_id, action, detail):
        pass


def emit(sink, actor_id, action, detail):
    """Records an audit event; a failing sink never fails the caller."""
    if sink is None:
        return
    try:
        sink.record(actor_id, action, detail)
    except Exception as e:
        logger.warning(f"Audit event '{action}' dropped: {e}")
