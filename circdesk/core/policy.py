import logging
from typing import Optional
from circdesk.configs import DEFAULT_FINE_RATE
from circdesk.core.models import SystemConfig

logger = logging.getLogger(__name__)

FINE_RATE_KEY = "fine_rate"


class PolicyConfig:
    """Named configuration values backed by the system_config table.

    Values are looked up on every call. Pass the caller's session when
    reading from inside a transaction so the lookup joins it.
    """

    def __init__(self, store):
        self.store = store

    def get(self, key: str, session=None) -> Optional[str]:
        if session is not None:
            return self._lookup(session, key)
        with self.store.transaction() as s:
            return self._lookup(s, key)

    @staticmethod
    def _lookup(session, key):
        row = session.query(SystemConfig).filter(SystemConfig.config_key == key).first()
        return row.config_value if row else None

    def fine_rate(self, session=None) -> float:
        value = self.get(FINE_RATE_KEY, session=session)
        if value is None:
            return DEFAULT_FINE_RATE
        try:
            return float(value)
        except ValueError:
            logger.warning(f"Unparsable {FINE_RATE_KEY} '{value}', using {DEFAULT_FINE_RATE}")
            return DEFAULT_FINE_RATE


class StaticPolicyConfig(PolicyConfig):
    """Policy values from a plain mapping, for embedding and tests."""

    def __init__(self, values=None):
        self.values = dict(values or {})

    def get(self, key, session=None):
        value = self.values.get(key)
        return None if value is None else str(value)
