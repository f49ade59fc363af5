import logging
from circdesk.configs import DEFAULT_FINE_RATE
from circdesk.core.models import ReaderType, SystemConfig
from circdesk.core.policy import FINE_RATE_KEY

logger = logging.getLogger(__name__)

# (name, max_borrow_count, max_loan_days, renewable, max_renew_count)
DEFAULT_READER_TYPES = [
    ("Standard", 5, 30, True, 1),
    ("VIP", 10, 60, True, 2),
    ("Teacher", 15, 90, True, 3),
    ("Student", 3, 15, True, 1),
]

DEFAULT_CONFIG = [
    (FINE_RATE_KEY, str(DEFAULT_FINE_RATE), "Overdue fine per day"),
]


def seed_defaults(store):
    """Inserts the default reader types and policy config rows unless
    they already exist."""
    with store.transaction() as session:
        if not session.query(ReaderType).count():
            for name, count, days, renewable, renewals in DEFAULT_READER_TYPES:
                session.add(ReaderType(
                    type_name=name,
                    max_borrow_count=count,
                    max_loan_days=days,
                    renewable=renewable,
                    max_renew_count=renewals,
                ))
            logger.info(f"Seeded {len(DEFAULT_READER_TYPES)} reader types")
        for key, value, description in DEFAULT_CONFIG:
            exists = session.query(SystemConfig).filter(SystemConfig.config_key == key).first()
            if exists is None:
                session.add(SystemConfig(config_key=key, config_value=value, description=description))
