#!/usr/bin/env python

"""
    Persistence for circdesk: engine construction, the declarative Base
    and the transaction scope every lending operation runs inside.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from circdesk.configs import DB_URI, DEBUG
from circdesk.core.exceptions import PersistenceFailure

logger = logging.getLogger(__name__)


class CircDeskBase:
    @classmethod
    def get(cls, session, pk):
        return session.get(cls, pk)

Base = declarative_base(cls=CircDeskBase)


def make_engine(uri=DB_URI, echo=DEBUG):
    engine_kwargs = {'echo': echo}
    if uri.startswith('sqlite'):
        engine_kwargs['connect_args'] = {'check_same_thread': False}
        # every session must see the same in-memory database
        if uri in ('sqlite://', 'sqlite:///:memory:'):
            engine_kwargs['poolclass'] = StaticPool
    return create_engine(uri, **engine_kwargs)


class Store:
    """Owns the engine and hands out transactional sessions.

    Built once at process start and passed to each component; nothing in
    circdesk keeps a module-level session.
    """

    def __init__(self, engine):
        self.engine = engine
        self.Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    @classmethod
    def from_uri(cls, uri=DB_URI, echo=DEBUG):
        return cls(make_engine(uri, echo=echo))

    def init_db(self):
        # Import models so their tables are registered on Base
        from circdesk.core import models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def drop_db(self):
        Base.metadata.drop_all(bind=self.engine)

    @contextmanager
    def transaction(self):
        """Yields a session whose work commits on exit and rolls back
        on any exception. Database errors surface as PersistenceFailure.
        """
        session = self.Session()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Transaction rolled back: {e}")
            raise PersistenceFailure(f"Transaction failed: {e}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self):
        self.engine.dispose()
