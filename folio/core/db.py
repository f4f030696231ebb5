import logging
from contextlib import contextmanager
from sqlalchemy import create_engine, select, func
from sqlalchemy.exc import (
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from folio.configs import DB_URI, DEBUG, REQUEST_TIMEOUT
from folio.core.exceptions import ConflictError, DatabaseError, DatastoreTimeoutError

logger = logging.getLogger(__name__)


def _engine_kwargs(uri):
    kwargs = {'echo': DEBUG}
    if uri.startswith('sqlite'):
        kwargs['connect_args'] = {
            'check_same_thread': False,
            'timeout': REQUEST_TIMEOUT,
        }
        # In-memory databases live on one connection; share it across threads
        if ':memory:' in uri or uri in ('sqlite://', 'sqlite+pysqlite://'):
            kwargs['poolclass'] = StaticPool
        return kwargs
    timeout_ms = int(REQUEST_TIMEOUT * 1000)
    kwargs['client_encoding'] = 'utf8'
    kwargs['pool_timeout'] = REQUEST_TIMEOUT
    kwargs['pool_pre_ping'] = True
    kwargs['connect_args'] = {
        'connect_timeout': max(1, int(REQUEST_TIMEOUT)),
        'options': f'-c statement_timeout={timeout_ms} -c lock_timeout={timeout_ms}',
    }
    return kwargs


engine = create_engine(DB_URI, **_engine_kwargs(DB_URI))
session = scoped_session(sessionmaker(
    bind=engine, autocommit=False, autoflush=False))


class FolioBase:

    @classmethod
    def get(cls, id):
        return session.get(cls, id)

    @classmethod
    def get_for_update(cls, id, key_share=False):
        """Loads a row and locks it until the transaction ends.

        `key_share` takes the weaker lock that only blocks deleting the
        row or changing its key. SQLite has no row locks and ignores both.
        """
        query = select(cls).where(cls.id == id).with_for_update(key_share=key_share)
        return session.scalars(query).first()

    @classmethod
    def get_many(cls, offset=None, limit=None, order_by=None):
        query = select(cls).order_by(order_by if order_by is not None else cls.id)
        return session.scalars(query.offset(offset).limit(limit)).all()

    @classmethod
    def count(cls, *criteria):
        return session.scalar(select(func.count()).select_from(cls).where(*criteria))


Base = declarative_base(cls=FolioBase)


@contextmanager
def transaction():
    """Runs the enclosed block as one unit of work on the thread's session.

    Commits on success and rolls back on any error. Datastore failures are
    translated into the API error taxonomy; the session is always removed
    so the next request on this thread starts clean.
    """
    try:
        yield session
        session.commit()
    except (OperationalError, PoolTimeoutError) as e:
        session.rollback()
        logger.warning(f"Datastore unavailable or timed out: {e}")
        raise DatastoreTimeoutError() from e
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Integrity violation: {e.orig}")
        raise ConflictError("Request conflicts with existing data") from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Database operation failed: {e}")
        raise DatabaseError("Database operation failed") from e
    except Exception:
        session.rollback()
        raise
    finally:
        session.remove()


def init():
    try:
        # Register every mapped table before creating them
        from folio.core import models  # noqa: F401
        Base.metadata.create_all(bind=engine)
        return session
    except SQLAlchemyError as e:
        logger.warning(f"[WARNING] Database initialization failed: {e}")
