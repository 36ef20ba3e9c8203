# app/data/unit_of_work.py
from contextlib import contextmanager

from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.errors import InternalError, OrderError, TransientError
from app.utils.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def unit_of_work(db: Session, timeout_ms: int | None = None):
    """
    Jedna transakcja: commit na koncu bloku, rollback przy kazdym bledzie.

    Bledy bazy zamieniane na wyjatki domenowe:
    - OperationalError (timeout, blokada, deadlock) -> TransientError, mozna powtorzyc cala operacje
    - pozostale SQLAlchemyError -> InternalError
    Wyjatki domenowe (OrderError) przechodza bez zmian.
    """
    try:
        if timeout_ms and db.get_bind().dialect.name == "postgresql":
            # SET LOCAL obowiazuje tylko do konca biezacej transakcji
            db.execute(text(f"SET LOCAL lock_timeout = {int(timeout_ms)}"))
            db.execute(text(f"SET LOCAL statement_timeout = {int(timeout_ms)}"))

        yield db
        db.commit()

    except OrderError:
        db.rollback()
        raise
    except OperationalError as e:
        db.rollback()
        logger.warning(f"Transaction aborted by the database: {e}")
        raise TransientError("Database is busy, please retry the operation") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Transaction failed: {e}")
        raise InternalError("Database error") from e
    except Exception:
        db.rollback()
        raise
