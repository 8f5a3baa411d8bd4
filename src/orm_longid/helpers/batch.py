from contextlib import contextmanager
from sqlalchemy.orm import Session

@contextmanager
def batch_context(
    session: Session,
    *,
    commit: bool = True,
    no_autoflush: bool = True,
):
    """
    Run a group of writes as one unit: commit on success, roll back and
    re-raise on any failure.
    """
    try:
        if no_autoflush:
            with session.no_autoflush:
                yield session
        else:
            yield session

        if commit:
            session.commit()

    except Exception:
        session.rollback()
        raise
