from contextlib import contextmanager
from typing import Optional

from flask import current_app

from dropstream.extensions import db


@contextmanager
def transactional(label: Optional[str] = None):
    """
    Commit the session when the block exits cleanly; roll back and re-raise
    otherwise. `label` names the unit of work in the rollback log line.
    """
    try:
        yield db.session
        db.session.commit()
    except Exception as exc:
        db.session.rollback()
        current_app.logger.debug(f"Rolled back {label or 'transaction'}: {exc!r}")
        raise
