from enum import Enum
from typing import Callable

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from dropstream.utils.transaction import transactional


class Outcome(str, Enum):
    SUCCESS = "success"
    ROLLED_BACK = "rolled_back"
    CRITICAL = "critical"


def run_compensated(
    step: Callable[[], None],
    compensate: Callable[[], None],
    *,
    label: str,
) -> Outcome:
    """
    Commit `step`; if it fails, commit `compensate` in its place.

    Used where an earlier step has already been committed and cannot be
    undone by a plain rollback. The caller decides how each outcome is
    reported:

    - SUCCESS: step committed
    - ROLLED_BACK: step failed, compensating write committed
    - CRITICAL: step failed and so did the compensating write
    """
    try:
        with transactional(f"{label} step"):
            step()
        return Outcome.SUCCESS
    except SQLAlchemyError as exc:
        current_app.logger.error(f"[{label}] step failed: {exc}")

    try:
        with transactional(f"{label} compensation"):
            compensate()
    except SQLAlchemyError as exc:
        current_app.logger.critical(f"[{label}] compensating write failed: {exc}")
        return Outcome.CRITICAL

    current_app.logger.info(f"[{label}] compensating write applied")
    return Outcome.ROLLED_BACK
