from typing import Any, List, Optional, Sequence

from flask import current_app

from dropstream.domain.invariants.exceptions import InvariantViolation
from dropstream.domain.invariants.ordering import assert_dense_positions
from dropstream.errors import NotFound, ValidationError
from dropstream.extensions import db


class PositionedCollection:
    """
    Children of one parent, ordered by a dense zero-based `position` column.

    The model must have `id` and `position` columns and a unique constraint
    on (parent column, position). Range moves are staged through negative
    positions so that constraint never fires halfway through a statement.

    None of these methods commit; callers own the transaction.
    """

    def __init__(self, model, parent_field: str, parent_id: str, *, label: Optional[str] = None):
        self.model = model
        self.parent_field = parent_field
        self.parent_column = getattr(model, parent_field)
        self.parent_id = parent_id
        self.label = label or model.__tablename__

    def query(self):
        return self.model.query.filter(self.parent_column == self.parent_id)

    def ordered(self) -> List[Any]:
        return self.query().order_by(self.model.position.asc()).all()

    def positions(self) -> List[int]:
        rows = (
            db.session.query(self.model.position)
            .filter(self.parent_column == self.parent_id)
            .all()
        )
        return [row[0] for row in rows]

    def next_position(self) -> int:
        max_position = (
            db.session.query(db.func.max(self.model.position))
            .filter(self.parent_column == self.parent_id)
            .scalar()
        )
        return 0 if max_position is None else max_position + 1

    def _stage(self, criterion=None) -> None:
        # position p -> -(p + 1), always negative and still unique
        query = self.query()
        if criterion is not None:
            query = query.filter(criterion)
        query.update(
            {self.model.position: -self.model.position - 1},
            synchronize_session="fetch",
        )

    def _shift(self, criterion, delta: int) -> None:
        """Move every sibling matching `criterion` by `delta`."""
        self._stage(criterion)
        self.query().filter(self.model.position < 0).update(
            {self.model.position: -self.model.position - 1 + delta},
            synchronize_session="fetch",
        )

    def insert(self, item, position: Optional[int] = None):
        """
        Add `item` to the collection.

        Without a position the item is appended. With one, every sibling at
        or after it moves up by one first. Positions past the end append.
        """
        end = self.next_position()

        if position is None:
            position = end
        else:
            if not isinstance(position, int) or isinstance(position, bool) or position < 0:
                raise ValidationError("position must be a non-negative integer")
            position = min(position, end)
            if position < end:
                self._shift(self.model.position >= position, 1)

        setattr(item, self.parent_field, self.parent_id)
        item.position = position
        db.session.add(item)
        db.session.flush()
        return item

    def append_many(self, items: Sequence[Any]) -> List[Any]:
        start = self.next_position()
        for offset, item in enumerate(items):
            setattr(item, self.parent_field, self.parent_id)
            item.position = start + offset
            db.session.add(item)
        db.session.flush()
        return list(items)

    def remove(self, item) -> int:
        """
        Delete `item` and close the gap it leaves. Returns its old position.
        """
        if item is None or getattr(item, self.parent_field) != self.parent_id:
            raise NotFound(f"{self.label} item not found")

        removed_position = item.position
        db.session.delete(item)
        db.session.flush()

        self._shift(self.model.position > removed_position, -1)
        return removed_position

    def reorder(self, ordered_ids: Any) -> None:
        """
        Assign position = index in `ordered_ids`.

        The list must name every child exactly once and nothing else.
        """
        if not isinstance(ordered_ids, list) or not all(isinstance(i, str) for i in ordered_ids):
            raise ValidationError("ordering must be an array of id strings")

        if len(set(ordered_ids)) != len(ordered_ids):
            raise ValidationError("ordering contains duplicate ids")

        existing_ids = {row[0] for row in self.query().with_entities(self.model.id).all()}
        requested_ids = set(ordered_ids)

        if requested_ids != existing_ids:
            raise ValidationError(
                f"ordering must list every {self.label} item exactly once",
                payload={
                    "missing": sorted(existing_ids - requested_ids),
                    "unknown": sorted(requested_ids - existing_ids),
                }
            )

        self._stage()
        for index, item_id in enumerate(ordered_ids):
            self.query().filter(self.model.id == item_id).update(
                {self.model.position: index},
                synchronize_session="fetch",
            )

    def compact(self) -> None:
        """
        Re-assign sequential positions (0..N-1) keeping the current order.
        """
        ordered_ids = [row[0] for row in (
            self.query()
            .with_entities(self.model.id)
            .order_by(self.model.position.asc())
            .all()
        )]
        self._stage()
        for index, item_id in enumerate(ordered_ids):
            self.query().filter(self.model.id == item_id).update(
                {self.model.position: index},
                synchronize_session="fetch",
            )

    def check(self) -> bool:
        """
        Log, but do not repair, a broken ordering.
        """
        try:
            assert_dense_positions(self.positions(), label=f"{self.label} {self.parent_id}")
        except InvariantViolation as exc:
            current_app.logger.error(f"Position integrity violation: {exc}")
            return False
        return True
