# dropstream/normalizers/pagination.py
from typing import Callable, Any, List, Optional, Dict

from dropstream.utils.pagination import CursorMeta


def normalize_pagination(
    items: List[Any],
    normalize_fn: Callable[[Any], Dict[str, Any]],
    *,
    key: str = "items",
    cursor: Optional[CursorMeta] = None,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
    total: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Normalize paginated API responses.

    Supports:
    - Cursor-based pagination (stream feeds)
    - Offset-based pagination (admin views)

    Exactly ONE pagination strategy should be used per response.
    """

    response: Dict[str, Any] = {
        key: [normalize_fn(item) for item in items],
    }

    # -------------------------------
    # Cursor-based pagination
    # -------------------------------
    if cursor is not None:
        response["pagination"] = {
            "has_more": cursor["has_more"],
            "next_cursor": cursor["next_cursor"],
        }
        return response

    # -------------------------------
    # Offset-based pagination
    # -------------------------------
    if page is not None and per_page is not None:
        response["pagination"] = {
            "page": page,
            "per_page": per_page,
        }

        if total is not None:
            response["pagination"]["total"] = total
            response["pagination"]["total_pages"] = (
                (total + per_page - 1) // per_page
            )

    return response
