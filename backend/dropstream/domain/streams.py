import re

STREAM_NAME_MIN_LENGTH = 2
STREAM_NAME_MAX_LENGTH = 50

STREAM_STATUSES = ("active", "archived")


def normalize_stream_name(raw: str) -> str:
    """
    Normalise a display name into the slug form streams are stored under.

    "  My Cool   Stream! " -> "my-cool-stream"
    """
    name = raw.strip().lower()
    name = re.sub(r"\s+", "-", name)
    name = re.sub(r"[^a-z0-9-]", "", name)
    name = re.sub(r"-+", "-", name)
    return name.strip("-")


def is_valid_stream_name(name: str) -> bool:
    return STREAM_NAME_MIN_LENGTH <= len(name) <= STREAM_NAME_MAX_LENGTH
