import pytest

from dropstream.domain.streams import is_valid_stream_name, normalize_stream_name


@pytest.mark.parametrize("raw, expected", [
    ("  My Cool   Stream! ", "my-cool-stream"),
    ("already-slug", "already-slug"),
    ("Foo---Bar", "foo-bar"),
    ("-edge-", "edge"),
    ("Ünïcode Name", "ncode-name"),
])
def test_normalize_stream_name(raw, expected):
    assert normalize_stream_name(raw) == expected


def test_name_length_bounds():
    assert not is_valid_stream_name("a")
    assert is_valid_stream_name("ab")
    assert is_valid_stream_name("a" * 50)
    assert not is_valid_stream_name("a" * 51)
