"""Query string and urlencoded form parameters."""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qs


class QueryParams(Mapping[str, str]):
    """Immutable parameters parsed from a query string or form body.

    A key sent more than once maps to its first value. ``raw`` keeps the
    bytes as received, so locale redirects can carry a query over
    without re-encoding it.
    """

    __slots__ = ("_data", "raw")

    def __init__(self, query_string: bytes = b"") -> None:
        self.raw = query_string
        parsed = parse_qs(query_string.decode("latin-1"), keep_blank_values=True)
        self._data: dict[str, str] = {key: values[0] for key, values in parsed.items()}

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)
