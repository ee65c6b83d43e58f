"""Request headers and ``Accept-Language`` parsing.

Header names are matched case-insensitively. Repeated list headers
(``Accept-Language`` sent twice) are merged before weighting, so locale
detection sees every preference the client sent.
"""

from collections.abc import Iterator, Mapping


def parse_weighted(value: str) -> list[tuple[str, float]]:
    """Parse a quality-weighted header value, best first.

    ``"tr-TR,tr;q=0.9,en;q=0.8"`` -> ``[("tr-TR", 1.0), ("tr", 0.9), ("en", 0.8)]``

    Entries with ``q=0`` or an unparseable weight are dropped. Ties keep
    their header order.
    """
    entries: list[tuple[int, str, float]] = []
    for position, item in enumerate(value.split(",")):
        token, _, params = item.strip().partition(";")
        token = token.strip()
        if not token:
            continue
        weight = 1.0
        for param in params.split(";"):
            name, _, raw = param.strip().partition("=")
            if name.strip().lower() == "q":
                try:
                    weight = float(raw)
                except ValueError:
                    weight = 0.0
        if weight <= 0.0:
            continue
        entries.append((position, token, weight))
    entries.sort(key=lambda e: (-e[2], e[0]))
    return [(token, weight) for _, token, weight in entries]


class Headers(Mapping[str, str]):
    """Immutable request headers, decoded once from the ASGI byte pairs.

    Lookups return the first value sent under a name; ``get_weighted``
    merges every value of a list header.
    """

    __slots__ = ("_pairs",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        self._pairs: tuple[tuple[str, str], ...] = tuple(
            (name.decode("latin-1").lower(), value.decode("latin-1")) for name, value in raw
        )

    def _all(self, key: str) -> list[str]:
        wanted = key.lower()
        return [value for name, value in self._pairs if name == wanted]

    def __getitem__(self, key: str) -> str:
        values = self._all(key)
        if not values:
            raise KeyError(key)
        return values[0]

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._pairs))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._pairs))

    def get_weighted(self, key: str) -> list[tuple[str, float]]:
        """Return the quality-weighted entries of a list header, best first."""
        merged = ",".join(self._all(key))
        return parse_weighted(merged) if merged else []
