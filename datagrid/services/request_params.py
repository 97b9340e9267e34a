from __future__ import annotations

from typing import Any, Iterable, Mapping


def _is_filled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (list, tuple)):
        return any(_is_filled(item) for item in value)
    return bool(str(value).strip())


class RequestParams:
    """Read access to the listing parameters of one incoming request.

    Accepts Starlette ``QueryParams`` (or any multi-dict with ``getlist``) as well as a
    plain mapping. Front-end grids send arrays either as repeated keys or in the
    bracketed ``name[]=...`` form; both come back as a list.
    """

    def __init__(self, source: Mapping[str, Any]):
        self.source = source

    def _values(self, name: str) -> list[Any]:
        getlist = getattr(self.source, "getlist", None)
        if getlist is not None:
            return list(getlist(name))
        if name not in self.source:
            return []
        value = self.source[name]
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]

    def get_field(self, name: str) -> str | list[str] | None:
        bracketed = self._values(f"{name}[]")
        if bracketed:
            return [str(item) for item in bracketed]
        values = self._values(name)
        if not values:
            return None
        if len(values) > 1 or isinstance(self.source.get(name), (list, tuple)):
            return [str(item) for item in values]
        return str(values[0])

    def has_field(self, name: str) -> bool:
        return _is_filled(self.get_field(name))

    def has_all_fields(self, names: Iterable[str]) -> bool:
        return all(self.has_field(name) for name in names)
