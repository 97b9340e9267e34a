from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Union

from datagrid.services.records import Record


@dataclass(frozen=True)
class Constant:
    value: Any

    def resolve(self, record: Record) -> Any:
        return self.value


@dataclass(frozen=True)
class Computed:
    fn: Callable[[Record], Any]

    def resolve(self, record: Record) -> Any:
        return self.fn(record)


RuleValue = Union[Constant, Computed]


def rule_value(content: Any) -> RuleValue:
    """Wrap raw rule content: callables are computed per record, anything else is a constant."""
    if isinstance(content, (Constant, Computed)):
        return content
    if callable(content):
        return Computed(content)
    return Constant(content)


@dataclass(frozen=True)
class EditRule:
    field: str
    value: RuleValue


@dataclass(frozen=True)
class AddRule:
    field: str
    value: RuleValue
