from __future__ import annotations

import math
from dataclasses import dataclass, field

from datagrid.core.config import settings
from datagrid.services.records import Record


@dataclass
class Page:
    """One bounded slice of a result set plus length-aware pagination metadata."""

    records: list[Record] = field(default_factory=list)
    page_number: int = 1
    page_size: int = field(default_factory=lambda: settings.LISTING_DEFAULT_PER_PAGE)
    total_count: int = 0

    @property
    def last_page(self) -> int:
        if self.page_size <= 0:
            return 1
        return max(math.ceil(self.total_count / self.page_size), 1)

    @property
    def first_item(self) -> int | None:
        if not self.records:
            return None
        return (self.page_number - 1) * self.page_size + 1

    @property
    def last_item(self) -> int | None:
        if not self.records:
            return None
        return self.first_item + len(self.records) - 1

    @property
    def has_more_pages(self) -> bool:
        return self.page_number < self.last_page

    def set_records(self, records: list[Record]) -> "Page":
        self.records = list(records)
        return self
