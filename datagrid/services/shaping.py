from __future__ import annotations

import logging
from typing import Sequence

from datagrid.core.errors import ColumnAlreadyExistsError, DerivedFieldEditError
from datagrid.services.page import Page
from datagrid.services.records import Record
from datagrid.services.rules import AddRule, EditRule

_LOG = logging.getLogger("datagrid.listing")


def edit_record_fields(record: Record, rules: Sequence[EditRule]) -> Record:
    for rule in rules:
        if record.is_derived(rule.field):
            raise DerivedFieldEditError(rule.field)
        record.set_field(rule.field, rule.value.resolve(record))
        # A relation loaded under the same name would shadow the new scalar.
        if record.relation_loaded(rule.field):
            record.disassociate(rule.field)
    return record


def add_record_fields(record: Record, rules: Sequence[AddRule]) -> Record:
    for rule in rules:
        if record.relation_loaded(rule.field) or record.get(rule.field) is not None:
            raise ColumnAlreadyExistsError(rule.field)
        record.set_field(rule.field, rule.value.resolve(record))
    return record


def apply_changes_to(page: Page, edit_rules: Sequence[EditRule] = (), add_rules: Sequence[AddRule] = ()) -> Page:
    """Apply edit rules, then add rules, to every record of ``page``.

    Records are shaped on copies and swapped in only once the whole page succeeded,
    so a failing rule leaves the page exactly as it was. Metadata is never touched.
    """
    if not edit_rules and not add_rules:
        return page

    shaped = []
    for record in page.records:
        record = edit_record_fields(record.copy(), edit_rules)
        record = add_record_fields(record, add_rules)
        shaped.append(record)
    _LOG.debug(
        "shaped %s records edits=%s additions=%s",
        len(shaped),
        [rule.field for rule in edit_rules],
        [rule.field for rule in add_rules],
    )
    return page.set_records(shaped)
