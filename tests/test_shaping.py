import unittest

from datagrid.core.errors import ColumnAlreadyExistsError, DerivedFieldEditError
from datagrid.services.listing import ListingBuilder
from datagrid.services.page import Page
from datagrid.services.records import REMOVED_RELATION, Record
from datagrid.services.rules import AddRule, Computed, Constant, EditRule, rule_value
from datagrid.services.shaping import apply_changes_to


def _page(*records):
    return Page(list(records), page_number=2, page_size=5, total_count=12)


class RuleValueTests(unittest.TestCase):
    def test_callables_become_computed_and_others_constant(self):
        fn = lambda record: record["name"].upper()  # noqa: E731
        self.assertEqual(rule_value(fn), Computed(fn))
        self.assertEqual(rule_value("x"), Constant("x"))
        self.assertEqual(rule_value(None), Constant(None))

    def test_already_wrapped_values_are_kept(self):
        value = Constant(3)
        self.assertIs(rule_value(value), value)


class ApplyChangesTests(unittest.TestCase):
    def test_no_rules_returns_page_untouched(self):
        record = Record({"name": "a"})
        page = _page(record)
        self.assertIs(apply_changes_to(page), page)
        self.assertIs(page.records[0], record)

    def test_edit_constant_and_computed(self):
        page = _page(Record({"id": 1, "name": "ann"}), Record({"id": 2, "name": "bob"}))
        result = apply_changes_to(
            page,
            edit_rules=[
                EditRule("name", Computed(lambda r: r["name"].title())),
                EditRule("status", Constant("active")),
            ],
        )
        self.assertIs(result, page)
        self.assertEqual([r["name"] for r in page.records], ["Ann", "Bob"])
        self.assertEqual([r["status"] for r in page.records], ["active", "active"])

    def test_metadata_is_preserved(self):
        page = _page(Record({"name": "a"}))
        apply_changes_to(page, add_rules=[AddRule("label", Constant("x"))])
        self.assertEqual((page.page_number, page.page_size, page.total_count), (2, 5, 12))
        self.assertEqual(len(page.records), 1)

    def test_editing_derived_field_fails_and_leaves_record_unmodified(self):
        record = Record({"price": 5, "total_price": 50}, derived_fields={"total_price"})
        page = _page(record)
        with self.assertRaises(DerivedFieldEditError) as ctx:
            apply_changes_to(page, edit_rules=[EditRule("total_price", Constant(10))])
        self.assertEqual(ctx.exception.column, "total_price")
        self.assertIs(page.records[0], record)
        self.assertEqual(record.fields, {"price": 5, "total_price": 50})

    def test_add_on_non_null_field_fails(self):
        page = _page(Record({"name": "ann"}))
        with self.assertRaises(ColumnAlreadyExistsError):
            apply_changes_to(page, add_rules=[AddRule("name", Constant("x"))])
        self.assertEqual(page.records[0]["name"], "ann")

    def test_add_on_null_or_absent_field_sets_value(self):
        page = _page(Record({"name": None}), Record({}))
        apply_changes_to(page, add_rules=[AddRule("name", Constant("x"))])
        self.assertEqual([r["name"] for r in page.records], ["x", "x"])

    def test_add_on_falsy_but_non_null_value_fails(self):
        for value in [0, "", False]:
            page = _page(Record({"count": value}))
            with self.subTest(value=value):
                with self.assertRaises(ColumnAlreadyExistsError):
                    apply_changes_to(page, add_rules=[AddRule("count", Constant(1))])

    def test_add_on_loaded_relation_fails_even_when_field_is_null(self):
        author = Record({"id": 7, "name": "Ann"})
        page = _page(Record({"author": None}, relations={"author": author}))
        with self.assertRaises(ColumnAlreadyExistsError):
            apply_changes_to(page, add_rules=[AddRule("author", Constant("x"))])
        self.assertIs(page.records[0].get_relation("author"), author)

    def test_edit_on_loaded_relation_disassociates_it(self):
        author = Record({"id": 7, "name": "Ann"})
        record = Record({"title": "Book", "author_id": 7}, relations={"author": author})
        page = _page(record)
        apply_changes_to(page, edit_rules=[EditRule("author", Constant("unknown"))])
        shaped = page.records[0]
        self.assertEqual(shaped["author"], "unknown")
        self.assertIs(shaped.get_relation("author"), REMOVED_RELATION)
        self.assertEqual(shaped.to_dict(), {"title": "Book", "author_id": 7, "author": "unknown"})
        # The source record is not mutated, only replaced.
        self.assertIs(record.get_relation("author"), author)

    def test_edits_run_before_additions(self):
        seen = []

        def label(record):
            seen.append(record["name"])
            return f"#{record['name']}"

        page = _page(Record({"name": "ann"}))
        apply_changes_to(
            page,
            edit_rules=[EditRule("name", Constant("ANN"))],
            add_rules=[AddRule("label", Computed(label))],
        )
        self.assertEqual(seen, ["ANN"])
        self.assertEqual(page.records[0]["label"], "#ANN")

    def test_add_after_edit_of_same_field_conflicts(self):
        page = _page(Record({"name": None}))
        with self.assertRaises(ColumnAlreadyExistsError):
            apply_changes_to(
                page,
                edit_rules=[EditRule("name", Constant("set"))],
                add_rules=[AddRule("name", Constant("x"))],
            )

    def test_error_on_later_record_keeps_whole_page_unchanged(self):
        first = Record({"name": None})
        second = Record({"name": "taken"})
        page = _page(first, second)
        with self.assertRaises(ColumnAlreadyExistsError):
            apply_changes_to(page, add_rules=[AddRule("name", Constant("x"))])
        self.assertEqual(page.records, [first, second])
        self.assertIsNone(first["name"])


class ListingBuilderTests(unittest.TestCase):
    def test_last_registration_wins_and_keeps_position(self):
        plan = (
            ListingBuilder()
            .edit_column("a", 1)
            .edit_column("b", 2)
            .edit_column("a", 3)
            .add_column("c", "x")
            .build()
        )
        self.assertEqual([(r.field, r.value) for r in plan.edit_rules], [("a", Constant(3)), ("b", Constant(2))])
        self.assertEqual([r.field for r in plan.add_rules], ["c"])

    def test_plan_is_frozen_against_later_registrations(self):
        builder = ListingBuilder().edit_column("a", 1)
        plan = builder.build()
        builder.edit_column("b", 2)
        self.assertEqual([r.field for r in plan.edit_rules], ["a"])
        self.assertEqual(list(builder.columns_to_edit), ["a", "b"])

    def test_plan_applies_rules(self):
        plan = ListingBuilder().add_column("full", lambda r: f"{r['first']} {r['last']}").build()
        page = plan.apply_changes_to(_page(Record({"first": "Ann", "last": "Lee"})))
        self.assertEqual(page.records[0]["full"], "Ann Lee")


if __name__ == "__main__":
    unittest.main()
