"""Tests for ALTER TABLE and inline foreign key extraction."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "packages" / "core_engine" / "src"))

from ddl_flow_core.foreign_keys import (
    alter_foreign_keys,
    alter_primary_keys,
    inline_foreign_keys,
    parse_actions,
)
from ddl_flow_core.model import Table
from ddl_flow_core.segmenter import collect_create_tables, iter_alter_tables


def _alter(sql):
    return alter_foreign_keys(iter_alter_tables(sql))


def _inline(sql, tables=()):
    return inline_foreign_keys(collect_create_tables(sql), tables)


class TestAlterForeignKeys:
    def test_single_constraint_with_action(self):
        fks = _alter(
            "ALTER TABLE writer_schema.views\n"
            "ADD CONSTRAINT views_site_id_fkey FOREIGN KEY (site_id) "
            "REFERENCES writer_schema.sites (id) ON DELETE CASCADE;"
        )
        assert len(fks) == 1
        fk = fks[0]
        assert fk.name == "views_site_id_fkey"
        assert (fk.from_table, fk.from_column) == ("writer_schema.views", "site_id")
        assert (fk.to_table, fk.to_column) == ("writer_schema.sites", "id")
        assert fk.on_delete == "CASCADE"
        assert fk.on_update is None

    def test_multiple_constraints_in_one_statement(self):
        fks = _alter(
            "ALTER TABLE orders\n"
            "  ADD CONSTRAINT fk_customer FOREIGN KEY (customer_id) REFERENCES customers (id),\n"
            "  ADD CONSTRAINT fk_product FOREIGN KEY (product_id) REFERENCES products (id) "
            "ON UPDATE set   null ON DELETE no action;"
        )
        assert [fk.name for fk in fks] == ["fk_customer", "fk_product"]
        assert fks[1].on_update == "SET NULL"
        assert fks[1].on_delete == "NO ACTION"

    def test_multi_column_pairs_are_zipped(self):
        fks = _alter("ALTER TABLE a ADD CONSTRAINT c FOREIGN KEY (x, y) REFERENCES b (p, q);")
        assert [(fk.from_column, fk.to_column) for fk in fks] == [("x", "p"), ("y", "q")]

    def test_arity_mismatch_truncates(self):
        fks = _alter("ALTER TABLE s ADD CONSTRAINT c FOREIGN KEY (a,b) REFERENCES t(x);")
        assert len(fks) == 1
        assert (fks[0].from_column, fks[0].to_column) == ("a", "x")

    def test_quoted_identifiers(self):
        fks = _alter(
            'ALTER TABLE ONLY "app"."orders" ADD CONSTRAINT "fk_user" '
            'FOREIGN KEY ("user_id") REFERENCES "app"."users"("id");'
        )
        assert fks[0].from_table == "app.orders"
        assert fks[0].to_table == "app.users"
        assert fks[0].from_column == "user_id"
        assert fks[0].name == "fk_user"

    def test_unnamed_add_foreign_key(self):
        fks = _alter("ALTER TABLE a ADD FOREIGN KEY (b_id) REFERENCES b (id);")
        assert len(fks) == 1
        assert fks[0].name is None

    def test_implicit_target_uses_primary_key(self):
        fks = alter_foreign_keys(
            iter_alter_tables("ALTER TABLE a ADD FOREIGN KEY (b_id) REFERENCES b ON DELETE CASCADE;"),
            [Table(name="b", pk=["id"])],
        )
        assert [(fk.from_column, fk.to_table, fk.to_column) for fk in fks] == [("b_id", "b", "id")]
        assert fks[0].on_delete == "CASCADE"

    def test_implicit_target_unknown_table_is_dropped(self):
        assert _alter("ALTER TABLE a ADD FOREIGN KEY (b_id) REFERENCES b;") == []

    def test_non_fk_alter_is_ignored(self):
        assert _alter("ALTER TABLE a ADD COLUMN note text;") == []


class TestAlterPrimaryKeys:
    def test_pg_dump_style_primary_key(self):
        keys = alter_primary_keys(
            iter_alter_tables("ALTER TABLE ONLY public.users ADD CONSTRAINT users_pkey PRIMARY KEY (id);")
        )
        assert keys == {"public.users": ["id"]}


class TestInlineForeignKeys:
    def test_column_reference(self):
        fks = _inline("CREATE TABLE orders (id int, user_id int REFERENCES users(id) ON DELETE CASCADE);")
        assert len(fks) == 1
        fk = fks[0]
        assert (fk.from_table, fk.from_column, fk.to_table, fk.to_column) == ("orders", "user_id", "users", "id")
        assert fk.name is None
        assert fk.on_delete == "CASCADE"

    def test_named_column_reference(self):
        fks = _inline("CREATE TABLE o (u int CONSTRAINT o_u_fk REFERENCES app.users (id));")
        assert fks[0].name == "o_u_fk"
        assert fks[0].to_table == "app.users"

    def test_table_level_foreign_key_truncates(self):
        fks = _inline("CREATE TABLE s (a int, b int, FOREIGN KEY (a,b) REFERENCES t(x));")
        assert len(fks) == 1
        assert (fks[0].from_column, fks[0].to_column) == ("a", "x")

    def test_implicit_target_uses_primary_key(self):
        users = Table(name="users", pk=["id"])
        fks = _inline("CREATE TABLE orders (user_id int REFERENCES users);", tables=[users])
        assert fks[0].to_column == "id"

    def test_implicit_target_unknown_table_is_dropped(self):
        assert _inline("CREATE TABLE orders (user_id int REFERENCES users);") == []

    def test_source_order(self):
        sql = (
            "CREATE TABLE a (x int REFERENCES b(id), y int REFERENCES c(id));\n"
            "CREATE TABLE d (z int REFERENCES a(x));"
        )
        assert [(fk.from_table, fk.from_column) for fk in _inline(sql)] == [("a", "x"), ("a", "y"), ("d", "z")]


def test_parse_actions_vocabulary():
    assert parse_actions("ON DELETE SET DEFAULT ON UPDATE restrict") == ("SET DEFAULT", "RESTRICT")
    assert parse_actions("") == (None, None)
