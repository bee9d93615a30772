"""Tests for statement segmentation and the character-level helpers."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "packages" / "core_engine" / "src"))

from ddl_flow_core.lexing import find_matching_paren, mask_comments, mask_literals
from ddl_flow_core.segmenter import collect_create_tables, iter_alter_tables


class TestLexing:
    def test_mask_comments_keeps_offsets(self):
        text = "a -- note\nb /* c */ d"
        masked = mask_comments(text)
        assert len(masked) == len(text)
        assert "note" not in masked
        assert "/*" not in masked
        assert masked.startswith("a ")
        assert masked.endswith(" d")

    def test_mask_comments_ignores_dashes_in_literals(self):
        text = "x text DEFAULT '--not a comment'"
        assert mask_comments(text) == text

    def test_mask_literals(self):
        assert mask_literals("DEFAULT 'NOT NULL' x") == "DEFAULT '        ' x"

    def test_matching_paren_skips_quotes(self):
        text = "(a text DEFAULT ')', b int)"
        assert find_matching_paren(text, 0) == len(text) - 1

    def test_unbalanced(self):
        assert find_matching_paren("(a (b)", 0) is None


class TestCreateTables:
    def test_basic_block(self):
        blocks = collect_create_tables("CREATE TABLE users (id int, name text);")
        assert len(blocks) == 1
        assert blocks[0].header == "users"
        assert blocks[0].body == "id int, name text"

    def test_if_not_exists_and_schema(self):
        sql = "create table if not exists writer_schema.sites (\n  id bigint\n);"
        blocks = collect_create_tables(sql)
        assert [b.header for b in blocks] == ["writer_schema.sites"]

    def test_nested_parentheses_in_body(self):
        sql = "CREATE TABLE p (price numeric(10,2) CHECK (price > 0), n int);"
        blocks = collect_create_tables(sql)
        assert blocks[0].body == "price numeric(10,2) CHECK (price > 0), n int"

    def test_unterminated_statement_is_skipped(self):
        sql = "CREATE TABLE a (id int)\nCREATE TABLE b (id int);"
        assert [b.header for b in collect_create_tables(sql)] == ["b"]

    def test_unbalanced_statement_is_skipped(self):
        sql = "CREATE TABLE a (id int;\nCREATE TABLE b (id int);"
        assert [b.header for b in collect_create_tables(sql)] == ["b"]

    def test_missing_body_is_skipped(self):
        assert collect_create_tables("CREATE TABLE a AS SELECT 1;") == []

    def test_whitespace_before_terminator(self):
        assert len(collect_create_tables("CREATE TABLE a (id int) ;")) == 1

    def test_unlogged_and_temp(self):
        sql = "CREATE UNLOGGED TABLE a (id int);\nCREATE TEMP TABLE b (id int);"
        assert [b.header for b in collect_create_tables(sql)] == ["a", "b"]

    def test_commented_out_statement_is_ignored(self):
        sql = "-- CREATE TABLE old (id int);\nCREATE TABLE new (id int);"
        assert [b.header for b in collect_create_tables(sql)] == ["new"]

    def test_source_order(self):
        sql = "CREATE TABLE b (id int);CREATE TABLE a (id int);"
        assert [b.header for b in collect_create_tables(sql)] == ["b", "a"]


class TestAlterTables:
    def test_alter_block(self):
        sql = "ALTER TABLE s.t\nADD CONSTRAINT c FOREIGN KEY (a) REFERENCES s.u (id);"
        blocks = list(iter_alter_tables(sql))
        assert len(blocks) == 1
        assert blocks[0].target == "s.t"
        assert blocks[0].body.startswith("ADD CONSTRAINT c")

    def test_alter_only(self):
        blocks = list(iter_alter_tables("ALTER TABLE ONLY public.orders ADD CONSTRAINT x PRIMARY KEY (id);"))
        assert blocks[0].target == "public.orders"

    def test_unterminated_alter_is_skipped(self):
        assert list(iter_alter_tables("ALTER TABLE t ADD CONSTRAINT c FOREIGN KEY (a) REFERENCES u (id)")) == []
