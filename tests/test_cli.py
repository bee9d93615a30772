"""Tests for the ddl-flow command line."""

import json
import sys
from pathlib import Path

import pytest
import yaml

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "packages" / "core_engine" / "src"))
sys.path.insert(0, str(ROOT / "packages" / "cli" / "src"))

from ddl_flow_cli.main import build_parser, main
from ddl_flow_core import EXAMPLE_SQL, share_url


@pytest.fixture
def ddl_file(tmp_path):
    path = tmp_path / "schema.sql"
    path.write_text(EXAMPLE_SQL, encoding="utf-8")
    return path


def test_parse_json(ddl_file, capsys):
    assert main(["parse", str(ddl_file)]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert len(payload["tables"]) == 3
    assert len(payload["fks"]) == 2


def test_parse_yaml_with_search(ddl_file, capsys):
    assert main(["parse", str(ddl_file), "--format", "yaml", "--search", "path"]) == 0
    payload = yaml.safe_load(capsys.readouterr().out)
    assert [table["name"] for table in payload["tables"]] == ["writer_schema.views"]


def test_parse_writes_file(ddl_file, tmp_path, capsys):
    out = tmp_path / "graph.json"
    assert main(["parse", str(ddl_file), "--out", str(out)]) == 0
    assert json.loads(out.read_text(encoding="utf-8"))["fks"][0]["name"] == "fk_sites_live_release"
    assert "Wrote" in capsys.readouterr().out


def test_layout_with_config(ddl_file, tmp_path, capsys):
    config = tmp_path / "layout.yaml"
    config.write_text("direction: TB\nnode_width: 200\n", encoding="utf-8")
    assert main(["layout", str(ddl_file), "--config", str(config)]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert len(payload["nodes"]) == 3
    assert all(node["width"] == 200 for node in payload["nodes"])
    assert {"x", "y"} == set(payload["nodes"][0]["position"])


def test_stats(ddl_file, capsys):
    assert main(["stats", str(ddl_file), "--output-json"]) == 0
    assert json.loads(capsys.readouterr().out)["table_count"] == 3


def test_validate(ddl_file, tmp_path, capsys):
    good = tmp_path / "graph.json"
    main(["parse", str(ddl_file), "--out", str(good)])
    capsys.readouterr()
    assert main(["validate", str(good)]) == 0
    assert "No issues found." in capsys.readouterr().out

    bad = tmp_path / "bad.yaml"
    bad.write_text("tables: nope\n", encoding="utf-8")
    assert main(["validate", str(bad)]) == 1


def test_share_and_unshare(ddl_file, capsys):
    assert main(["share", str(ddl_file), "--base-url", "https://x.dev/"]) == 0
    url = capsys.readouterr().out.strip()
    assert main(["unshare", url]) == 0
    assert capsys.readouterr().out.strip() == EXAMPLE_SQL.strip()


def test_unshare_distinguishes_absent_from_corrupt(capsys):
    assert main(["unshare", "https://x.dev/"]) == 2
    assert main(["unshare", "https://x.dev/?schema=%25%25"]) == 1
    err = capsys.readouterr().err
    assert "No schema provided" in err
    assert "Could not decode" in err


def test_unshare_round_trips_through_share_url(tmp_path):
    out = tmp_path / "restored.sql"
    assert main(["unshare", share_url("CREATE TABLE a (id int);", "https://x.dev/"), "--out", str(out)]) == 0
    assert out.read_text(encoding="utf-8").strip() == "CREATE TABLE a (id int);"


def test_example(capsys):
    assert main(["example"]) == 0
    assert "writer_schema.sites" in capsys.readouterr().out


def test_missing_input_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        main(["parse", str(tmp_path / "missing.sql")])


def test_invalid_direction_rejected():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["layout", "x.sql", "--direction", "UP"])
