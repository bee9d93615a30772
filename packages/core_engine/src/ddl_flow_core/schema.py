import json
from pathlib import Path
from typing import Any, Dict, List

from jsonschema import Draft202012Validator

from ddl_flow_core.issues import Issue

SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"
GRAPH_SCHEMA = "schema_graph.schema.json"
LAYOUT_CONFIG_SCHEMA = "layout_config.schema.json"


def load_schema(schema_path: str) -> Dict[str, Any]:
    path = Path(schema_path)
    if not path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def bundled_schema(name: str) -> Dict[str, Any]:
    return load_schema(str(SCHEMA_DIR / name))


def _to_json_path(parts: List[Any]) -> str:
    if not parts:
        return "/"
    formatted = []
    for part in parts:
        formatted.append(str(part))
    return "/" + "/".join(formatted)


def schema_issues(document: Dict[str, Any], schema: Dict[str, Any]) -> List[Issue]:
    validator = Draft202012Validator(schema)
    issues: List[Issue] = []

    for error in sorted(validator.iter_errors(document), key=lambda e: [str(p) for p in e.absolute_path]):
        issues.append(
            Issue(
                severity="error",
                code="SCHEMA_VALIDATION_FAILED",
                message=error.message,
                path=_to_json_path(list(error.absolute_path)),
            )
        )

    return issues


def graph_issues(document: Dict[str, Any]) -> List[Issue]:
    return schema_issues(document, bundled_schema(GRAPH_SCHEMA))
