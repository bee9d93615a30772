from pathlib import Path
from typing import Any, Dict

import yaml


def read_ddl(path: str) -> str:
    ddl_path = Path(path)
    if not ddl_path.exists():
        raise FileNotFoundError(f"DDL file not found: {path}")
    return ddl_path.read_text(encoding="utf-8")


def load_yaml_document(path: str) -> Dict[str, Any]:
    """Load a YAML (or JSON) mapping; an empty file yields ``{}``."""
    doc_path = Path(path)
    if not doc_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with doc_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ValueError(f"{path} must parse to an object/map at root.")

    return data
