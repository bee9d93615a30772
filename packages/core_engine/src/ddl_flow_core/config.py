from dataclasses import asdict, dataclass, fields
from typing import Any, Dict

from ddl_flow_core.issues import to_lines
from ddl_flow_core.loader import load_yaml_document
from ddl_flow_core.schema import LAYOUT_CONFIG_SCHEMA, bundled_schema, schema_issues

DIRECTIONS = ("LR", "TB", "RL", "BT")


@dataclass(frozen=True)
class LayoutConfig:
    node_width: float = 240
    base_node_height: float = 60
    row_height: float = 33
    nodesep_horizontal: float = 150
    nodesep_vertical: float = 100
    ranksep_horizontal: float = 200
    ranksep_vertical: float = 150
    edgesep: float = 10
    marginx: float = 30
    marginy: float = 30
    order_iterations: int = 24
    direction: str = "LR"

    def node_height(self, column_count: int) -> float:
        # No upper bound: every column gets its row.
        return self.base_node_height + column_count * self.row_height

    def nodesep(self, direction: str) -> float:
        return self.nodesep_vertical if is_vertical(direction) else self.nodesep_horizontal

    def ranksep(self, direction: str) -> float:
        return self.ranksep_vertical if is_vertical(direction) else self.ranksep_horizontal

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LayoutConfig":
        issues = schema_issues(data, bundled_schema(LAYOUT_CONFIG_SCHEMA))
        if issues:
            raise ValueError("Invalid layout config:\n" + "\n".join(to_lines(issues)))
        known = {item.name for item in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


DEFAULT_LAYOUT_CONFIG = LayoutConfig()


def is_vertical(direction: str) -> bool:
    return direction in ("TB", "BT")


def validate_direction(direction: str) -> str:
    value = (direction or "").upper()
    if value not in DIRECTIONS:
        raise ValueError(f"Unknown layout direction {direction!r}; expected one of {', '.join(DIRECTIONS)}")
    return value


def load_layout_config(path: str) -> LayoutConfig:
    return LayoutConfig.from_dict(load_yaml_document(path))
