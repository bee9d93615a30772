from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Column:
    name: str
    type: str
    pk: bool = False
    nullable: bool = True
    unique: bool = False
    default_value: Optional[str] = None

    @property
    def not_null(self) -> bool:
        return not self.nullable

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "pk": self.pk,
            "nullable": self.nullable,
            "notNull": self.not_null,
            "unique": self.unique,
        }
        if self.default_value is not None:
            payload["defaultValue"] = self.default_value
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Column":
        if "nullable" in data:
            nullable = bool(data["nullable"])
        else:
            nullable = not bool(data.get("notNull", False))
        return cls(
            name=str(data["name"]),
            type=str(data.get("type", "")),
            pk=bool(data.get("pk", False)),
            nullable=nullable,
            unique=bool(data.get("unique", False)),
            default_value=data.get("defaultValue"),
        )


@dataclass
class Table:
    name: str
    schema: Optional[str] = None
    columns: List[Column] = field(default_factory=list)
    pk: List[str] = field(default_factory=list)

    def column(self, name: str) -> Optional[Column]:
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def add_pk(self, names: List[str]) -> None:
        for name in names:
            if name and name not in self.pk:
                self.pk.append(name)

    def mark_pk_columns(self) -> None:
        for col in self.columns:
            if col.name in self.pk:
                col.pk = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "schema": self.schema,
            "columns": [col.to_dict() for col in self.columns],
            "pk": list(self.pk),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Table":
        return cls(
            name=str(data["name"]),
            schema=data.get("schema"),
            columns=[Column.from_dict(item) for item in data.get("columns", [])],
            pk=[str(item) for item in data.get("pk", [])],
        )


@dataclass
class ForeignKey:
    from_table: str
    from_column: str
    to_table: str
    to_column: str
    name: Optional[str] = None
    on_delete: Optional[str] = None
    on_update: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "fromTable": self.from_table,
            "fromColumn": self.from_column,
            "toTable": self.to_table,
            "toColumn": self.to_column,
        }
        if self.name is not None:
            payload["name"] = self.name
        if self.on_delete is not None:
            payload["onDelete"] = self.on_delete
        if self.on_update is not None:
            payload["onUpdate"] = self.on_update
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ForeignKey":
        return cls(
            from_table=str(data["fromTable"]),
            from_column=str(data["fromColumn"]),
            to_table=str(data["toTable"]),
            to_column=str(data["toColumn"]),
            name=data.get("name"),
            on_delete=data.get("onDelete"),
            on_update=data.get("onUpdate"),
        )


@dataclass
class SchemaGraph:
    tables: List[Table] = field(default_factory=list)
    fks: List[ForeignKey] = field(default_factory=list)

    def table(self, name: str) -> Optional[Table]:
        """First table registered under ``name`` (duplicates are kept)."""
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tables": [table.to_dict() for table in self.tables],
            "fks": [fk.to_dict() for fk in self.fks],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SchemaGraph":
        return cls(
            tables=[Table.from_dict(item) for item in data.get("tables", [])],
            fks=[ForeignKey.from_dict(item) for item in data.get("fks", [])],
        )
