"""Catalog object models."""
from dataclasses import dataclass, field
from typing import Dict, List, Set, Union
from enum import Enum


class ConstraintKind(Enum):
    """Kinds of table constraints, keyed by pg_constraint.contype."""
    CHECK = "check"
    FOREIGN_KEY = "foreign key"
    PRIMARY_KEY = "primary key"
    TRIGGER = "trigger"
    UNIQUE = "unique"
    EXCLUSION = "exclusion"


CONSTRAINT_CODES = {
    "c": ConstraintKind.CHECK,
    "f": ConstraintKind.FOREIGN_KEY,
    "p": ConstraintKind.PRIMARY_KEY,
    "t": ConstraintKind.TRIGGER,
    "u": ConstraintKind.UNIQUE,
    "x": ConstraintKind.EXCLUSION,
}


@dataclass(frozen=True)
class UnknownConstraintKind:
    """Placeholder for a contype code that has no ConstraintKind yet."""
    code: str

    @property
    def value(self) -> str:
        return f'*** unknown: "{self.code}"'


def constraint_kind(code: str) -> Union[ConstraintKind, UnknownConstraintKind]:
    """Map a single-character contype code to its kind."""
    try:
        return CONSTRAINT_CODES[code]
    except KeyError:
        return UnknownConstraintKind(code)


@dataclass
class ColumnOptions:
    """Options for column listings."""
    include_dropped: bool = False


@dataclass
class Table:
    """A table in the scanned schema."""
    name: str
    oid: int = 0
    columns: List[str] = field(default_factory=list)


@dataclass
class ForeignKey:
    """A foreign key constraint owned by a table."""
    name: str
    columns: List[str]
    ref_table: str
    ref_columns: List[str]


@dataclass
class Constraint:
    """A constraint of any kind owned by a table."""
    name: str
    kind: Union[ConstraintKind, UnknownConstraintKind]


@dataclass
class Function:
    name: str
    oid: int
    arg_types: List[int] = field(default_factory=list)


@dataclass
class Sequence:
    name: str
    oid: int


@dataclass
class Trigger:
    name: str
    oid: int
    table_name: str
    function_name: str


@dataclass
class PgType:
    name: str
    oid: int


# Имя таблицы -> имена таблиц, на которые она ссылается
DependencyGraph = Dict[str, Set[str]]
