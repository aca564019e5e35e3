# athletics_flow/graph.py
"""
Turn the athletics revenue/expense table into a five-column flow graph:

    source anchors -> revenue items -> aggregator -> expense items -> target anchors

Nodes and links are rebuilt from scratch on every call; nothing here does I/O.
"""
from __future__ import annotations
import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple, Union

import pandas as pd

from athletics_flow.categories import CATEGORIES, Category, category_for
from athletics_flow.constants import (
    AGGREGATOR_NAME,
    AGGREGATOR_TITLE,
    NAME_FIELD,
    REVENUE_ROW_COUNT,
    TOTAL_FIELD,
)

logger = logging.getLogger(__name__)


class InvalidInputError(ValueError):
    """Raised when the input rows cannot be turned into a well-formed graph."""


class RowKind(Enum):
    REVENUE = "revenue"
    EXPENSE = "expense"


class NodeGroup(Enum):
    SOURCE = "source"
    REVENUE = "revenue"
    AGGREGATE = "aggregate"
    EXPENSE = "expense"
    TARGET = "target"


_WHITESPACE = re.compile(r"\s+")


def normalize_label(label: str) -> str:
    """
    Node-name form of a row label: trimmed, case-folded, whitespace runs -> '-'.
    Used for revenue and expense items alike.
    """
    return _WHITESPACE.sub("-", str(label).strip().casefold())


@dataclass(frozen=True)
class Row:
    name: str
    kind: RowKind
    amounts: Dict[Category, float] = field(default_factory=dict)
    total: float = 0.0
    extra: Tuple[str, ...] = ()

    def amount(self, category: Category) -> float:
        return self.amounts.get(category, 0.0)

    @property
    def node_name(self) -> str:
        return f"{self.kind.value}-{normalize_label(self.name)}"


@dataclass(frozen=True)
class Node:
    name: str
    title: str
    group: NodeGroup

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "title": self.title, "group": self.group.value}


@dataclass(frozen=True)
class Link:
    source: str
    target: str
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {"source": self.source, "target": self.target, "value": self.value}


@dataclass(frozen=True)
class SankeyGraph:
    nodes: Tuple[Node, ...]
    links: Tuple[Link, ...]

    def node_index(self) -> Dict[str, int]:
        return {n.name: i for i, n in enumerate(self.nodes)}

    def node_values(self) -> Dict[str, float]:
        """Through-flow per node: the larger of its incoming and outgoing totals."""
        inflow: Dict[str, float] = {n.name: 0.0 for n in self.nodes}
        outflow: Dict[str, float] = {n.name: 0.0 for n in self.nodes}
        for link in self.links:
            outflow[link.source] += link.value
            inflow[link.target] += link.value
        return {name: max(inflow[name], outflow[name]) for name in inflow}

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [link.to_dict() for link in self.links],
        }

    def nodes_frame(self) -> pd.DataFrame:
        values = self.node_values()
        return pd.DataFrame(
            [{**n.to_dict(), "value": values[n.name]} for n in self.nodes],
            columns=["name", "title", "group", "value"],
        )

    def to_frame(self) -> pd.DataFrame:
        titles = {n.name: n.title for n in self.nodes}
        return pd.DataFrame(
            [
                {
                    "source": link.source,
                    "target": link.target,
                    "source_title": titles.get(link.source, link.source),
                    "target_title": titles.get(link.target, link.target),
                    "value": link.value,
                }
                for link in self.links
            ],
            columns=["source", "target", "source_title", "target_title", "value"],
        )


def _to_amount(x: Any) -> float:
    if x is None:
        return 0.0
    v = pd.to_numeric(x, errors="coerce")
    if pd.isna(v):
        return 0.0
    return float(v)


def _row_label(record: Mapping[str, Any]) -> str:
    raw = record.get(NAME_FIELD)
    if raw is None or (pd.api.types.is_scalar(raw) and pd.isna(raw)):
        raise InvalidInputError(f"Row is missing required field '{NAME_FIELD}': {dict(record)!r}")
    label = str(raw).strip()
    if not label:
        raise InvalidInputError(f"Row has an empty '{NAME_FIELD}': {dict(record)!r}")
    return label


def row_from_record(
    record: Mapping[str, Any],
    kind: RowKind,
    strict: bool = False,
) -> Row:
    """
    Tag one raw record. Missing Total/category fields count as zero.
    Keys that are neither the name, Total nor a known category label are
    ignored with a warning, or rejected when strict.
    """
    if not isinstance(record, Mapping):
        raise InvalidInputError(f"Expected a mapping per row, got {type(record).__name__}")
    label = _row_label(record)

    if TOTAL_FIELD not in record:
        logger.debug("Row %r has no %r field; treating as 0", label, TOTAL_FIELD)
    total = _to_amount(record.get(TOTAL_FIELD))

    amounts: Dict[Category, float] = {}
    for category in CATEGORIES:
        if category.label not in record:
            logger.debug("Row %r has no %r field; treating as 0", label, category.label)
        amounts[category] = _to_amount(record.get(category.label))

    extra = tuple(
        str(k) for k in record
        if k not in (NAME_FIELD, TOTAL_FIELD) and category_for(str(k)) is None
    )
    if extra:
        if strict:
            raise InvalidInputError(f"Row {label!r} has unknown columns: {', '.join(extra)}")
        logger.warning("Row %r: ignoring unknown columns %s", label, ", ".join(extra))

    return Row(name=label, kind=kind, amounts=amounts, total=total, extra=extra)


def tag_rows(
    records: Iterable[Mapping[str, Any]],
    revenue_count: int = REVENUE_ROW_COUNT,
    strict: bool = False,
) -> List[Row]:
    """First `revenue_count` records are revenue, the rest are expense."""
    records = list(records)
    if len(records) < revenue_count:
        raise InvalidInputError(
            f"Expected at least {revenue_count} rows (revenue rows first), got {len(records)}"
        )
    return [
        row_from_record(
            record,
            RowKind.REVENUE if i < revenue_count else RowKind.EXPENSE,
            strict=strict,
        )
        for i, record in enumerate(records)
    ]


def _coerce_rows(
    rows: Sequence[Union[Row, Mapping[str, Any]]],
    revenue_count: int,
    strict: bool,
) -> List[Row]:
    rows = list(rows)
    tagged = sum(isinstance(r, Row) for r in rows)
    if rows and tagged == len(rows):
        if strict:
            offending = [r for r in rows if r.extra]
            if offending:
                raise InvalidInputError(
                    f"Row {offending[0].name!r} has unknown columns: {', '.join(offending[0].extra)}"
                )
        return rows
    if tagged:
        raise InvalidInputError("Cannot mix tagged Row objects with raw records")
    return tag_rows(rows, revenue_count=revenue_count, strict=strict)


def _split(rows: Sequence[Row]) -> Tuple[List[Row], List[Row]]:
    revenue = [r for r in rows if r.kind is RowKind.REVENUE]
    expense = [r for r in rows if r.kind is RowKind.EXPENSE]
    return revenue, expense


def build_nodes(rows: Sequence[Row]) -> List[Node]:
    revenue, expense = _split(rows)
    nodes = (
        [Node(c.source_name, c.title, NodeGroup.SOURCE) for c in CATEGORIES]
        + [Node(r.node_name, r.name, NodeGroup.REVENUE) for r in revenue]
        + [Node(AGGREGATOR_NAME, AGGREGATOR_TITLE, NodeGroup.AGGREGATE)]
        + [Node(r.node_name, r.name, NodeGroup.EXPENSE) for r in expense]
        + [Node(c.target_name, c.title, NodeGroup.TARGET) for c in CATEGORIES]
    )

    dupes = [name for name, count in Counter(n.name for n in nodes).items() if count > 1]
    if dupes:
        raise InvalidInputError(f"Row labels collide after normalization: {', '.join(dupes)}")
    return nodes


def build_links(rows: Sequence[Row]) -> List[Link]:
    revenue, expense = _split(rows)
    links: List[Link] = []

    def add(source: str, target: str, value: float) -> None:
        if value > 0:
            links.append(Link(source, target, value))

    # Links: category anchor -> revenue item
    for row in revenue:
        for category in CATEGORIES:
            add(category.source_name, row.node_name, row.amount(category))

    # Links: revenue item -> aggregator
    for row in revenue:
        add(row.node_name, AGGREGATOR_NAME, row.total)

    # Links: aggregator -> expense item
    for row in expense:
        add(AGGREGATOR_NAME, row.node_name, row.total)

    # Links: expense item -> category anchor
    for row in expense:
        for category in CATEGORIES:
            add(row.node_name, category.target_name, row.amount(category))

    return links


def build(
    rows: Sequence[Union[Row, Mapping[str, Any]]],
    *,
    strict: bool = False,
    revenue_count: int = REVENUE_ROW_COUNT,
) -> SankeyGraph:
    """
    Build the flow graph from either raw records (partitioned by position) or
    already-tagged Row objects (partitioned by Row.kind).
    """
    tagged = _coerce_rows(rows, revenue_count=revenue_count, strict=strict)
    nodes = build_nodes(tagged)
    links = build_links(tagged)
    revenue, expense = _split(tagged)
    logger.info(
        "Built sankey graph: %d nodes, %d links (%d revenue rows, %d expense rows)",
        len(nodes), len(links), len(revenue), len(expense),
    )
    return SankeyGraph(nodes=tuple(nodes), links=tuple(links))
