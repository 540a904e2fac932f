"""Comparison of two graph snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field

from garfield.graph import Edge, GraphData, Node


@dataclass
class NodeChange:
    """A node that appeared in or vanished from the graph."""

    id: str
    label: str


@dataclass
class EdgeChange:
    """An edge that appeared in or vanished from the graph."""

    source: str
    target: str
    relation: str
    confidence: str


@dataclass
class GraphDiff:
    """Nodes and edges added and removed between two snapshots."""

    new_nodes: list[NodeChange] = field(default_factory=list)
    removed_nodes: list[NodeChange] = field(default_factory=list)
    new_edges: list[EdgeChange] = field(default_factory=list)
    removed_edges: list[EdgeChange] = field(default_factory=list)
    summary: str = "no changes"


def _edge_key(edge: Edge) -> tuple[str, str, str]:
    return edge.source, edge.target, edge.relation


def _missing_nodes(graph: GraphData, other_ids: set[str]) -> list[NodeChange]:
    """Nodes of graph whose id is absent from other_ids, first occurrence only."""
    seen: set[str] = set()
    changes: list[NodeChange] = []
    for node in graph.nodes:
        if node.id in other_ids or node.id in seen:
            continue
        seen.add(node.id)
        changes.append(NodeChange(id=node.id, label=node.label))
    return changes


def _missing_edges(
    graph: GraphData, other_keys: set[tuple[str, str, str]]
) -> list[EdgeChange]:
    """Edges of graph whose key is absent from other_keys, first occurrence only."""
    seen: set[tuple[str, str, str]] = set()
    changes: list[EdgeChange] = []
    for edge in graph.links:
        key = _edge_key(edge)
        if key in other_keys or key in seen:
            continue
        seen.add(key)
        changes.append(
            EdgeChange(
                source=edge.source,
                target=edge.target,
                relation=edge.relation,
                confidence=edge.confidence.name.capitalize(),
            )
        )
    return changes


def _count(n: int, noun: str, suffix: str) -> str:
    plural = "" if n == 1 else "s"
    return f"{n} {noun}{plural}{suffix}"


def graph_diff(old_graph: GraphData, new_graph: GraphData) -> GraphDiff:
    """Describe what was added and removed going from old_graph to new_graph."""
    old_ids = {n.id for n in old_graph.nodes}
    new_ids = {n.id for n in new_graph.nodes}
    old_keys = {_edge_key(e) for e in old_graph.links}
    new_keys = {_edge_key(e) for e in new_graph.links}

    new_nodes = _missing_nodes(new_graph, old_ids)
    removed_nodes = _missing_nodes(old_graph, new_ids)
    new_edges = _missing_edges(new_graph, old_keys)
    removed_edges = _missing_edges(old_graph, new_keys)

    parts: list[str] = []
    if new_nodes:
        parts.append(_count(len(new_nodes), "new node", ""))
    if new_edges:
        parts.append(_count(len(new_edges), "new edge", ""))
    if removed_nodes:
        parts.append(_count(len(removed_nodes), "node", " removed"))
    if removed_edges:
        parts.append(_count(len(removed_edges), "edge", " removed"))

    return GraphDiff(
        new_nodes=new_nodes,
        removed_nodes=removed_nodes,
        new_edges=new_edges,
        removed_edges=removed_edges,
        summary=", ".join(parts) if parts else "no changes",
    )