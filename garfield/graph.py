"""Graph data model and JSON import/export."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any


class Confidence(str, Enum):
    """How firmly an edge is backed by the source material."""

    EXTRACTED = "EXTRACTED"
    INFERRED = "INFERRED"
    AMBIGUOUS = "AMBIGUOUS"

    @classmethod
    def parse(cls, value: "str | Confidence") -> "Confidence":
        if isinstance(value, Confidence):
            return value
        return cls(str(value).upper())


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Node:
    """An entity in the knowledge graph."""

    id: str
    label: str
    source_file: str = ""
    source_location: str = ""
    community: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "source_file": self.source_file,
            "source_location": self.source_location,
            "community": self.community,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Node":
        community = data.get("community")
        return cls(
            id=data["id"],
            label=data.get("label", data["id"]),
            source_file=data.get("source_file", "") or "",
            source_location=data.get("source_location", "") or "",
            community=int(community) if community is not None else None,
        )


@dataclass
class Edge:
    """A directed relation between two nodes."""

    source: str
    target: str
    relation: str
    confidence: Confidence = Confidence.EXTRACTED
    source_file: str = ""
    source_location: str = ""

    def __post_init__(self) -> None:
        self.confidence = Confidence.parse(self.confidence)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "relation": self.relation,
            "confidence": self.confidence.value,
            "source_file": self.source_file,
            "source_location": self.source_location,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Edge":
        return cls(
            source=data["source"],
            target=data["target"],
            relation=data.get("relation", ""),
            confidence=Confidence.parse(data.get("confidence", Confidence.EXTRACTED)),
            source_file=data.get("source_file", "") or "",
            source_location=data.get("source_location", "") or "",
        )


@dataclass
class Hyperedge:
    """A relation that groups several nodes at once."""

    id: str
    label: str = ""
    nodes: list[str] = field(default_factory=list)
    relation: str = ""
    source_file: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "nodes": list(self.nodes),
            "relation": self.relation,
            "source_file": self.source_file,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Hyperedge":
        return cls(
            id=data["id"],
            label=data.get("label", ""),
            nodes=list(data.get("nodes", [])),
            relation=data.get("relation", ""),
            source_file=data.get("source_file", "") or "",
        )


@dataclass
class GraphMetadata:
    """Summary counts and creation time of a graph."""

    total_nodes: int = 0
    total_edges: int = 0
    communities: int = 0
    created: str = field(default_factory=_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_nodes": self.total_nodes,
            "total_edges": self.total_edges,
            "communities": self.communities,
            "created": self.created,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GraphMetadata":
        return cls(
            total_nodes=int(data.get("total_nodes", 0)),
            total_edges=int(data.get("total_edges", 0)),
            communities=int(data.get("communities", 0)),
            created=data.get("created") or _now_iso(),
        )


@dataclass
class GraphData:
    """A complete knowledge graph: nodes, links, hyperedges and metadata."""

    nodes: list[Node] = field(default_factory=list)
    links: list[Edge] = field(default_factory=list)
    metadata: GraphMetadata | None = None
    hyperedges: list[Hyperedge] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.metadata is None:
            self.metadata = GraphMetadata(len(self.nodes), len(self.links), 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [e.to_dict() for e in self.links],
            "metadata": self.metadata.to_dict(),
            "hyperedges": [h.to_dict() for h in self.hyperedges],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GraphData":
        if not isinstance(data, dict):
            raise ValueError("graph data must be a JSON object")
        nodes = [Node.from_dict(n) for n in data.get("nodes", [])]
        links = [Edge.from_dict(e) for e in data.get("links", [])]
        hyperedges = [Hyperedge.from_dict(h) for h in data.get("hyperedges", [])]
        raw_meta = data.get("metadata")
        metadata = GraphMetadata.from_dict(raw_meta) if raw_meta is not None else None
        return cls(nodes=nodes, links=links, metadata=metadata, hyperedges=hyperedges)


@dataclass
class ExtractionResult:
    """Nodes, edges and hyperedges extracted from one or more files."""

    nodes: list[Node] = field(default_factory=list)
    links: list[Edge] = field(default_factory=list)
    hyperedges: list[Hyperedge] = field(default_factory=list)

    def add_node(self, node: Node) -> None:
        self.nodes.append(node)

    def add_edge(self, edge: Edge) -> None:
        self.links.append(edge)


def to_json(graph: GraphData, output_path: str | Path) -> None:
    """Write the graph as pretty-printed JSON, creating parent directories."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(graph.to_dict(), indent=2), encoding="utf-8")
    print(f"Exported graph to {output_path}")


def from_json(path: str | Path) -> GraphData:
    """Load a graph from a JSON file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return GraphData.from_dict(data)


def export_stats(graph: GraphData, output_path: str | Path) -> None:
    """Write node, edge and confidence counts of the graph as JSON."""
    counts = {c: 0 for c in Confidence}
    for edge in graph.links:
        counts[edge.confidence] += 1
    stats = {
        "total_nodes": len(graph.nodes),
        "total_edges": len(graph.links),
        "communities": graph.metadata.communities,
        "extracted_edges": counts[Confidence.EXTRACTED],
        "inferred_edges": counts[Confidence.INFERRED],
        "ambiguous_edges": counts[Confidence.AMBIGUOUS],
        "created": graph.metadata.created,
    }
    Path(output_path).write_text(json.dumps(stats, indent=2), encoding="utf-8")