"""Pattern graph model and validation.

A PatternGraph is the static, read-only description of an agent pattern:
typed nodes plus directed edges in declaration order.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from patternplay.core.types import Edge, Node, NodeType
from patternplay.errors.exceptions import (
    AmbiguousInputNodeError,
    DuplicateIdentifierError,
    EmptyGraphError,
    MissingInputNodeError,
    UnknownNodeReferenceError,
)


class PatternGraph(BaseModel):
    """A named directed graph template for one agent-architecture idiom.

    Example:
        >>> graph = PatternGraph(
        ...     id="chain",
        ...     name="Prompt Chaining",
        ...     nodes=[
        ...         Node(id="in", type=NodeType.INPUT, label="Input"),
        ...         Node(id="llm", type=NodeType.LLM, label="LLM"),
        ...         Node(id="out", type=NodeType.OUTPUT, label="Output"),
        ...     ],
        ...     edges=[
        ...         Edge(id="e1", source="in", target="llm"),
        ...         Edge(id="e2", source="llm", target="out"),
        ...     ],
        ... )
        >>> graph.validate_structure()
    """

    id: str
    name: str = ""
    description: str | None = None
    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def validate_structure(self) -> Node:
        """Check the graph can be traversed and return its input node.

        Raises:
            EmptyGraphError: If the graph has no nodes.
            DuplicateIdentifierError: If node or edge ids repeat.
            UnknownNodeReferenceError: If an edge points at a missing node.
            MissingInputNodeError: If there is no input node.
            AmbiguousInputNodeError: If there is more than one input node.
        """
        if not self.nodes:
            raise EmptyGraphError(self.id)

        seen: set[str] = set()
        for node in self.nodes:
            if node.id in seen:
                raise DuplicateIdentifierError("node", node.id)
            seen.add(node.id)

        edge_ids: set[str] = set()
        for edge in self.edges:
            if edge.id in edge_ids:
                raise DuplicateIdentifierError("edge", edge.id)
            edge_ids.add(edge.id)
            for endpoint in (edge.source, edge.target):
                if endpoint not in seen:
                    raise UnknownNodeReferenceError(edge.id, endpoint)

        inputs = [n for n in self.nodes if n.type == NodeType.INPUT]
        if not inputs:
            raise MissingInputNodeError(self.id)
        if len(inputs) > 1:
            raise AmbiguousInputNodeError([n.id for n in inputs])

        return inputs[0]

    def get_node(self, node_id: str) -> Node | None:
        """Look up a node by id."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> Edge | None:
        """Look up an edge by id."""
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def outgoing(self, node_id: str) -> list[Edge]:
        """Edges leaving a node, in declaration order."""
        return [e for e in self.edges if e.source == node_id]

    def failure_edge(self, node_id: str, keyword: str = "fail") -> Edge | None:
        """First outgoing edge whose target label names a failure handler."""
        keyword = keyword.lower()
        for edge in self.outgoing(node_id):
            target = self.get_node(edge.target)
            if target is not None and keyword in target.label.lower():
                return edge
        return None

    @property
    def node_ids(self) -> list[str]:
        return [n.id for n in self.nodes]

    @classmethod
    def from_flow_dict(cls, data: dict[str, Any]) -> PatternGraph:
        """Build a graph from the rendering widget's node/edge dictionaries.

        Nodes are expected as ``{"id", "data": {"label", "nodeType"}}`` and
        edges as ``{"id", "source", "target", "label"?}``. Extra keys such as
        positions and styles are ignored.
        """
        nodes = []
        for raw in data.get("nodes", []):
            node_data = raw.get("data") or {}
            nodes.append(
                Node(
                    id=raw["id"],
                    type=NodeType.parse(node_data.get("nodeType") or raw.get("type")),
                    label=node_data.get("label") or raw.get("label") or raw["id"],
                    description=node_data.get("description"),
                )
            )

        edges = []
        for idx, raw in enumerate(data.get("edges", [])):
            label = raw.get("label")
            edges.append(
                Edge(
                    id=raw.get("id") or f"e{idx}-{raw['source']}-{raw['target']}",
                    source=raw["source"],
                    target=raw["target"],
                    label=label if isinstance(label, str) else None,
                )
            )

        return cls(
            id=data.get("id", "pattern"),
            name=data.get("name", ""),
            description=data.get("description"),
            nodes=nodes,
            edges=edges,
        )
