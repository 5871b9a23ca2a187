"""Road network graph built from OSM nodes and ways."""

from __future__ import annotations

from dataclasses import dataclass, field, replace


@dataclass
class RoadNode:
    """A road junction or shape point identified by its OSM id."""

    id: int = 0
    lat: float = 0.0
    lon: float = 0.0
    outgoing_edges: list[int] = field(default_factory=list)


@dataclass
class RoadEdge:
    """A directed road segment between two node indices."""

    id: int = 0
    from_node: int = -1
    to_node: int = -1
    length_meters: float = 0.0
    oneway: bool = False
    max_speed_kmh: float = 50.0
    highway_type: str = ""


class RoadGraph:
    """Nodes and directed edges, indexed both by position and by OSM id."""

    def __init__(self) -> None:
        self._nodes: list[RoadNode] = []
        self._edges: list[RoadEdge] = []
        self._node_index_by_id: dict[int, int] = {}
        self._edge_index_by_id: dict[int, int] = {}

    def add_node(self, node: RoadNode) -> int:
        """Store a copy of ``node`` and return its index; known ids keep their index."""
        existing = self._node_index_by_id.get(node.id)
        if existing is not None:
            return existing
        index = len(self._nodes)
        self._nodes.append(replace(node, outgoing_edges=list(node.outgoing_edges)))
        self._node_index_by_id[node.id] = index
        return index

    def add_edge(self, edge: RoadEdge) -> int:
        """Store a copy of ``edge`` and return its index; known ids keep their index."""
        existing = self._edge_index_by_id.get(edge.id)
        if existing is not None:
            return existing
        index = len(self._edges)
        if 0 <= edge.from_node < len(self._nodes):
            self._nodes[edge.from_node].outgoing_edges.append(index)
        self._edges.append(replace(edge))
        self._edge_index_by_id[edge.id] = index
        return index

    def node_by_id(self, osm_id: int) -> RoadNode | None:
        """Return the node with this OSM id, or None."""
        index = self._node_index_by_id.get(osm_id)
        return None if index is None else self._nodes[index]

    def edge_by_id(self, osm_id: int) -> RoadEdge | None:
        """Return the edge with this id, or None."""
        index = self._edge_index_by_id.get(osm_id)
        return None if index is None else self._edges[index]

    def node_index(self, osm_id: int) -> int:
        """Return the index of the node with this OSM id, or -1."""
        return self._node_index_by_id.get(osm_id, -1)

    def nodes(self) -> tuple[RoadNode, ...]:
        """All nodes in index order."""
        return tuple(self._nodes)

    def edges(self) -> tuple[RoadEdge, ...]:
        """All edges in index order."""
        return tuple(self._edges)

    def clear(self) -> None:
        """Remove every node and edge."""
        self._nodes.clear()
        self._edges.clear()
        self._node_index_by_id.clear()
        self._edge_index_by_id.clear()