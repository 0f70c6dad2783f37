"""Map query facade and an in-memory pose graph implementing it."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Protocol, Sequence

import numpy as np

from .candidates import EdgeId, VertexId

logger = logging.getLogger(__name__)


class MapConsistencyError(RuntimeError):
    """Raised when the pose graph contradicts itself.

    This signals corrupted collaborator state; callers are not expected to
    recover from it.
    """


class EdgeType(Enum):
    ODOMETRY = "odometry"
    LOOP_CLOSURE = "loop_closure"
    WHEEL_ODOMETRY = "wheel_odometry"


@dataclass
class Vertex:
    vertex_id: VertexId
    position: np.ndarray
    mission_id: Optional[str] = None


@dataclass
class Edge:
    edge_id: EdgeId
    edge_type: EdgeType
    from_vertex: VertexId
    to_vertex: VertexId


@dataclass
class LoopClosureEdge(Edge):
    """Directed loop-closure constraint with its switch-variable quality."""

    switch_variable: float = 1.0
    T_A_B: np.ndarray = field(default_factory=lambda: np.eye(4))


class MapQueryFacade(Protocol):
    """Read/write access to the pose graph used by the selection stages."""

    def has_vertex(self, vertex_id: VertexId) -> bool:
        ...

    def get_vertex_position(self, vertex_id: VertexId) -> np.ndarray:
        """Return the vertex position in the map frame as a ``(3,)`` array."""

    def get_outgoing_edges_of_type(self, vertex_id: VertexId, edge_type: EdgeType) -> List[EdgeId]:
        ...

    def has_edge(self, edge_id: EdgeId) -> bool:
        ...

    def get_edge_as_loop_closure(self, edge_id: EdgeId) -> LoopClosureEdge:
        ...

    def remove_edge(self, edge_id: EdgeId) -> None:
        """Remove ``edge_id``; raises :class:`MapConsistencyError` if absent."""


class PoseGraphMap:
    """Small in-memory pose graph keyed by vertex and edge ids."""

    def __init__(self) -> None:
        self._vertices: Dict[VertexId, Vertex] = {}
        self._edges: Dict[EdgeId, Edge] = {}
        self._outgoing: Dict[VertexId, List[EdgeId]] = {}
        self._edge_counter = itertools.count()

    # Vertices -----------------------------------------------------------

    def add_vertex(
        self,
        vertex_id: VertexId,
        position: Sequence[float],
        mission_id: Optional[str] = None,
    ) -> Vertex:
        if vertex_id in self._vertices:
            raise MapConsistencyError(f"Vertex '{vertex_id}' already exists")
        p = np.asarray(position, dtype=float).reshape(3)
        vertex = Vertex(vertex_id, p, mission_id)
        self._vertices[vertex_id] = vertex
        self._outgoing[vertex_id] = []
        return vertex

    def has_vertex(self, vertex_id: VertexId) -> bool:
        return vertex_id in self._vertices

    def get_vertex(self, vertex_id: VertexId) -> Vertex:
        try:
            return self._vertices[vertex_id]
        except KeyError as exc:
            raise MapConsistencyError(f"Unknown vertex '{vertex_id}'") from exc

    def get_vertex_position(self, vertex_id: VertexId) -> np.ndarray:
        return self.get_vertex(vertex_id).position

    def vertices(self) -> Iterator[Vertex]:
        return iter(self._vertices.values())

    @property
    def num_vertices(self) -> int:
        return len(self._vertices)

    # Edges --------------------------------------------------------------

    def _next_edge_id(self) -> EdgeId:
        while True:
            edge_id = f"e{next(self._edge_counter)}"
            if edge_id not in self._edges:
                return edge_id

    def _insert_edge(self, edge: Edge) -> Edge:
        if edge.edge_id in self._edges:
            raise MapConsistencyError(f"Edge '{edge.edge_id}' already exists")
        for vertex_id in (edge.from_vertex, edge.to_vertex):
            if vertex_id not in self._vertices:
                raise MapConsistencyError(
                    f"Edge '{edge.edge_id}' references unknown vertex '{vertex_id}'"
                )
        self._edges[edge.edge_id] = edge
        self._outgoing[edge.from_vertex].append(edge.edge_id)
        return edge

    def add_edge(
        self,
        from_vertex: VertexId,
        to_vertex: VertexId,
        edge_type: EdgeType = EdgeType.ODOMETRY,
        edge_id: Optional[EdgeId] = None,
    ) -> Edge:
        if edge_type is EdgeType.LOOP_CLOSURE:
            return self.add_loop_closure_edge(from_vertex, to_vertex, edge_id=edge_id)
        if edge_id is None:
            edge_id = self._next_edge_id()
        return self._insert_edge(Edge(edge_id, edge_type, from_vertex, to_vertex))

    def add_loop_closure_edge(
        self,
        from_vertex: VertexId,
        to_vertex: VertexId,
        switch_variable: float = 1.0,
        edge_id: Optional[EdgeId] = None,
        T_A_B: Optional[np.ndarray] = None,
    ) -> LoopClosureEdge:
        edge = LoopClosureEdge(
            edge_id if edge_id is not None else self._next_edge_id(),
            EdgeType.LOOP_CLOSURE,
            from_vertex,
            to_vertex,
            switch_variable=float(switch_variable),
            T_A_B=np.eye(4) if T_A_B is None else np.asarray(T_A_B, dtype=float),
        )
        self._insert_edge(edge)
        return edge

    def has_edge(self, edge_id: EdgeId) -> bool:
        return edge_id in self._edges

    def get_edge(self, edge_id: EdgeId) -> Edge:
        try:
            return self._edges[edge_id]
        except KeyError as exc:
            raise MapConsistencyError(f"Unknown edge '{edge_id}'") from exc

    def get_edge_as_loop_closure(self, edge_id: EdgeId) -> LoopClosureEdge:
        edge = self.get_edge(edge_id)
        if not isinstance(edge, LoopClosureEdge):
            raise MapConsistencyError(
                f"Edge '{edge_id}' has type {edge.edge_type.value}, expected loop closure"
            )
        return edge

    def get_outgoing_edges_of_type(self, vertex_id: VertexId, edge_type: EdgeType) -> List[EdgeId]:
        if vertex_id not in self._outgoing:
            raise MapConsistencyError(f"Unknown vertex '{vertex_id}'")
        # Dangling ids have no type to filter on; they are passed through so the
        # caller's has_edge check reports them.
        return [
            edge_id
            for edge_id in self._outgoing[vertex_id]
            if edge_id not in self._edges or self._edges[edge_id].edge_type is edge_type
        ]

    def edges_of_type(self, edge_type: EdgeType) -> List[Edge]:
        return [edge for edge in self._edges.values() if edge.edge_type is edge_type]

    def remove_edge(self, edge_id: EdgeId) -> None:
        edge = self._edges.pop(edge_id, None)
        if edge is None:
            raise MapConsistencyError(f"Cannot remove missing edge '{edge_id}'")
        self._outgoing[edge.from_vertex].remove(edge_id)
        logger.debug("Removed %s edge %s (%s -> %s)", edge.edge_type.value, edge_id, edge.from_vertex, edge.to_vertex)

    @property
    def num_edges(self) -> int:
        return len(self._edges)
