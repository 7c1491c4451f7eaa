from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import polars as pl


@dataclass(eq=False)
class Edge:
    """Default edge object built by the CSV importer.

    Equality is identity so parallel edges with the same label stay distinct.
    """

    source: Any
    target: Any
    label: str
    attributes: dict[str, str] = field(default_factory=dict)

    def __str__(self):
        return self.label


class Graph:
    """Mutable in-memory graph used as the default import target.

    Vertices are arbitrary hashable objects; edges are objects (``Edge`` by
    default) registered against a (source, target) pair.

    Parameters
    ----------
    directed : bool, optional
        Whether ``(u, v)`` and ``(v, u)`` are distinct endpoint pairs.
    weighted : bool, optional
        Whether the graph stores edge weights. Unweighted graphs reject
        ``set_edge_weight`` and report 1.0 for every edge.
    allow_self_loops : bool, optional
        Accept edges whose source equals their target.
    allow_multi_edges : bool, optional
        Accept more than one edge per endpoint pair.

    Notes
    -----
    - Every rejection is a ``ValueError`` so importers can translate it.
    - Edge bookkeeping follows ``edge_definitions`` (edge -> (source, target))
      and ``edge_weights`` (edge -> weight).

    """

    def __init__(
        self,
        directed: bool = True,
        weighted: bool = False,
        allow_self_loops: bool = True,
        allow_multi_edges: bool = False,
    ):
        self.directed = directed
        self.weighted = weighted
        self.allow_self_loops = allow_self_loops
        self.allow_multi_edges = allow_multi_edges

        self._vertices = {}  # vertex -> None (insertion ordered set)
        self.edge_definitions = {}  # edge -> (source, target)
        self.edge_weights = {}  # edge -> weight (weighted graphs only)
        self._pairs = {}  # endpoint pair -> [edge, ...]

    # Construction

    def add_vertex(self, vertex):
        """Add a vertex.

        Raises
        ------
        ValueError
            If the vertex is ``None`` or already present.

        """
        if vertex is None:
            raise ValueError("vertex cannot be None")
        if vertex in self._vertices:
            raise ValueError(f"vertex {vertex!r} already in graph")
        self._vertices[vertex] = None
        return vertex

    def add_edge(self, source, target, edge):
        """Register ``edge`` between ``source`` and ``target``.

        Parameters
        ----------
        source, target
            Endpoints; both must already be vertices of the graph.
        edge
            Hashable edge object, unique within the graph.

        Returns
        -------
        object
            The edge (echoed).

        Raises
        ------
        ValueError
            On unknown endpoints, a repeated edge object, a self-loop when
            ``allow_self_loops`` is False, or a parallel edge when
            ``allow_multi_edges`` is False.

        """
        for v in (source, target):
            if v not in self._vertices:
                raise ValueError(f"no such vertex: {v!r}")
        if edge in self.edge_definitions:
            raise ValueError(f"edge {edge} already in graph")
        if source == target and not self.allow_self_loops:
            raise ValueError("loops not allowed")
        key = self._pair(source, target)
        bucket = self._pairs.setdefault(key, [])
        if bucket and not self.allow_multi_edges:
            raise ValueError(f"multiple edges not allowed between {source!r} and {target!r}")

        bucket.append(edge)
        self.edge_definitions[edge] = (source, target)
        if self.weighted:
            self.edge_weights[edge] = 1.0
        return edge

    def set_edge_weight(self, edge, weight: float):
        if not self.weighted:
            raise ValueError("graph is not weighted")
        if edge not in self.edge_definitions:
            raise ValueError(f"no such edge: {edge}")
        self.edge_weights[edge] = float(weight)

    def get_edge_weight(self, edge) -> float:
        if edge not in self.edge_definitions:
            raise ValueError(f"no such edge: {edge}")
        return self.edge_weights.get(edge, 1.0)

    # Queries

    def _pair(self, source, target):
        if self.directed:
            return (source, target)
        return frozenset((source, target))

    def has_vertex(self, vertex) -> bool:
        return vertex in self._vertices

    def has_edge(self, source, target) -> bool:
        return bool(self._pairs.get(self._pair(source, target)))

    def get_edges(self, source, target) -> list:
        """All edges between ``source`` and ``target`` in insertion order."""
        return list(self._pairs.get(self._pair(source, target), ()))

    def vertices(self) -> list:
        return list(self._vertices)

    def edges(self) -> list:
        return list(self.edge_definitions)

    def number_of_vertices(self) -> int:
        return len(self._vertices)

    def number_of_edges(self) -> int:
        return len(self.edge_definitions)

    # Views

    def vertices_view(self):
        """Polars DataFrame with one ``vertex_id`` row per vertex."""
        return pl.DataFrame(
            {"vertex_id": [str(v) for v in self._vertices]}, schema={"vertex_id": pl.Utf8}
        )

    def edges_view(self):
        """Build a Polars DataFrame of edges.

        Returns
        -------
        polars.DataFrame
            Columns: ``edge_id`` (``str(edge)``), ``source``, ``target``,
            ``weight`` (1.0 on unweighted graphs).

        """
        schema = {
            "edge_id": pl.Utf8,
            "source": pl.Utf8,
            "target": pl.Utf8,
            "weight": pl.Float64,
        }
        eids, src, tgt, w = [], [], [], []
        for e, (s, t) in self.edge_definitions.items():
            eids.append(str(e))
            src.append(str(s))
            tgt.append(str(t))
            w.append(self.edge_weights.get(e, 1.0))
        return pl.DataFrame(
            {"edge_id": eids, "source": src, "target": tgt, "weight": w}, schema=schema
        )

    def __len__(self):
        return len(self._vertices)

    def __repr__(self):
        kind = "directed" if self.directed else "undirected"
        return (
            f"Graph({kind}, weighted={self.weighted}, "
            f"vertices={self.number_of_vertices()}, edges={self.number_of_edges()})"
        )
