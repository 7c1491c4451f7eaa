from __future__ import annotations

try:
    import networkx as nx
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "Optional dependency 'networkx' is not installed. "
        "Install with: pip install csvgraph[networkx]"
    ) from e


class NetworkXTarget:
    """Expose a NetworkX graph as a CSV import target.

    Parameters
    ----------
    G : networkx.Graph, optional
        Graph to populate. Defaults to a new ``networkx.DiGraph``.
    weighted : bool, optional
        Store imported weights in the ``weight`` edge attribute.
    allow_self_loops : bool, optional
        Reject loops when False.

    Notes
    -----
    - Simple graphs reject a second edge between the same endpoints.
    - Multigraphs key parallel edges by ``str(edge)``, or a fresh key when that
      one is taken; the edge object itself is kept in the ``edge`` data attribute.
    - Rejections are raised as ``ValueError``.

    """

    def __init__(self, G=None, weighted: bool = False, allow_self_loops: bool = True):
        self.G = nx.DiGraph() if G is None else G
        self.weighted = weighted
        self.allow_self_loops = allow_self_loops
        self._endpoints = {}  # edge -> (u, v, key)

    def add_vertex(self, vertex):
        if vertex in self.G:
            raise ValueError(f"vertex {vertex!r} already in graph")
        self.G.add_node(vertex)
        return vertex

    def add_edge(self, source, target, edge):
        for v in (source, target):
            if v not in self.G:
                raise ValueError(f"no such vertex: {v!r}")
        if edge in self._endpoints:
            raise ValueError(f"edge {edge} already in graph")
        if source == target and not self.allow_self_loops:
            raise ValueError("loops not allowed")

        if self.G.is_multigraph():
            key = str(edge)
            if self.G.has_edge(source, target, key):
                key = None  # same label: let networkx pick a fresh key
            key = self.G.add_edge(source, target, key=key, edge=edge)
        else:
            if self.G.has_edge(source, target):
                raise ValueError(f"multiple edges not allowed between {source!r} and {target!r}")
            self.G.add_edge(source, target, edge=edge)
            key = None
        self._endpoints[edge] = (source, target, key)
        return edge

    def set_edge_weight(self, edge, weight: float):
        if not self.weighted:
            raise ValueError("graph is not weighted")
        try:
            u, v, key = self._endpoints[edge]
        except KeyError:
            raise ValueError(f"no such edge: {edge}") from None
        data = self.G.edges[u, v, key] if key is not None else self.G.edges[u, v]
        data["weight"] = float(weight)

    def to_networkx(self):
        return self.G


def from_csv(source, format="adjacency_list", G=None, weighted=None, **options):
    """Import delimited text straight into a NetworkX graph.

    Parameters
    ----------
    source : str | os.PathLike | text stream
        Input passed to ``load_csv_to_graph``.
    format : Format or str, optional
        Input layout.
    G : networkx.Graph, optional
        Graph to populate; a new ``MultiDiGraph`` by default.
    weighted : bool, optional
        Defaults to the ``edge_weights`` option.
    **options
        Forwarded to ``load_csv_to_graph``.

    Returns
    -------
    networkx.Graph

    """
    from ..io.csv_io import load_csv_to_graph

    if weighted is None:
        weighted = bool(options.get("edge_weights", False))
    target = NetworkXTarget(nx.MultiDiGraph() if G is None else G, weighted=weighted)
    load_csv_to_graph(source, graph=target, format=format, **options)
    return target.to_networkx()
