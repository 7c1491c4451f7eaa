"""Import graphs from delimited text (edge lists, adjacency lists, matrices).

Supported layouts (``Format``):
- EDGE_LIST / ADJACENCY_LIST (synonyms): each row is ``source;target1;target2;...``.
  Every target gets one edge from the source, in field order.
- MATRIX: an adjacency matrix. The first row is a header. Without node ids it is
  also the first matrix row and its width fixes the vertex count; vertices are
  named "1".."N". With ``Parameter.MATRIX_FORMAT_NODEID`` the first field of every
  row is a label: the header lists vertex names after a corner label, data rows
  start with a row label.

Matrix cells are decoded as follows:
- integer 0: an edge of weight 0.0 only when edge weights are enabled and
  ``MATRIX_FORMAT_ZERO_WHEN_NO_EDGE`` is not set, otherwise no edge;
- any other integer: an edge, weighted when edge weights are enabled;
- a floating point number (decimal or hexadecimal such as ``0x1p3``): a weighted
  edge, an error if weights are disabled;
- anything else: skipped.

Rows past the last vertex are accepted as long as none of their cells is an edge.

Vertices and edges are built by caller-supplied factories and pushed into a
caller-owned graph exposing ``add_vertex(v)``, ``add_edge(source, target, edge)``
and, for weighted graphs (``graph.weighted`` truthy), ``set_edge_weight(edge, w)``.
The graph signals rejections by raising ``ValueError``.

Every failure surfaces as ``CSVImportError`` with the underlying exception chained.
The first failure aborts the import; the graph is not rolled back.

Public entry points:
- CSVImporter(format, delimiter, vertex_factory, edge_factory).read(graph, source)
- load_csv_to_graph(source, graph=None, format="adjacency_list", **options) -> graph
"""

from __future__ import annotations

import os
import re
import warnings
from collections.abc import Callable, Iterable
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..core.graph import Edge, Graph
from ._tokenizer import CSVSyntaxError, check_delimiter, iter_records

DEFAULT_DELIMITER = ";"


class Format(Enum):
    EDGE_LIST = "EDGE_LIST"  # same as ADJACENCY_LIST
    ADJACENCY_LIST = "ADJACENCY_LIST"
    MATRIX = "MATRIX"


class Parameter(Enum):
    """Toggles honored by the ``MATRIX`` format only."""

    MATRIX_FORMAT_NODEID = "MATRIX_FORMAT_NODEID"
    MATRIX_FORMAT_EDGE_WEIGHTS = "MATRIX_FORMAT_EDGE_WEIGHTS"
    MATRIX_FORMAT_ZERO_WHEN_NO_EDGE = "MATRIX_FORMAT_ZERO_WHEN_NO_EDGE"


# ---------------------------
# Errors
# ---------------------------


class CSVImportError(Exception):
    """Raised by the importer for any failure; the cause is chained."""


class SemanticError(ValueError):
    """Well-formed text that does not describe a valid graph in the chosen format."""


class GraphConstraintViolation(ValueError):
    """The target graph or a factory rejected a vertex or an edge."""


# ---------------------------
# Configuration
# ---------------------------


def _default_vertex_factory(key: str, attributes: dict[str, str]):
    return key


def _coerce_format(fmt) -> Format:
    if isinstance(fmt, Format):
        return fmt
    if isinstance(fmt, str):
        try:
            return Format[fmt.strip().upper()]
        except KeyError:
            pass
    raise ValueError(f"unknown format {fmt!r}; expected one of {[f.name for f in Format]}")


@dataclass(frozen=True)
class ImportSettings:
    """Configuration of one import, fixed before the first row is read."""

    format: Format = Format.ADJACENCY_LIST
    delimiter: str = DEFAULT_DELIMITER
    parameters: frozenset = frozenset()
    vertex_factory: Callable[[str, dict], Any] = _default_vertex_factory
    edge_factory: Callable[[Any, Any, str, dict], Any] = Edge

    def __post_init__(self):
        object.__setattr__(self, "format", _coerce_format(self.format))
        object.__setattr__(self, "parameters", frozenset(self.parameters))
        check_delimiter(self.delimiter)
        for p in self.parameters:
            if not isinstance(p, Parameter):
                raise ValueError(f"not a Parameter: {p!r}")
        if not callable(self.vertex_factory):
            raise ValueError("vertex_factory must be callable")
        if not callable(self.edge_factory):
            raise ValueError("edge_factory must be callable")

    def has(self, parameter: Parameter) -> bool:
        return parameter in self.parameters


# ---------------------------
# Vertices and edges
# ---------------------------


@dataclass(frozen=True)
class EdgeRequest:
    source: Any
    target: Any
    label: str
    attributes: dict[str, str] = field(default_factory=dict)
    weight: float | None = None


def _edge_label(source, target) -> str:
    return f"e_{source}_{target}"


class VertexRegistry:
    """Maps vertex keys to vertices; each key is built and added at most once."""

    def __init__(self, graph, factory: Callable[[str, dict], Any]):
        self._graph = graph
        self._factory = factory
        self._vertices: dict[str, Any] = {}

    def resolve(self, key: str, name: str | None = None):
        """Return the vertex for ``key``, building it from ``name`` (or the key) if new."""
        try:
            return self._vertices[key]
        except KeyError:
            pass
        try:
            vertex = self._factory(key if name is None else name, {})
            self._graph.add_vertex(vertex)
        except ValueError as exc:
            raise GraphConstraintViolation(f"provided graph does not support input: {exc}") from exc
        self._vertices[key] = vertex
        return vertex

    def __contains__(self, key):
        return key in self._vertices

    def __len__(self):
        return len(self._vertices)


class EdgeMaterializer:
    """Turns ``EdgeRequest``s into edges on the target graph."""

    def __init__(self, graph, factory: Callable[[Any, Any, str, dict], Any]):
        self._graph = graph
        self._factory = factory
        self._weighted = bool(getattr(graph, "weighted", False))

    def materialize(self, request: EdgeRequest):
        try:
            edge = self._factory(
                request.source, request.target, request.label, dict(request.attributes)
            )
            self._graph.add_edge(request.source, request.target, edge)
            # unweighted graphs drop the weight
            if request.weight is not None and self._weighted:
                self._graph.set_edge_weight(edge, request.weight)
        except ValueError as exc:
            raise GraphConstraintViolation(f"provided graph does not support input: {exc}") from exc
        return edge


# ---------------------------
# Row handlers
# ---------------------------


class AdjacencyHandler:
    """Rows of the form ``source;target1;target2;...``."""

    def __init__(self, settings: ImportSettings, registry: VertexRegistry, edges: EdgeMaterializer):
        self._registry = registry
        self._edges = edges

    def handle_row(self, row: list[str]) -> None:
        if not row:
            raise SemanticError("empty record")
        if not row[0]:
            raise SemanticError("source vertex cannot be empty")
        source = self._registry.resolve(row[0])

        for key in row[1:]:
            if not key:
                raise SemanticError("target vertex cannot be empty")
            target = self._registry.resolve(key)
            self._edges.materialize(EdgeRequest(source, target, _edge_label(source, target)))


_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:NaN|Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?[fFdD]?)"
)
_HEX_FLOAT_RE = re.compile(
    r"[+-]?0[xX](?:[0-9a-fA-F]+\.?|[0-9a-fA-F]*\.[0-9a-fA-F]+)[pP][+-]?[0-9]+[fFdD]?"
)
_INT_MIN, _INT_MAX = -(2**31), 2**31 - 1


def _parse_int(cell: str) -> int | None:
    """32-bit signed integer; no surrounding whitespace."""
    if not _INT_RE.fullmatch(cell):
        return None
    value = int(cell)
    if not _INT_MIN <= value <= _INT_MAX:
        return None
    return value


def _parse_float(cell: str) -> float | None:
    s = cell.strip()
    if _HEX_FLOAT_RE.fullmatch(s):
        # binary exponent is mandatory, as in 0x1p3
        return float.fromhex(s.rstrip("fFdD"))
    if not _FLOAT_RE.fullmatch(s):
        return None
    if s[-1] in "fFdD":
        s = s[:-1]
    return float(s)


_NO_EDGE = object()


class MatrixHandler:
    """Adjacency matrix rows; see the module docstring for the cell rules.

    ``current`` is the 1-based index of the source vertex of the next data row.
    In plain mode the header row is also data row 1; in node-id mode it only
    names the vertices and does not advance ``current``.
    """

    def __init__(self, settings: ImportSettings, registry: VertexRegistry, edges: EdgeMaterializer):
        self._registry = registry
        self._edges = edges
        self.node_ids = settings.has(Parameter.MATRIX_FORMAT_NODEID)
        self.edge_weights = settings.has(Parameter.MATRIX_FORMAT_EDGE_WEIGHTS)
        self.zero_when_no_edge = settings.has(Parameter.MATRIX_FORMAT_ZERO_WHEN_NO_EDGE)
        self.vertex_count = None
        self.current = 1

    def handle_row(self, row: list[str]) -> None:
        if not row:
            raise SemanticError("empty record")
        if self.node_ids:
            row = row[1:]

        if self.vertex_count is None:
            self._read_header(row)
        else:
            self._read_entries(row)

    def _read_header(self, row: list[str]) -> None:
        if len(row) < 1:
            raise SemanticError("failed to parse header with nodes")

        if self.node_ids:
            for name in row:
                if not name:
                    raise SemanticError("node id cannot be empty")
            self.vertex_count = len(row)
            for j, name in enumerate(row, start=1):
                self._registry.resolve(str(j), name)
        else:
            self.vertex_count = len(row)
            for j in range(1, self.vertex_count + 1):
                self._registry.resolve(str(j))
            self._read_entries(row)

    def _read_entries(self, row: list[str]) -> None:
        n = self.vertex_count
        if len(row) != n:
            raise SemanticError(f"row contains fewer than {n} entries (found {len(row)})")
        cells = [(j, self._decode(cell)) for j, cell in enumerate(row, start=1)]
        cells = [(j, w) for j, w in cells if w is not _NO_EDGE]
        if cells and self.current > n:
            # rows past the last vertex are tolerated while they hold no edges
            raise SemanticError(f"matrix has more rows than vertices ({n})")

        source = self._registry.resolve(str(self.current)) if cells else None
        for j, weight in cells:
            target = self._registry.resolve(str(j))
            self._edges.materialize(
                EdgeRequest(source, target, _edge_label(source, target), weight=weight)
            )
        self.current += 1

    def _decode(self, cell: str):
        """Return the edge weight for ``cell`` (None = unweighted) or ``_NO_EDGE``."""
        as_int = _parse_int(cell)
        if as_int is not None:
            if as_int == 0:
                if self.edge_weights and not self.zero_when_no_edge:
                    return 0.0
                return _NO_EDGE
            return float(as_int) if self.edge_weights else None

        as_float = _parse_float(cell)
        if as_float is not None:
            if not self.edge_weights:
                raise SemanticError("double entry found when expecting no weights")
            return as_float

        return _NO_EDGE


_HANDLERS = {
    Format.EDGE_LIST: AdjacencyHandler,
    Format.ADJACENCY_LIST: AdjacencyHandler,
    Format.MATRIX: MatrixHandler,
}


def _select_handler(settings: ImportSettings, graph):
    """Build the one handler used for the whole import."""
    registry = VertexRegistry(graph, settings.vertex_factory)
    edges = EdgeMaterializer(graph, settings.edge_factory)
    return _HANDLERS[settings.format](settings, registry, edges)


# ---------------------------
# Importer
# ---------------------------


@contextmanager
def _open_text(source):
    if isinstance(source, (str, os.PathLike)):
        # newline="" keeps \r\n for the tokenizer
        with open(source, encoding="utf-8", newline="") as fh:
            yield fh
    else:
        yield source


class CSVImporter:
    """Reads graphs from delimited text.

    Parameters
    ----------
    format : Format or str, optional
        Input layout. Defaults to ``Format.ADJACENCY_LIST``.
    delimiter : str, optional
        Single-character field separator (default ``";"``).
    vertex_factory : callable, optional
        ``(key, attributes) -> vertex``. Defaults to returning the key.
    edge_factory : callable, optional
        ``(source, target, label, attributes) -> edge``. Defaults to ``Edge``.

    Notes
    -----
    The target graph must support what the input contains: self-loops,
    parallel edges or weights. Weights are only set on graphs whose
    ``weighted`` attribute is truthy.

    """

    def __init__(
        self,
        format=Format.ADJACENCY_LIST,
        delimiter: str = DEFAULT_DELIMITER,
        vertex_factory: Callable[[str, dict], Any] | None = None,
        edge_factory: Callable[[Any, Any, str, dict], Any] | None = None,
    ):
        self.format = format
        self._delimiter = check_delimiter(delimiter)
        self._vertex_factory = vertex_factory or _default_vertex_factory
        self._edge_factory = edge_factory or Edge
        self._parameters: set[Parameter] = set()

    @property
    def format(self) -> Format:
        return self._format

    @format.setter
    def format(self, value) -> None:
        self._format = _coerce_format(value)

    @property
    def delimiter(self) -> str:
        return self._delimiter

    def is_parameter(self, parameter: Parameter) -> bool:
        return parameter in self._parameters

    def set_parameter(self, parameter: Parameter, value: bool) -> None:
        if not isinstance(parameter, Parameter):
            raise ValueError(f"not a Parameter: {parameter!r}")
        if value:
            self._parameters.add(parameter)
        else:
            self._parameters.discard(parameter)

    def settings(self) -> ImportSettings:
        """Snapshot of the current configuration."""
        return ImportSettings(
            format=self._format,
            delimiter=self._delimiter,
            parameters=frozenset(self._parameters),
            vertex_factory=self._vertex_factory,
            edge_factory=self._edge_factory,
        )

    def read(self, graph, source) -> None:
        """Import ``source`` (path or text stream) into ``graph``.

        Raises
        ------
        CSVImportError
            On I/O errors, malformed text, rows that violate the format,
            or vertices/edges the graph rejects.

        """
        settings = self.settings()
        _warn_ignored_parameters(settings)
        _run_import(settings, graph, source)


def _warn_ignored_parameters(settings: ImportSettings) -> None:
    if settings.format is not Format.MATRIX and settings.parameters:
        warnings.warn(
            f"matrix parameters are ignored for format {settings.format.name}: "
            + ", ".join(sorted(p.name for p in settings.parameters)),
            stacklevel=3,
        )


def _run_import(settings: ImportSettings, graph, source) -> None:
    handler = _select_handler(settings, graph)
    record = None
    try:
        with _open_text(source) as stream:
            for record in iter_records(stream, settings.delimiter):
                handler.handle_row(record.fields)
    except CSVSyntaxError as exc:
        raise CSVImportError(f"Failed to import CSV graph: {exc}") from exc
    except (SemanticError, GraphConstraintViolation) as exc:
        raise CSVImportError(f"Failed to import CSV graph: line {record.line}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise CSVImportError(f"Failed to import CSV graph: {exc}") from exc


def load_csv_to_graph(
    source,
    graph=None,
    format="adjacency_list",
    delimiter: str = DEFAULT_DELIMITER,
    node_id: bool = False,
    edge_weights: bool = False,
    zero_when_no_edge: bool = False,
    vertex_factory=None,
    edge_factory=None,
):
    """Load a delimited-text graph and return the populated graph.

    Parameters
    ----------
    source : str | os.PathLike | text stream
        Input path (read as UTF-8) or an open text stream.
    graph : object, optional
        Target graph. If None, a new directed ``Graph`` is created; it is
        weighted when ``edge_weights`` is True.
    format : Format or str, optional
        ``"edge_list"``, ``"adjacency_list"`` or ``"matrix"``.
    delimiter : str, optional
        Field separator.
    node_id, edge_weights, zero_when_no_edge : bool, optional
        Matrix toggles (``Parameter.MATRIX_FORMAT_*``).
    vertex_factory, edge_factory : callable, optional
        See ``CSVImporter``.

    Returns
    -------
    object
        The populated graph.

    """
    importer = CSVImporter(format, delimiter, vertex_factory, edge_factory)
    toggles: Iterable[tuple[Parameter, bool]] = (
        (Parameter.MATRIX_FORMAT_NODEID, node_id),
        (Parameter.MATRIX_FORMAT_EDGE_WEIGHTS, edge_weights),
        (Parameter.MATRIX_FORMAT_ZERO_WHEN_NO_EDGE, zero_when_no_edge),
    )
    for p, on in toggles:
        importer.set_parameter(p, on)

    if graph is None:
        graph = Graph(directed=True, weighted=edge_weights, allow_multi_edges=True)

    settings = importer.settings()
    _warn_ignored_parameters(settings)
    _run_import(settings, graph, source)
    return graph
