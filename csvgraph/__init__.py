"""csvgraph: graphs from delimited text, single import."""

from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version
from typing import Any

# Lazily exposed submodules (imported on first attribute access)
_lazy_submodules = {
    "adapters": "csvgraph.adapters",
    "io": "csvgraph.io",
    "core": "csvgraph.core",
    "csvio": "csvgraph.io.csv_io",
    "networkx": "csvgraph.adapters.networkx_adapter",
}

# Curated top-level symbols (lazy). name -> (module, attribute)
_lazy_symbols: dict[str, tuple[str, str]] = {
    # Core
    "Graph": ("csvgraph.core.graph", "Graph"),
    "Edge": ("csvgraph.core.graph", "Edge"),
    # CSV import
    "CSVImporter": ("csvgraph.io.csv_io", "CSVImporter"),
    "CSVImportError": ("csvgraph.io.csv_io", "CSVImportError"),
    "Format": ("csvgraph.io.csv_io", "Format"),
    "Parameter": ("csvgraph.io.csv_io", "Parameter"),
    "load_csv_to_graph": ("csvgraph.io.csv_io", "load_csv_to_graph"),
    # NetworkX adapter (optional dependency)
    "NetworkXTarget": ("csvgraph.adapters.networkx_adapter", "NetworkXTarget"),
    "from_csv_nx": ("csvgraph.adapters.networkx_adapter", "from_csv"),
}

__all__ = sorted(set(list(_lazy_submodules) + list(_lazy_symbols)))


def __getattr__(name: str) -> Any:  # PEP 562: lazy attribute resolution
    if name in _lazy_submodules:
        return import_module(_lazy_submodules[name])
    if name in _lazy_symbols:
        mod, attr = _lazy_symbols[name]
        return getattr(import_module(mod), attr)
    raise AttributeError(name)


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(__all__))


try:
    __version__ = _pkg_version("csvgraph")
except PackageNotFoundError:
    __version__ = "0.0.0"
