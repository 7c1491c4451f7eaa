"""csvgraph.io: I/O API with lazy symbol loading."""

from __future__ import annotations

from importlib import import_module
from typing import Any

_lazy_symbols: dict[str, tuple[str, str]] = {
    "CSVImporter": ("csvgraph.io.csv_io", "CSVImporter"),
    "CSVImportError": ("csvgraph.io.csv_io", "CSVImportError"),
    "Format": ("csvgraph.io.csv_io", "Format"),
    "Parameter": ("csvgraph.io.csv_io", "Parameter"),
    "ImportSettings": ("csvgraph.io.csv_io", "ImportSettings"),
    "load_csv_to_graph": ("csvgraph.io.csv_io", "load_csv_to_graph"),
    "iter_records": ("csvgraph.io._tokenizer", "iter_records"),
    "CSVSyntaxError": ("csvgraph.io._tokenizer", "CSVSyntaxError"),
}

__all__ = sorted(_lazy_symbols)


def __getattr__(name: str) -> Any:
    if name in _lazy_symbols:
        mod, attr = _lazy_symbols[name]
        return getattr(import_module(mod), attr)
    raise AttributeError(name)


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(__all__))
