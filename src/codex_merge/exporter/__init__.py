"""
Exporter package.

Re-exports the JSON writers used by the pipeline.
"""

from __future__ import annotations

from .json_exporter import (
    export_collection,
    export_records,
    export_sources,
    write_json,
)

__all__ = ["export_collection", "export_records", "export_sources", "write_json"]
