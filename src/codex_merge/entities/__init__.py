"""
codex_merge.entities package

Output-side record envelope shared by every catalog manager and the variant
expansion engine.
"""

from __future__ import annotations

from .merged_record import MergedRecord, display_name_pair

__all__ = ["MergedRecord", "display_name_pair"]
