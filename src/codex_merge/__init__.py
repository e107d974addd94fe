"""
codex_merge: merges a primary-language and a secondary-language game-content
corpus into one bilingual dataset.
"""

__version__ = "0.1.0"
