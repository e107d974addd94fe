from .corpus import CorpusLoader, CorpusPair, read_json

__all__ = ["CorpusLoader", "CorpusPair", "read_json"]
