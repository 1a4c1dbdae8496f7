"""Adapters for external storage: result caches."""

from contribution_analyzer.adapters.result_cache import InMemoryResultCache, ResultCache

__all__ = ["InMemoryResultCache", "ResultCache"]
