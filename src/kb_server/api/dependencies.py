from functools import lru_cache

from ..knowledge.index import KnowledgeIndex


@lru_cache
def get_knowledge_index() -> KnowledgeIndex:
    # One index per process; tests replace it through dependency_overrides.
    return KnowledgeIndex()
