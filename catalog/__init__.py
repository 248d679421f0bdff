"""Question catalog: query contract, in-memory store and built-in bank."""
from .bank import QUESTION_BANK
from .repository import CatalogFile, InMemoryCatalog, QuestionCatalog, default_catalog, load_catalog

__all__ = [
    "QUESTION_BANK",
    "CatalogFile",
    "InMemoryCatalog",
    "QuestionCatalog",
    "default_catalog",
    "load_catalog",
]
