"""Fabryka baz wiedzy - wybiera adapter na podstawie rodzaju albo rozszerzenia pliku."""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from core.exceptions import ConfigurationError
from core.models import KnowledgeBase
from knowledge_db.loaders import CSVKnowledgeLoader, YAMLKnowledgeLoader

logger = logging.getLogger(__name__)


class KnowledgeBaseFactory:
    """
    Rejestr adapterów baz wiedzy.

    Example:
        >>> kb = KnowledgeBaseFactory.create("yaml", "knowledge_bases/medical.yaml")
        >>> kb = KnowledgeBaseFactory.from_path("rules.csv")
    """

    _registry: Dict[str, type] = {
        "yaml": YAMLKnowledgeLoader,
        "yml": YAMLKnowledgeLoader,
        "csv": CSVKnowledgeLoader,
    }

    @classmethod
    def register(cls, kind: str, loader_cls: type) -> None:
        cls._registry[kind.lower()] = loader_cls

    @classmethod
    def available(cls):
        return sorted(cls._registry)

    @classmethod
    def create(cls, kind: str, filename: Union[str, Path]) -> KnowledgeBase:
        """
        Wczytuje bazę wiedzy adapterem danego rodzaju.

        Raises:
            ConfigurationError: Gdy rodzaj jest nieznany
            KnowledgeBaseError: Gdy plik jest niepoprawny
        """
        loader_cls = cls._registry.get((kind or "").lower())
        if loader_cls is None:
            raise ConfigurationError(
                f"Unknown knowledge base format '{kind}'. Available: {cls.available()}"
            )
        logger.info(f"[KNOWLEDGE_DB] Loading {filename} with {loader_cls.__name__}")
        return loader_cls().load(filename)

    @classmethod
    def from_path(cls, filename: Union[str, Path], kind: Optional[str] = None) -> KnowledgeBase:
        """Jak create(), ale rodzaj wynika z rozszerzenia pliku gdy nie podano go wprost."""
        if kind is None:
            kind = Path(filename).suffix.lstrip(".")
        return cls.create(kind, filename)
