"""Fabryka viewerów - tworzy viewer na podstawie nazwy klasy."""

import logging
from typing import Dict, Type

from core.exceptions import ConfigurationError
from viewers.base import BaseViewer
from viewers.scripted import ScriptedViewer
from viewers.terminal import TerminalViewer

logger = logging.getLogger(__name__)


class ViewerFactory:
    """
    Rejestr dostępnych viewerów.

    Example:
        >>> viewer = ViewerFactory.create("scripted", answers={"A": "+"})
    """

    _registry: Dict[str, Type[BaseViewer]] = {
        "terminal": TerminalViewer,
        "scripted": ScriptedViewer,
    }

    @classmethod
    def register(cls, kind: str, viewer_cls: Type[BaseViewer]) -> None:
        cls._registry[kind.lower()] = viewer_cls

    @classmethod
    def available(cls):
        return sorted(cls._registry)

    @classmethod
    def create(cls, kind: str, **params) -> BaseViewer:
        """
        Tworzy viewer danego rodzaju.

        Raises:
            ConfigurationError: Gdy rodzaj viewera jest nieznany
        """
        if not kind:
            raise ConfigurationError("Sorry, provide a viewer or a viewer_class")
        viewer_cls = cls._registry.get(kind.lower())
        if viewer_cls is None:
            raise ConfigurationError(
                f"Unknown viewer class '{kind}'. Available: {cls.available()}"
            )
        logger.debug(f"[VIEWER] Creating {viewer_cls.__name__}")
        return viewer_cls(**params)
