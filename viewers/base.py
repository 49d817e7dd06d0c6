"""
Interfejs viewera - wszystko co silnik pokazuje użytkownikowi i o co go pyta.

Silnik wywołuje tylko te metody i nigdy nie sprawdza konkretnego typu viewera.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from core.models import Sign


class BaseViewer(ABC):
    """
    Abstrakcyjna klasa bazowa dla wszystkich viewerów.

    Metody debug/print/print_error są typu "fire-and-forget".
    Metoda ask() blokuje do czasu odpowiedzi - silnik nie ma żadnego
    timeoutu, odpowiedzialność za niego leży po stronie wywołującego.
    """

    @abstractmethod
    def debug(self, message: str) -> None:
        pass

    @abstractmethod
    def print(self, message: str) -> None:
        pass

    @abstractmethod
    def print_error(self, message: str) -> None:
        pass

    @abstractmethod
    def ask(self, question: str, options: Sequence[Sign]) -> Sign:
        """
        Zadaje pytanie i zwraca jedną z opcji.

        Args:
            question: Treść pytania
            options: Dozwolone odpowiedzi (Positive, Negative, Unsure)

        Returns:
            Wybrana opcja
        """
        pass

    def ask_about(self, fact_id: str, question: str, options: Sequence[Sign]) -> Sign:
        """
        Pyta o konkretny fakt. Domyślnie deleguje do ask() - viewery które
        potrafią odpowiadać po identyfikatorze faktu mogą to nadpisać.
        """
        return self.ask(question, options)
