"""
Viewer odpowiadający automatycznie na podstawie przygotowanych odpowiedzi.

Przydatny do automatyzacji (CLI z opcją --answer) oraz w testach.
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from core.models import Sign
from viewers.base import BaseViewer

logger = logging.getLogger(__name__)


class ScriptedViewer(BaseViewer):
    """
    Viewer z gotowymi odpowiedziami.

    Pytania rozpoznawane są po identyfikatorze faktu przekazanym w
    ask_about() albo po treści pytania (klucz mapy odpowiedzi może być
    jednym i drugim).

    Attributes:
        answers: Mapa fakt/pytanie -> znak
        default: Odpowiedź gdy brak wpisu w mapie
        questions: Lista zadanych pytań (w kolejności)
        messages, errors, debug_messages: Zapisane komunikaty

    Example:
        >>> viewer = ScriptedViewer({"A": "+", "B": "-"})
        >>> viewer.ask_about("B", "Does B happen?", list(Sign))
        <Sign.NEGATIVE: '-'>
    """

    def __init__(
        self,
        answers: Optional[Mapping[str, Union[Sign, str]]] = None,
        default: Union[Sign, str] = Sign.UNSURE
    ):
        self.answers: Dict[str, Sign] = {
            key: Sign.parse(value) for key, value in (answers or {}).items()
        }
        self.default = Sign.parse(default)
        self.questions: List[Tuple[Optional[str], str]] = []
        self.messages: List[str] = []
        self.errors: List[str] = []
        self.debug_messages: List[str] = []

    def debug(self, message: str) -> None:
        self.debug_messages.append(message)
        logger.debug(f"[VIEWER] {message}")

    def print(self, message: str) -> None:
        self.messages.append(message)
        logger.info(f"[VIEWER] {message}")

    def print_error(self, message: str) -> None:
        self.errors.append(message)
        logger.error(f"[VIEWER] {message}")

    def ask(self, question: str, options: Sequence[Sign]) -> Sign:
        return self.ask_about(None, question, options)

    def ask_about(self, fact_id: Optional[str], question: str, options: Sequence[Sign]) -> Sign:
        """Odpowiada na pytanie o konkretny fakt."""
        self.questions.append((fact_id, question))
        if fact_id is not None and fact_id in self.answers:
            answer = self.answers[fact_id]
        else:
            answer = self.answers.get(question, self.default)
        if answer not in options:
            answer = self.default
        logger.info(f"[VIEWER] Q: {question} -> {answer.value}")
        return answer

    @property
    def asked_facts(self) -> List[Optional[str]]:
        return [fact_id for fact_id, _ in self.questions]
