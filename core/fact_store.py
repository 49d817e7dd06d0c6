"""
Moduł zawierający słownik faktów (FactStore) używany przez silnik wnioskowania.

Klasy:
    - FactCursor: niezależna migawka identyfikatorów do sekwencyjnego odczytu
    - FactStore: uporządkowany słownik faktów z unikalnymi identyfikatorami

Ważne: kursor NIE widzi zmian słownika wykonanych po reset_cursor().
Algorytmy celowo robią ponowną migawkę w trakcie pętli, żeby zobaczyć
świeżo dodane fakty.
"""

import logging
from collections import deque
from typing import Any, Deque, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from core.exceptions import FactNotFound
from core.models import Fact, Sign

logger = logging.getLogger(__name__)

FactLike = Union[Fact, str, Tuple[str, Union[Sign, str]]]


class FactCursor:
    """
    Migawka identyfikatorów faktów.

    Kursor jest osobnym obiektem - nie współdzieli stanu ze słownikiem,
    więc dodanie lub usunięcie faktu nie zmienia tego co kursor zwróci.

    Example:
        >>> cursor = FactCursor(["A", "B"])
        >>> cursor.next()
        'A'
    """

    def __init__(self, ids: Iterable[str] = ()):
        self._pending: Deque[str] = deque(ids)

    def next(self) -> Optional[str]:
        """Zwraca kolejny identyfikator albo None na końcu sekwencji."""
        if not self._pending:
            return None
        return self._pending.popleft()

    @property
    def remaining(self) -> int:
        return len(self._pending)

    def __len__(self):
        return len(self._pending)


def _as_fact(item: FactLike) -> Fact:
    if isinstance(item, Fact):
        return item
    if isinstance(item, str):
        return Fact(item, Sign.POSITIVE)
    fact_id, sign = item
    return Fact(fact_id, sign)


class FactStore:
    """
    Uporządkowany słownik faktów.

    Przechowuje mapę id -> Fact oraz osobną kolejkę dwustronną identyfikatorów
    (kolejność wstawiania). Identyfikator jest unikalny - ponowne dodanie
    zastępuje rekord (last write wins) i przenosi go na koniec (append) albo
    na początek (prepend).

    Attributes:
        name (str): Nazwa słownika używana w logach i błędach

    Example:
        >>> store = FactStore("initial", ["A", ("B", "-")])
        >>> store.get("B", "sign")
        <Sign.NEGATIVE: '-'>
    """

    def __init__(self, name: str = "facts", facts: Optional[Iterable[FactLike]] = None):
        """
        Tworzy słownik faktów.

        Args:
            name: Nazwa słownika
            facts: Opcjonalne fakty początkowe - Fact, identyfikator (znak +)
                   albo para (identyfikator, znak)
        """
        self.name = name
        self._facts: Dict[str, Fact] = {}
        self._order: Deque[str] = deque()
        self._cursor = FactCursor()

        for item in facts or []:
            self.add(_as_fact(item))

        self.reset_cursor()

    def add(self, fact: Fact, front: bool = False) -> Fact:
        """Dodaje gotowy fakt na koniec (albo na początek gdy front=True)."""
        if fact.id in self._facts:
            self._order.remove(fact.id)
        self._facts[fact.id] = fact
        if front:
            self._order.appendleft(fact.id)
        else:
            self._order.append(fact.id)
        return fact

    def append(
        self,
        fact_id: str,
        sign: Union[Sign, str] = Sign.POSITIVE,
        weight: Optional[float] = None,
        algorithm: Optional[str] = None,
        rule: Optional[int] = None
    ) -> Fact:
        """Dodaje fakt na koniec słownika."""
        return self.add(Fact(fact_id, sign, weight, algorithm, rule))

    def prepend(
        self,
        fact_id: str,
        sign: Union[Sign, str] = Sign.POSITIVE,
        weight: Optional[float] = None,
        algorithm: Optional[str] = None,
        rule: Optional[int] = None
    ) -> Fact:
        """Dodaje fakt na początek słownika (rozwijanie celów w głąb)."""
        return self.add(Fact(fact_id, sign, weight, algorithm, rule), front=True)

    def remove(self, fact_id: str) -> bool:
        """
        Usuwa fakt.

        Returns:
            True jeśli fakt istniał, False w przeciwnym razie
        """
        if fact_id not in self._facts:
            return False
        del self._facts[fact_id]
        self._order.remove(fact_id)
        return True

    def find(self, fact_id: str) -> bool:
        return fact_id in self._facts

    def find_by_field(self, field: str, value: Any) -> Optional[str]:
        """
        Przeszukuje cały słownik i zwraca id pierwszego faktu (w kolejności
        wstawiania) którego pole `field` ma wartość `value`.
        """
        self._check_field(field)
        for fact_id in self._order:
            if getattr(self._facts[fact_id], field) == value:
                return fact_id
        return None

    def get(self, fact_id: str, field: str) -> Any:
        """
        Zwraca wartość pola faktu.

        Raises:
            FactNotFound: Gdy fakt nie istnieje
            ValueError: Gdy pole nie jest polem faktu
        """
        self._check_field(field)
        return getattr(self.get_fact(fact_id), field)

    def get_fact(self, fact_id: str) -> Fact:
        try:
            return self._facts[fact_id]
        except KeyError:
            raise FactNotFound(fact_id, self.name) from None

    def size(self) -> int:
        return len(self._facts)

    def ids(self) -> List[str]:
        return list(self._order)

    def facts(self) -> List[Fact]:
        return [self._facts[fact_id] for fact_id in self._order]

    def first(self) -> Optional[str]:
        return self._order[0] if self._order else None

    def clear(self) -> None:
        self._facts.clear()
        self._order.clear()

    def reset_cursor(self) -> None:
        """Robi nową migawkę identyfikatorów dla iterate()."""
        self._cursor = FactCursor(self._order)

    def iterate(self) -> Optional[str]:
        """
        Zwraca kolejny identyfikator z migawki (albo None na końcu).

        Zmiany słownika po reset_cursor() nie są widoczne aż do następnego
        reset_cursor().
        """
        return self._cursor.next()

    def _check_field(self, field: str) -> None:
        if field not in Fact.FIELDS:
            raise ValueError(f"Unknown fact field: {field!r}. Allowed: {Fact.FIELDS}")

    def __contains__(self, fact_id):
        return fact_id in self._facts

    def __len__(self):
        return len(self._facts)

    def __iter__(self) -> Iterator[Fact]:
        return iter(self.facts())

    def __repr__(self):
        content = ", ".join(f"{fid}{self._facts[fid].sign.value}" for fid in self._order)
        return f"FactStore({self.name}: [{content}])"
