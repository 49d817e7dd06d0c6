"""
To jest moduł zawierający podstawowe modele danych systemu ekspertowego zwanego dalej SE.

Klasy:
    - Sign: trójwartościowy znak faktu (+, -, ~)
    - Fact: pojedynczy fakt z identyfikatorem, znakiem i pochodzeniem
    - Cause: przesłanka reguły (identyfikator faktu + opcjonalna waga)
    - Rule: reguła IF przyczyny THEN cele
    - BaseKnowledgeBase: interfejs bazy wiedzy (tylko do odczytu)
    - KnowledgeBase: baza wiedzy trzymana w pamięci
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from core.exceptions import RuleNotFound


class Sign(str, Enum):
    """
    Znak faktu.

    POSITIVE - fakt zachodzi, NEGATIVE - fakt nie zachodzi,
    UNSURE - brak jednoznacznej odpowiedzi.
    """
    POSITIVE = "+"
    NEGATIVE = "-"
    UNSURE = "~"

    @classmethod
    def parse(cls, value: Union["Sign", str]) -> "Sign":
        """
        Zamienia symbol ("+", "-", "~") albo nazwę ("positive") na Sign.

        Raises:
            ValueError: Gdy wartość nie odpowiada żadnemu znakowi
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip()
            for sign in cls:
                if text == sign.value or text.upper() == sign.name:
                    return sign
        raise ValueError(f"Unknown fact sign: {value!r}")

    def __str__(self):
        return self.value


class Fact:
    """
    Klasa reprezentuje pojedynczy fakt w systemie ekspertowym.

    Fakt jest niemodyfikowalny w sensie logicznym - zmiana oznacza zastąpienie
    rekordu nowym obiektem (patrz replace()).

    Attributes:
        id (str): Identyfikator faktu (np. "goraczka")
        sign (Sign): Znak faktu
        weight (float): Opcjonalna waga (współczynnik pewności)
        algorithm (str): Algorytm który wyprowadził fakt ("forward", "backward")
        rule (int): Reguła która wyprowadziła fakt (lub reguła-właściciel celu)

    Example:
        fact = Fact("goraczka", Sign.NEGATIVE)

        fact.sign
        <Sign.NEGATIVE: '-'>
    """

    FIELDS = ("id", "sign", "weight", "algorithm", "rule")

    def __init__(
        self,
        id: str,
        sign: Union[Sign, str] = Sign.POSITIVE,
        weight: Optional[float] = None,
        algorithm: Optional[str] = None,
        rule: Optional[int] = None
    ):
        """
        Tworzy nowy fakt.

        Raises:
            ValueError: Gdy id jest puste lub znak jest nieznany
        """
        if not id:
            raise ValueError("Fact id cannot be empty")

        self.id = id
        self.sign = Sign.parse(sign)
        self.weight = weight
        self.algorithm = algorithm
        self.rule = rule

    def replace(self, **changes) -> "Fact":
        """Zwraca nowy fakt z podmienionymi polami."""
        values = {name: getattr(self, name) for name in self.FIELDS}
        values.update(changes)
        return Fact(**values)

    def _key(self):
        return (self.id, self.sign, self.weight, self.algorithm, self.rule)

    def __eq__(self, other):
        if not isinstance(other, Fact):
            return False
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        extra = ""
        if self.rule is not None:
            extra += f", rule={self.rule}"
        if self.algorithm:
            extra += f", algorithm={self.algorithm}"
        if self.weight is not None:
            extra += f", weight={self.weight}"
        return f"Fact({self.id}{self.sign.value}{extra})"


@dataclass(frozen=True)
class Cause:
    """
    Przesłanka reguły.

    Attributes:
        fact_id: Identyfikator faktu wymaganego przez regułę
        weight: Waga przesłanki (None gdy baza wiedzy jej nie przypisała)
    """
    fact_id: str
    weight: Optional[float] = None

    def __post_init__(self):
        if not self.fact_id:
            raise ValueError("Cause fact id cannot be empty")
        if self.weight is not None and self.weight < 0:
            raise ValueError(f"Cause weight must be non-negative, got {self.weight}")


CauseLike = Union[Cause, str, Tuple[str, Optional[float]]]


def _as_cause(item: CauseLike) -> Cause:
    if isinstance(item, Cause):
        return item
    if isinstance(item, str):
        return Cause(item)
    fact_id, weight = item
    return Cause(fact_id, None if weight is None else float(weight))


class Rule:
    """
    Klasa reprezentuje regułę w systemie ekspertowym.

    Reguła składa się z:
    - przyczyn (causes): uporządkowana lista przesłanek, opcjonalnie ważonych
    - celów (goals): uporządkowana lista faktów wyprowadzanych po odpaleniu

    Kolejność przyczyn i celów jest kolejnością z bazy wiedzy i wyznacza
    kolejność iteracji podczas dopasowywania.

    Example:
        rule = Rule(id=0, causes=["A", ("B", 0.4)], goals=["C"])
        len(rule)  # liczba przyczyn
        2
    """

    def __init__(
        self,
        id: int,
        causes: Sequence[CauseLike],
        goals: Sequence[str],
        question: Optional[str] = None
    ):
        """
        Tworzy nową regułę.

        Args:
            id: Indeks reguły (>= 0, kolejne liczby od 0)
            causes: Przyczyny - Cause, identyfikator albo para (identyfikator, waga)
            goals: Identyfikatory celów
            question: Opcjonalne pytanie o cel reguły

        Raises:
            ValueError: Gdy id < 0, causes lub goals są puste
        """
        if id < 0:
            raise ValueError("Rule ID must be non-negative")
        if not causes:
            raise ValueError("Causes cannot be empty")
        if not goals:
            raise ValueError("Goals cannot be empty")
        if any(not goal for goal in goals):
            raise ValueError("Goal fact id cannot be empty")

        self.id = id
        self.causes: Tuple[Cause, ...] = tuple(_as_cause(c) for c in causes)
        self.goals: Tuple[str, ...] = tuple(goals)
        self.question = question

    @property
    def cause_ids(self) -> List[str]:
        return [cause.fact_id for cause in self.causes]

    def has_goal(self, fact_id: str) -> bool:
        return fact_id in self.goals

    def matched_causes(self, stores: Sequence) -> List[Cause]:
        """
        Zwraca przyczyny obecne w którymkolwiek ze słowników faktów.

        Słowniki sprawdzane są w podanej kolejności (initial, inference,
        asked); przyczyna znaleziona w kilku słownikach liczy się raz.
        """
        return [
            cause for cause in self.causes
            if any(cause.fact_id in store for store in stores)
        ]

    def match_count(self, stores: Sequence) -> int:
        return len(self.matched_causes(stores))

    def fully_matches(self, stores: Sequence) -> bool:
        """Sprawdza czy wszystkie przyczyny reguły są znane."""
        return self.match_count(stores) == len(self.causes)

    def causes_match_factor(self, stores: Sequence) -> float:
        """
        Liczy współczynnik dopasowania przyczyn (certainty factor) w [0, 1].

        Oznaczenia:
            W - suma wag dopasowanych przyczyn które mają wagę
            U - liczba dopasowanych przyczyn bez wagi
            M - liczba przyczyn bez wagi (wśród WSZYSTKICH przyczyn)
            T - liczba przyczyn

        Reguły:
            - brak dopasowań: 0
            - M == T (żadna przyczyna nie ma wagi): dopasowane / T
            - M > 0 (wagi częściowe): W + U / T
            - M == 0 (wszystkie ważone): W

        Wynik nie jest znormalizowanym prawdopodobieństwem, tylko monotoniczną
        miarą porównywaną z progiem found_factor. Obcinany do [0, 1].
        """
        matched = self.matched_causes(stores)
        if not matched:
            return 0.0

        total = len(self.causes)
        missing_weight = sum(1 for cause in self.causes if cause.weight is None)

        if missing_weight == total:
            factor = len(matched) / total
        else:
            weight_sum = sum(c.weight for c in matched if c.weight is not None)
            if missing_weight > 0:
                unweighted = sum(1 for c in matched if c.weight is None)
                factor = weight_sum + unweighted / total
            else:
                factor = weight_sum

        return max(0.0, min(1.0, factor))

    def __len__(self):
        """
        Zwraca liczbę przyczyn w regule.
        """
        return len(self.causes)

    def __eq__(self, other):
        if not isinstance(other, Rule):
            return False
        return (self.id, self.causes, self.goals, self.question) == \
            (other.id, other.causes, other.goals, other.question)

    def __hash__(self):
        return hash((self.id, self.causes, self.goals))

    def __repr__(self):
        """
        Zwraca czytelną reprezentację tekstową reguły.
        """
        causes_str = " AND ".join(
            c.fact_id if c.weight is None else f"{c.fact_id}({c.weight:g})"
            for c in self.causes
        )
        goals_str = ", ".join(self.goals)
        return f"Rule({self.id}): IF {causes_str} THEN {goals_str}"


class BaseKnowledgeBase(ABC):
    """
    Interfejs bazy wiedzy (tylko do odczytu).

    Silnik wnioskowania korzysta wyłącznie z tych metod i nigdy nie sprawdza
    konkretnego typu bazy. Format przechowywania (YAML, CSV, baza danych)
    to sprawa adaptera.
    """

    @abstractmethod
    def rule_count(self) -> int:
        pass

    @abstractmethod
    def get_rule(self, rule_id: int) -> Rule:
        """
        Raises:
            RuleNotFound: Gdy indeks jest spoza zakresu
        """
        pass

    @abstractmethod
    def find_rule_by_goal(self, fact_id: str) -> Optional[int]:
        """Zwraca id pierwszej reguły której cele zawierają fakt (albo None)."""
        pass

    @abstractmethod
    def question_for(self, fact_id: str) -> Optional[str]:
        pass

    def causes_of(self, rule_id: int) -> Tuple[Cause, ...]:
        return self.get_rule(rule_id).causes

    def goals_of(self, rule_id: int) -> Tuple[str, ...]:
        return self.get_rule(rule_id).goals

    def __iter__(self) -> Iterator[Rule]:
        for rule_id in range(self.rule_count()):
            yield self.get_rule(rule_id)

    def __len__(self):
        return self.rule_count()


class KnowledgeBase(BaseKnowledgeBase):
    """
    Baza wiedzy przechowująca reguły w pamięci.

    Attributes:
        rules (List[Rule]): Lista reguł, indeks listy == id reguły
        questions (Dict[str, str]): Pytania zadawane o fakty liście

    Example:
            kb = KnowledgeBase([Rule(0, ["A", "B"], ["C"]), Rule(1, ["C"], ["D"])])
            kb.find_rule_by_goal("D")
        1
    """

    def __init__(self, rules: Iterable[Rule] = None, questions: Dict[str, str] = None):
        """
        Tworzy nową bazę wiedzy.

        Args:
            rules: Opcjonalna lista reguł (jeśli None, tworzy pustą listę)
            questions: Opcjonalne pytania o fakty (fakt -> treść pytania)

        Raises:
            ValueError: Gdy id reguł nie są kolejnymi liczbami od 0
        """
        self.rules: List[Rule] = list(rules) if rules is not None else []
        self.questions: Dict[str, str] = dict(questions) if questions else {}

        for index, rule in enumerate(self.rules):
            if rule.id != index:
                raise ValueError(
                    f"Rule ids must be contiguous from 0, rule at position {index} has id {rule.id}"
                )

        # Indeks: cel -> pierwsza reguła która go wyprowadza
        self._rule_by_goal: Dict[str, int] = {}
        for rule in self.rules:
            for goal in rule.goals:
                self._rule_by_goal.setdefault(goal, rule.id)

    def rule_count(self) -> int:
        return len(self.rules)

    def get_rule(self, rule_id: int) -> Rule:
        if not isinstance(rule_id, int) or not 0 <= rule_id < len(self.rules):
            raise RuleNotFound(rule_id)
        return self.rules[rule_id]

    def find_rule_by_goal(self, fact_id: str) -> Optional[int]:
        return self._rule_by_goal.get(fact_id)

    def question_for(self, fact_id: str) -> Optional[str]:
        if fact_id in self.questions:
            return self.questions[fact_id]
        rule_id = self.find_rule_by_goal(fact_id)
        if rule_id is not None:
            return self.rules[rule_id].question
        return None

    def __repr__(self):
        return f"KnowledgeBase(rules={len(self.rules)}, questions={len(self.questions)})"
