"""
Moduł zawierający silnik wnioskowania w przód, wstecz i mieszanego.

Klasy:
    - InferenceStatus: sposób zakończenia algorytmu
    - InferenceResult: wynik pojedynczego uruchomienia algorytmu
    - VisitedRule: reguła rozwijana podczas wnioskowania wstecz
    - InferenceEngine: właściciel wszystkich słowników faktów, implementuje
      forward(), backward(), mixed() oraz wspólne shoot() i współczynnik dopasowania

Silnik jest jednorazowy: jedna instancja = jedno uruchomienie. Ponowne
uruchomienie algorytmu na zapełnionym silniku nie resetuje stanu.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Deque, Dict, Iterable, List, Mapping, Optional, Set, Tuple
import time
import logging

from core.exceptions import ConfigurationError, PreconditionError
from core.fact_store import FactLike, FactStore
from core.models import BaseKnowledgeBase, Fact, Rule, Sign
from viewers.base import BaseViewer
from viewers.factory import ViewerFactory

# Domyślny logger dla modułu (fallback)
default_logger = logging.getLogger(__name__)

FORWARD = "forward"
BACKWARD = "backward"
MIXED = "mixed"

ANSWER_OPTIONS = (Sign.POSITIVE, Sign.NEGATIVE, Sign.UNSURE)


class InferenceStatus(str, Enum):
    """
    Sposób zakończenia algorytmu.

    COMPLETED - algorytm doszedł do naturalnego końca (brak nowych reguł,
                wyczerpane cele, brak faktów intuicyjnych)
    CONCLUDED - mixed znalazł pozytywny fakt wywnioskowany
    ABORTED   - wnioskowanie wstecz przerwane odpowiedzią "Unsure"
    STALLED   - mixed powtarza ten sam stan (albo przekroczył limit iteracji)
    """
    COMPLETED = "completed"
    CONCLUDED = "concluded"
    ABORTED = "aborted"
    STALLED = "stalled"


@dataclass
class InferenceResult:
    """
    Wynik procesu wnioskowania.

    Attributes:
        success: False tylko dla ABORTED i STALLED
        status: Sposób zakończenia algorytmu
        algorithm: "forward", "backward" albo "mixed"
        inferred_facts: Wszystkie fakty wywnioskowane do tej pory (w kolejności)
        rules_shot: Reguły odpalone podczas TEGO wywołania (w kolejności)
        iterations: Liczba przejść głównej pętli algorytmu
        execution_time_ms: Czas wykonania w milisekundach
        rules_evaluated: Liczba sprawdzeń dopasowania przyczyn reguł
        trace: Ślad wnioskowania (czytelne kroki)
    """
    success: bool
    status: InferenceStatus
    algorithm: str
    inferred_facts: List[Fact]
    rules_shot: List[int]
    iterations: int
    execution_time_ms: float
    rules_evaluated: int
    trace: List[str] = field(default_factory=list)


@dataclass
class VisitedRule:
    """
    Reguła odwiedzona podczas wnioskowania wstecz.

    Attributes:
        rule_id: Id reguły
        causes_total: Liczba przyczyn reguły
        causes_pending: Liczba przyczyn które nie są jeszcze rozstrzygnięte
        pending: Identyfikatory nierozstrzygniętych przyczyn
    """
    rule_id: int
    causes_total: int
    causes_pending: int
    pending: Set[str] = field(default_factory=set, repr=False)

    @classmethod
    def for_rule(cls, rule: Rule) -> "VisitedRule":
        pending = set(rule.cause_ids)
        return cls(rule.id, len(rule.causes), len(pending), pending)

    def resolve(self, fact_id: str) -> bool:
        """Oznacza przyczynę jako rozstrzygniętą (każda liczy się tylko raz)."""
        if fact_id not in self.pending:
            return False
        self.pending.discard(fact_id)
        self.causes_pending -= 1
        return True

    @property
    def done(self) -> bool:
        return self.causes_pending == 0


class InferenceEngine:
    """
    Silnik wnioskowania (forward, backward, mixed).

    Słowniki faktów:
        - initial_facts: fakty początkowe (+ kopie celów odpalonych reguł)
        - inference_facts: fakty wywnioskowane, z algorytmem i regułą
        - asked_facts: odpowiedzi użytkownika
        - goals_to_check: cele do sprawdzenia (kolejka dwustronna)
        - visited_rules: stos reguł rozwijanych przez backward()

    Example:
        >>> engine = InferenceEngine(kb, viewer=ScriptedViewer(), initial_facts=["A", "B"])
        >>> result = engine.forward()
        >>> engine.inference_facts.ids()
        ['C', 'D']
    """

    def __init__(
        self,
        knowledge_db: BaseKnowledgeBase,
        viewer: Optional[BaseViewer] = None,
        viewer_class: Optional[str] = None,
        initial_facts: Optional[Iterable[FactLike]] = None,
        goals_to_check: Optional[Iterable[FactLike]] = None,
        found_factor: float = 0.5,
        verbose: bool = False,
        max_mixed_iterations: int = 100,
        run_id: Optional[str] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Tworzy silnik wnioskowania.

        Args:
            knowledge_db: Baza wiedzy (tylko do odczytu)
            viewer: Viewer do komunikacji z użytkownikiem (ma pierwszeństwo)
            viewer_class: Nazwa viewera z ViewerFactory gdy viewer nie podany
            initial_facts: Fakty początkowe - id (znak +) albo para (id, znak)
            goals_to_check: Hipotezy dla backward()
            found_factor: Próg współczynnika dopasowania dla mixed()
            verbose: Czy przekazywać narrację do viewer.debug()
            max_mixed_iterations: Limit przejść pętli zewnętrznej mixed()
            run_id: Unikalny identyfikator uruchomienia (opcjonalny, dla logów)
            logger: Dedykowany logger (opcjonalny)

        Raises:
            ConfigurationError: Brak bazy wiedzy, brak viewera, zły próg lub limit
        """
        if knowledge_db is None:
            raise ConfigurationError("A knowledge base is required")
        if viewer is None:
            if not viewer_class:
                raise ConfigurationError("Sorry, provide a viewer or a viewer_class")
            viewer = ViewerFactory.create(viewer_class)
        if not isinstance(viewer, BaseViewer):
            raise ConfigurationError(f"Viewer must implement BaseViewer, got {type(viewer).__name__}")
        if not 0.0 <= found_factor <= 1.0:
            raise ConfigurationError(f"found_factor must be in range [0.0, 1.0], got: {found_factor}")
        if max_mixed_iterations <= 0:
            raise ConfigurationError("max_mixed_iterations must be greater than 0")

        self.knowledge_db = knowledge_db
        self.viewer = viewer
        self.found_factor = found_factor
        self.verbose = verbose
        self.max_mixed_iterations = max_mixed_iterations
        self.run_id = run_id
        self.logger = logger if logger else default_logger

        self.initial_facts = FactStore("initial", initial_facts)
        self.inference_facts = FactStore("inference")
        self.asked_facts = FactStore("asked")
        self.goals_to_check = FactStore("goals", goals_to_check)
        self.visited_rules: Deque[VisitedRule] = deque()

        # rule_id -> czas odpalenia; kolejność kluczy == kolejność odpalania
        self._shot_rules: Dict[int, float] = {}
        self._shot_algorithms: Dict[int, str] = {}

        self.trace: List[str] = []
        self.rules_evaluated = 0

    # ------------------------------------------------------------------
    # Stan
    # ------------------------------------------------------------------

    @property
    def shot_rules(self) -> Mapping[int, float]:
        return MappingProxyType(self._shot_rules)

    @property
    def shot_order(self) -> List[int]:
        return list(self._shot_rules)

    def shot_algorithm(self, rule_id: int) -> Optional[str]:
        return self._shot_algorithms.get(rule_id)

    def is_rule_shot(self, rule_id: int) -> bool:
        return rule_id in self._shot_rules

    @property
    def known_stores(self) -> Tuple[FactStore, FactStore, FactStore]:
        """Słowniki znanych faktów w kolejności priorytetu dopasowania."""
        return (self.initial_facts, self.inference_facts, self.asked_facts)

    def is_fact_known(self, fact_id: str) -> bool:
        return any(fact_id in store for store in self.known_stores)

    def has_positive_inference(self) -> bool:
        return self.inference_facts.find_by_field("sign", Sign.POSITIVE) is not None

    # ------------------------------------------------------------------
    # Dopasowanie reguł
    # ------------------------------------------------------------------

    def match_count(self, rule_id: int, stores: Optional[Iterable[FactStore]] = None) -> int:
        rule = self.knowledge_db.get_rule(rule_id)
        self.rules_evaluated += 1
        return rule.match_count(tuple(stores) if stores is not None else self.known_stores)

    def fully_matches(self, rule_id: int, stores: Optional[Iterable[FactStore]] = None) -> bool:
        rule = self.knowledge_db.get_rule(rule_id)
        self.rules_evaluated += 1
        return rule.fully_matches(tuple(stores) if stores is not None else self.known_stores)

    def causes_match_factor(self, rule_id: int, stores: Optional[Iterable[FactStore]] = None) -> float:
        rule = self.knowledge_db.get_rule(rule_id)
        self.rules_evaluated += 1
        return rule.causes_match_factor(tuple(stores) if stores is not None else self.known_stores)

    # ------------------------------------------------------------------
    # Odpalanie reguł
    # ------------------------------------------------------------------

    def shoot(self, rule_id: int, algorithm: str) -> Optional[Sign]:
        """
        Odpala regułę.

        1. Zapisuje czas odpalenia w shot_rules.
        2. Sprawdza przyczyny w kolejności z bazy wiedzy: czy przyczyna jest
           NEGATYWNA w initial_facts, potem w asked_facts. Pierwsza negacja
           kończy sprawdzanie - cała reguła daje wynik negatywny.
        3. Każdy cel reguły trafia do inference_facts (ze znakiem, algorytmem
           i regułą) oraz do initial_facts (ze znakiem).

        Returns:
            Znak wyprowadzonych celów (None gdy reguła była już odpalona)
        """
        if self.is_rule_shot(rule_id):
            self.logger.warning(f"[SHOOT] Rule {rule_id} was already shot, ignoring")
            return None

        rule = self.knowledge_db.get_rule(rule_id)
        self._shot_rules[rule_id] = time.time()
        self._shot_algorithms[rule_id] = algorithm

        negated_by = None
        for cause in rule.causes:
            if self._is_negative(self.initial_facts, cause.fact_id) or \
                    self._is_negative(self.asked_facts, cause.fact_id):
                negated_by = cause.fact_id
                break

        sign = Sign.NEGATIVE if negated_by is not None else Sign.POSITIVE

        for goal in rule.goals:
            self.inference_facts.append(goal, sign, algorithm=algorithm, rule=rule_id)
            self.initial_facts.append(goal, sign)

        goals_text = ", ".join(f"{goal}{sign.value}" for goal in rule.goals)
        reason = f" (negated by {negated_by})" if negated_by is not None else ""
        self.logger.info(f"[SHOOT] Rule {rule_id} fired by {algorithm}! New facts: {goals_text}{reason}")
        self._debug(f"Shot rule {rule_id}: {rule}")
        self.trace.append(f"[{algorithm.upper()}] Rule {rule_id} shot -> {goals_text}{reason}")
        return sign

    @staticmethod
    def _is_negative(store: FactStore, fact_id: str) -> bool:
        if fact_id not in store:
            return False
        sign = store.get(fact_id, "sign")
        if sign is Sign.NEGATIVE:
            return True
        elif sign is Sign.POSITIVE or sign is Sign.UNSURE:
            return False
        raise ValueError(f"Unknown fact sign: {sign!r}")

    # ------------------------------------------------------------------
    # Forward
    # ------------------------------------------------------------------

    def forward(self) -> InferenceResult:
        """
        Wnioskowanie w przód (data-driven).

        Algorytm:
        1. Czytaj reguły po kolei od id 0, pomijając już odpalone.
        2. Jeśli wszystkie przyczyny reguły są znane (initial, inference,
           asked) - odpal ją i zacznij od reguły 0 (nowe fakty mogą spełnić
           wcześniejsze reguły).
        3. Pełne przejście bez odpalenia kończy algorytm (pusty wynik też
           jest poprawnym wynikiem).

        Raises:
            PreconditionError: Gdy brak faktów początkowych
        """
        if self.initial_facts.size() == 0:
            raise PreconditionError("Can't do forward algorithm with no initial facts")

        start_time = time.perf_counter()
        trace_start = len(self.trace)
        shot_before = len(self._shot_rules)
        evaluated_before = self.rules_evaluated

        total_rules = self.knowledge_db.rule_count()
        self.logger.info(f"=== Starting Forward Chaining {f'(Run ID: {self.run_id})' if self.run_id else ''} ===")
        self.logger.info(f"Initial facts: {self.initial_facts.size()}, Rules: {total_rules}")

        iterations = 1
        current_rule = 0
        while current_rule < total_rules:
            if self.is_rule_shot(current_rule):
                self._debug(f"We already shot rule: {current_rule}")
                current_rule += 1
                continue

            self._debug(f"Reading rule {current_rule} of {total_rules - 1}")
            if self.fully_matches(current_rule):
                # shoot and start again
                self.shoot(current_rule, FORWARD)
                current_rule = 0
                iterations += 1
                continue

            current_rule += 1

        self._debug("We are done with all the rules, bye")
        rules_shot = list(self._shot_rules)[shot_before:]
        self.logger.info(f"[FORWARD] Completed. Rules shot: {rules_shot}, Passes: {iterations}")

        return self._result(
            status=InferenceStatus.COMPLETED,
            algorithm=FORWARD,
            rules_shot=rules_shot,
            iterations=iterations,
            start_time=start_time,
            trace_start=trace_start,
            evaluated_before=evaluated_before
        )

    # ------------------------------------------------------------------
    # Backward
    # ------------------------------------------------------------------

    def backward(self) -> InferenceResult:
        """
        Wnioskowanie wstecz (goal-driven).

        Pętla po celu z początku goals_to_check:
        1. Cel już znany (initial, inference, asked) - usuń go z kolejki,
           rozstrzygnij go w odwiedzonych regułach; reguła bez
           nierozstrzygniętych przyczyn jest zdejmowana ze stosu i odpalana.
        2. Istnieje reguła której celem jest ten fakt - odłóż ją na stos
           visited_rules i wstaw jej przyczyny na POCZĄTEK kolejki (w głąb,
           od lewej do prawej).
        3. Brak takiej reguły - zapytaj użytkownika. "+" i "-" trafiają do
           asked_facts, "~" przerywa całe wnioskowanie (status ABORTED).

        Raises:
            PreconditionError: Gdy brak celów do sprawdzenia
        """
        if self.goals_to_check.size() == 0:
            raise PreconditionError("Can't do backward algorithm with no goals to check")

        start_time = time.perf_counter()
        trace_start = len(self.trace)
        shot_before = len(self._shot_rules)
        evaluated_before = self.rules_evaluated

        self.logger.info(f"=== Starting Backward Chaining {f'(Run ID: {self.run_id})' if self.run_id else ''} ===")
        self.logger.info(f"Goals to check: {self.goals_to_check.ids()}")

        iterations = 0
        while True:
            # Nowa migawka - widzimy przyczyny dopisane w poprzednim kroku
            self.goals_to_check.reset_cursor()
            goal = self.goals_to_check.iterate()

            if goal is None:
                if not self.visited_rules:
                    self._debug("No more goals to read")
                    break
                leftover = self.visited_rules.popleft()
                self.logger.warning(
                    f"[BACKWARD] Goal queue drained with rule {leftover.rule_id} still visited, shooting it"
                )
                self.shoot(leftover.rule_id, BACKWARD)
                continue

            iterations += 1

            if self.is_fact_known(goal):
                self._resolve_goal(goal)
                continue

            rule_id = self.knowledge_db.find_rule_by_goal(goal)
            if rule_id is not None and self._find_visited(rule_id) is None:
                self._visit_rule(rule_id, goal)
                continue

            if rule_id is not None:
                self.logger.info(f"[BACKWARD] Cycle detected for {goal} (rule {rule_id} already visited), asking")

            # Ooops, lets ask about this
            answer = self.ask_about(goal)
            if answer is Sign.UNSURE:
                self.logger.info(f"[BACKWARD] Unsure answer for {goal} - aborting backward chaining")
                self.trace.append(f"[BACKWARD] Aborted: no answer for {goal}")
                return self._result(
                    status=InferenceStatus.ABORTED,
                    algorithm=BACKWARD,
                    rules_shot=list(self._shot_rules)[shot_before:],
                    iterations=iterations,
                    start_time=start_time,
                    trace_start=trace_start,
                    evaluated_before=evaluated_before
                )

        rules_shot = list(self._shot_rules)[shot_before:]
        self.logger.info(f"[BACKWARD] Completed. Rules shot: {rules_shot}, Steps: {iterations}")

        return self._result(
            status=InferenceStatus.COMPLETED,
            algorithm=BACKWARD,
            rules_shot=rules_shot,
            iterations=iterations,
            start_time=start_time,
            trace_start=trace_start,
            evaluated_before=evaluated_before
        )

    def _resolve_goal(self, goal: str) -> None:
        owner = self.goals_to_check.get(goal, "rule")
        self.goals_to_check.remove(goal)
        self._debug(f"Goal {goal} is already known (owner rule: {owner})")

        ready = [visited for visited in self.visited_rules
                 if visited.resolve(goal) and visited.done]
        for visited in ready:
            self.visited_rules.remove(visited)
            self.logger.info(f"[BACKWARD] All {visited.causes_total} causes of rule {visited.rule_id} resolved")
            self.shoot(visited.rule_id, BACKWARD)

    def _visit_rule(self, rule_id: int, goal: str) -> None:
        rule = self.knowledge_db.get_rule(rule_id)
        self.visited_rules.appendleft(VisitedRule.for_rule(rule))

        # Odwrotna kolejność, żeby pierwsza przyczyna była na początku kolejki
        for cause in reversed(rule.causes):
            self.goals_to_check.prepend(cause.fact_id, Sign.POSITIVE, weight=cause.weight, rule=rule_id)

        self.logger.info(f"[BACKWARD] Goal {goal} -> visiting rule {rule_id}, new goals: {rule.cause_ids}")
        self.trace.append(f"[BACKWARD] Goal {goal} expanded by rule {rule_id}: {', '.join(rule.cause_ids)}")

    def _find_visited(self, rule_id: int) -> Optional[VisitedRule]:
        for visited in self.visited_rules:
            if visited.rule_id == rule_id:
                return visited
        return None

    def _discard_pending_goals(self) -> None:
        if self.goals_to_check.size() or self.visited_rules:
            self.logger.debug(
                f"[MIXED] Discarding goals {self.goals_to_check.ids()} and visited rules "
                f"{[v.rule_id for v in self.visited_rules]}"
            )
        self.goals_to_check.clear()
        self.visited_rules.clear()

    def ask_about(self, fact_id: str) -> Sign:
        """
        Pyta viewer o znak faktu i zapisuje odpowiedź "+" lub "-" w asked_facts.

        Raises:
            ConfigurationError: Gdy viewer zwrócił odpowiedź spoza opcji
        """
        question = self.knowledge_db.question_for(fact_id) or f"Does '{fact_id}' happen?"
        reply = self.viewer.ask_about(fact_id, question, ANSWER_OPTIONS)
        try:
            answer = Sign.parse(reply)
        except ValueError:
            raise ConfigurationError(f"Viewer answered {reply!r}, expected one of {[o.value for o in ANSWER_OPTIONS]}") from None

        if answer is Sign.POSITIVE or answer is Sign.NEGATIVE:
            self.asked_facts.append(fact_id, answer, algorithm=BACKWARD)
        elif answer is Sign.UNSURE:
            pass
        else:
            raise ConfigurationError(f"Unexpected answer {answer!r}")

        self.logger.info(f"[ASK] {question} -> {answer.value}")
        self.trace.append(f"[ASK] {fact_id}? -> {answer.value}")
        return answer

    # ------------------------------------------------------------------
    # Mixed
    # ------------------------------------------------------------------

    def mixed(self) -> InferenceResult:
        """
        Wnioskowanie mieszane.

        Pętla:
        1. forward() (brak faktów początkowych = PreconditionError).
        2. Jest pozytywny fakt wywnioskowany - koniec (CONCLUDED).
        3. Dla każdej nieodpalonej reguły licz współczynnik dopasowania;
           jeśli współczynnik >= found_factor i reguła nie jest w pełni
           dopasowana, cele reguły są faktami intuicyjnymi (pełne
           dopasowanie obsługuje forward).
        4. Brak faktów intuicyjnych - koniec (COMPLETED, bez wniosku).
        5. Dla każdego faktu intuicyjnego: dopisz go na koniec goals_to_check
           i uruchom backward(); pozytywny fakt wywnioskowany kończy pętlę.
        6. Wróć do kroku 1.

        Pętla kończy się ze statusem STALLED gdy stan (fakty intuicyjne,
        liczba odpalonych reguł, pytań i wniosków) się powtarza albo gdy
        przekroczono max_mixed_iterations.
        """
        start_time = time.perf_counter()
        trace_start = len(self.trace)
        shot_before = len(self._shot_rules)
        evaluated_before = self.rules_evaluated

        self.logger.info(f"=== Starting Mixed Chaining {f'(Run ID: {self.run_id})' if self.run_id else ''} ===")
        self.logger.info(f"Found factor: {self.found_factor}, Max iterations: {self.max_mixed_iterations}")

        seen_states: Set[Tuple] = set()
        iterations = 0
        status = None

        while status is None:
            if iterations >= self.max_mixed_iterations:
                self.logger.warning(f"[MIXED] Iteration limit ({self.max_mixed_iterations}) reached, stopping")
                status = InferenceStatus.STALLED
                break
            iterations += 1
            self.logger.info(f"[MIXED] [STEP {iterations}] Running forward chaining")

            self.forward()
            if self.has_positive_inference():
                status = InferenceStatus.CONCLUDED
                break

            intuitive_facts = self._collect_intuitive_facts()
            if not intuitive_facts:
                self.logger.info("[MIXED] No intuitive facts found, nothing more to guess")
                status = InferenceStatus.COMPLETED
                break

            state = (
                frozenset(intuitive_facts),
                len(self._shot_rules),
                self.asked_facts.size(),
                self.inference_facts.size()
            )
            if state in seen_states:
                self.logger.warning(f"[MIXED] Intuitive facts {intuitive_facts} repeat without progress, stopping")
                status = InferenceStatus.STALLED
                break
            seen_states.add(state)

            self.logger.info(f"[MIXED] Intuitive facts: {intuitive_facts}")
            self.trace.append(f"[MIXED] Intuitive facts: {', '.join(intuitive_facts)}")

            for fact_id in intuitive_facts:
                self.goals_to_check.append(fact_id)
                result = self.backward()
                if result.status is InferenceStatus.ABORTED:
                    self._discard_pending_goals()
                if self.has_positive_inference():
                    status = InferenceStatus.CONCLUDED
                    break

        rules_shot = list(self._shot_rules)[shot_before:]
        self.logger.info(f"[MIXED] Finished with status {status.value}. Rules shot: {rules_shot}")

        return self._result(
            status=status,
            algorithm=MIXED,
            rules_shot=rules_shot,
            iterations=iterations,
            start_time=start_time,
            trace_start=trace_start,
            evaluated_before=evaluated_before
        )

    def _collect_intuitive_facts(self) -> List[str]:
        intuitive: List[str] = []
        for rule in self.knowledge_db:
            if self.is_rule_shot(rule.id):
                continue
            factor = self.causes_match_factor(rule.id)
            self._debug(f"Rule {rule.id} causes match factor: {factor:.3f}")
            # przyczyny z wagami mogą dać 1.0 bez pełnego dopasowania
            if factor >= self.found_factor and not rule.fully_matches(self.known_stores):
                for goal in rule.goals:
                    if goal not in intuitive:
                        intuitive.append(goal)
        return intuitive

    # ------------------------------------------------------------------
    # Podsumowanie
    # ------------------------------------------------------------------

    def summary(self):
        """
        Buduje podsumowanie odpalonych reguł (patrz core.summary).

        Gdy nic nie zostało wywnioskowane, zgłasza to przez viewer.print_error().
        """
        from core.summary import build_summary

        if self.inference_facts.size() == 0:
            self.viewer.print_error("No inference was possible")
        return build_summary(self)

    # ------------------------------------------------------------------
    # Pomocnicze
    # ------------------------------------------------------------------

    def _debug(self, message: str) -> None:
        self.logger.debug(message)
        if self.verbose:
            self.viewer.debug(message)

    def _result(
        self,
        status: InferenceStatus,
        algorithm: str,
        rules_shot: List[int],
        iterations: int,
        start_time: float,
        trace_start: int,
        evaluated_before: int
    ) -> InferenceResult:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        self.logger.info(f"Execution time: {execution_time_ms:.3f} ms")
        return InferenceResult(
            success=status in (InferenceStatus.COMPLETED, InferenceStatus.CONCLUDED),
            status=status,
            algorithm=algorithm,
            inferred_facts=self.inference_facts.facts(),
            rules_shot=rules_shot,
            iterations=iterations,
            execution_time_ms=execution_time_ms,
            rules_evaluated=self.rules_evaluated - evaluated_before,
            trace=self.trace[trace_start:]
        )
