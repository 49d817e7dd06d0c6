"""
Podsumowanie przebiegu wnioskowania.

Dla każdej odpalonej reguły (posortowanej po id) opisuje skąd wzięły się
jej przyczyny i jak zostały wyprowadzone jej cele.

Metody dla przyczyn:
    - Inference: przyczyna jest faktem wywnioskowanym
    - Initial: przyczyna jest faktem początkowym
    - Question: odpowiedź użytkownika
    - Forward: żadne z powyższych

Metody dla celów:
    - Question: użytkownik został o nie zapytany
    - Backward: regułę odpalił algorytm wstecz
    - Inference: każdy inny przypadek
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from core.models import Sign

if TYPE_CHECKING:
    from core.inference import InferenceEngine

logger = logging.getLogger(__name__)


@dataclass
class FactTrace:
    fact_id: str
    method: str
    sign: Sign


@dataclass
class RuleTrace:
    """
    Opis jednej odpalonej reguły.

    Attributes:
        rule_id: Id reguły
        order: Pozycja w kolejności odpalania (od 1)
        fired_at: Czas odpalenia (epoch, time.time())
        algorithm: Algorytm który odpalił regułę
        causes: Pochodzenie przyczyn
        goals: Pochodzenie celów
    """
    rule_id: int
    order: int
    fired_at: float
    algorithm: Optional[str]
    causes: List[FactTrace] = field(default_factory=list)
    goals: List[FactTrace] = field(default_factory=list)

    @property
    def fired_at_iso(self) -> str:
        return datetime.fromtimestamp(self.fired_at).isoformat(timespec="milliseconds")


@dataclass
class InferenceSummary:
    rules: List[RuleTrace] = field(default_factory=list)
    run_id: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.rules

    def firing_order(self) -> List[int]:
        return [trace.rule_id for trace in sorted(self.rules, key=lambda t: t.order)]


def _cause_trace(engine: "InferenceEngine", fact_id: str) -> FactTrace:
    if fact_id in engine.inference_facts:
        return FactTrace(fact_id, "Inference", engine.inference_facts.get(fact_id, "sign"))
    if fact_id in engine.initial_facts:
        return FactTrace(fact_id, "Initial", engine.initial_facts.get(fact_id, "sign"))
    if fact_id in engine.asked_facts:
        return FactTrace(fact_id, "Question", engine.asked_facts.get(fact_id, "sign"))
    return FactTrace(fact_id, "Forward", Sign.POSITIVE)


def _goal_trace(engine: "InferenceEngine", fact_id: str, algorithm: Optional[str]) -> FactTrace:
    if fact_id in engine.asked_facts:
        return FactTrace(fact_id, "Question", engine.asked_facts.get(fact_id, "sign"))

    sign = Sign.POSITIVE
    if fact_id in engine.inference_facts:
        sign = engine.inference_facts.get(fact_id, "sign")

    method = "Backward" if algorithm == "backward" else "Inference"
    return FactTrace(fact_id, method, sign)


def build_summary(engine: "InferenceEngine") -> InferenceSummary:
    """
    Buduje podsumowanie dla silnika po zakończeniu wnioskowania.

    Silnik bez odpalonych reguł daje puste podsumowanie.
    """
    summary = InferenceSummary(run_id=engine.run_id)
    order = {rule_id: position for position, rule_id in enumerate(engine.shot_order, start=1)}

    for rule_id in sorted(engine.shot_rules):
        rule = engine.knowledge_db.get_rule(rule_id)
        algorithm = engine.shot_algorithm(rule_id)
        trace = RuleTrace(
            rule_id=rule_id,
            order=order[rule_id],
            fired_at=engine.shot_rules[rule_id],
            algorithm=algorithm
        )
        trace.causes = [_cause_trace(engine, cause.fact_id) for cause in rule.causes]
        trace.goals = [_goal_trace(engine, goal, algorithm) for goal in rule.goals]
        summary.rules.append(trace)

    logger.info(f"[SUMMARY] {len(summary.rules)} rules shot, firing order: {summary.firing_order()}")
    return summary
