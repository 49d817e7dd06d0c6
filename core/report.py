"""
Formatowanie podsumowania wnioskowania (dict, YAML, tekst, DataFrame).

Format YAML odpowiada zrzutowi podsumowania:

    rules:
      0:
        algorithm: forward
        order: 1
        causes:
          A: {method: Initial, sign: '+'}
        goals:
          C: {method: Inference, sign: '+'}
"""

from typing import Any, Dict, List

import pandas as pd
import yaml

from core.summary import InferenceSummary


class SummaryFormatter:
    """
    Zamienia InferenceSummary na formaty do zapisu i wyświetlenia.

    Example:
        >>> formatter = SummaryFormatter(engine.summary())
        >>> print(formatter.to_text())
    """

    COLUMNS = ["rule", "order", "algorithm", "role", "fact", "method", "sign"]

    def __init__(self, summary: InferenceSummary):
        self.summary = summary

    def to_dict(self) -> Dict[str, Any]:
        rules: Dict[int, Dict[str, Any]] = {}
        for trace in self.summary.rules:
            rules[trace.rule_id] = {
                "order": trace.order,
                "algorithm": trace.algorithm,
                "fired_at": trace.fired_at_iso,
                "causes": {
                    fact.fact_id: {"method": fact.method, "sign": fact.sign.value}
                    for fact in trace.causes
                },
                "goals": {
                    fact.fact_id: {"method": fact.method, "sign": fact.sign.value}
                    for fact in trace.goals
                },
            }
        return {"rules": rules}

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, allow_unicode=True)

    def to_text(self) -> str:
        """Czytelny ślad odpalonych reguł (w kolejności id)."""
        lines: List[str] = []
        lines.append("=" * 70)
        title = "INFERENCE SUMMARY"
        if self.summary.run_id:
            title += f" (Run ID: {self.summary.run_id})"
        lines.append(title)
        lines.append("=" * 70)

        if self.summary.is_empty:
            lines.append("No rules were shot")
            lines.append("=" * 70)
            return "\n".join(lines)

        for trace in self.summary.rules:
            lines.append(f"Rule {trace.rule_id} (#{trace.order}, {trace.algorithm}, {trace.fired_at_iso})")
            for fact in trace.causes:
                lines.append(f"  cause {fact.fact_id}{fact.sign.value}  <- {fact.method}")
            for fact in trace.goals:
                lines.append(f"  goal  {fact.fact_id}{fact.sign.value}  <- {fact.method}")

        lines.append("-" * 70)
        lines.append(f"Firing order: {', '.join(str(r) for r in self.summary.firing_order())}")
        lines.append("=" * 70)
        return "\n".join(lines)

    def to_dataframe(self) -> pd.DataFrame:
        """Jeden wiersz na fakt reguły (przyczyna albo cel)."""
        rows = []
        for trace in self.summary.rules:
            for role, facts in (("cause", trace.causes), ("goal", trace.goals)):
                for fact in facts:
                    rows.append({
                        "rule": trace.rule_id,
                        "order": trace.order,
                        "algorithm": trace.algorithm,
                        "role": role,
                        "fact": fact.fact_id,
                        "method": fact.method,
                        "sign": fact.sign.value,
                    })
        return pd.DataFrame(rows, columns=self.COLUMNS)
