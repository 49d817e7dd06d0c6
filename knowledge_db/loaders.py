"""
Adaptery wczytujące bazę wiedzy z pliku.

Klasy:
    - CSVConfig: parametry pliku CSV
    - YAMLKnowledgeLoader: dokument YAML z listą `rules`
    - CSVKnowledgeLoader: tabela CSV w formacie długim (jeden wiersz = jeden fakt reguły)

Format YAML:

    rules:
      - goals: [C]
        causes:
          - A
          - name: B
            weight: 0.4
        question: Is C true?
    questions:
      A: Does the patient have a fever?

Format CSV (nagłówek wymagany, kolumny weight i question opcjonalne):

    rule,kind,fact,weight,question
    r1,cause,A,,
    r1,cause,B,0.4,
    r1,goal,C,,Is C true?

Reguły numerowane są w kolejności pierwszego wystąpienia w pliku.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd
import yaml

from core.exceptions import KnowledgeBaseError
from core.models import KnowledgeBase, Rule
from knowledge_db.validators import ValidationResult, validate_file_path, validate_rule_records

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class CSVConfig:

    separator: str = ","
    encoding: str = "utf-8"


def _raise_if_invalid(result: ValidationResult, source: Path) -> None:
    for warning in result.warnings:
        logger.warning(f"[KNOWLEDGE_DB] {source}: {warning}")
    error = result.first_critical()
    if error is not None:
        raise KnowledgeBaseError(f"Validation error ({error.code}): {error.message}")


def _build_knowledge_base(records: List[Dict[str, Any]], questions: Dict[str, str], source: Path) -> KnowledgeBase:
    _raise_if_invalid(validate_rule_records(records), source)

    rules = [
        Rule(
            id=index,
            causes=[(fact_id, None if weight is None else float(weight)) for fact_id, weight in record["causes"]],
            goals=record["goals"],
            question=record.get("question")
        )
        for index, record in enumerate(records)
    ]
    kb = KnowledgeBase(rules, questions)
    logger.info(f"[KNOWLEDGE_DB] Loaded {kb.rule_count()} rules from {source}")
    return kb


class YAMLKnowledgeLoader:
    """Wczytuje bazę wiedzy z dokumentu YAML (yaml.safe_load)."""

    suffixes = (".yaml", ".yml")

    def validate(self, path: PathLike) -> ValidationResult:
        return validate_file_path(Path(path), self.suffixes)

    def load(self, path: PathLike) -> KnowledgeBase:
        """
        Raises:
            KnowledgeBaseError: Gdy plik nie istnieje, nie jest poprawnym YAML
                                albo nie zawiera reguł
        """
        path = Path(path)
        _raise_if_invalid(self.validate(path), path)

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise KnowledgeBaseError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict) or not data.get("rules"):
            raise KnowledgeBaseError(f"Couldn't find any rules in {path}")
        if not isinstance(data["rules"], list):
            raise KnowledgeBaseError(f"'rules' must be a list in {path}")

        records = [self._parse_rule(index, raw, path) for index, raw in enumerate(data["rules"])]

        questions = data.get("questions") or {}
        if not isinstance(questions, dict):
            raise KnowledgeBaseError(f"'questions' must be a mapping in {path}")
        questions = {str(fact): str(text) for fact, text in questions.items()}

        return _build_knowledge_base(records, questions, path)

    @staticmethod
    def _parse_rule(index: int, raw: Any, source: Path) -> Dict[str, Any]:
        if not isinstance(raw, dict):
            raise KnowledgeBaseError(f"Rule {index} in {source} must be a mapping, got {type(raw).__name__}")

        goals = raw.get("goals") or []
        if not isinstance(goals, list):
            goals = [goals]

        causes = raw.get("causes") or []
        if not isinstance(causes, list):
            causes = [causes]

        parsed_causes = []
        for cause in causes:
            if isinstance(cause, dict):
                name = cause.get("name")
                weight = cause.get("weight", cause.get("factor"))
                parsed_causes.append((None if name is None else str(name), weight))
            else:
                parsed_causes.append((None if cause is None else str(cause), None))

        record = {
            "causes": parsed_causes,
            "goals": [None if goal is None else str(goal) for goal in goals],
        }
        if raw.get("question"):
            record["question"] = str(raw["question"])
        return record


class CSVKnowledgeLoader:
    """Wczytuje bazę wiedzy z tabeli CSV (pandas)."""

    suffixes = (".csv",)
    required_columns = ("rule", "kind", "fact")

    def validate(self, path: PathLike) -> ValidationResult:
        return validate_file_path(Path(path), self.suffixes)

    def load(self, path: PathLike, config: Optional[CSVConfig] = None) -> KnowledgeBase:
        """
        Raises:
            KnowledgeBaseError: Gdy plik nie przechodzi walidacji, brakuje
                                kolumn lub kolumna kind ma nieznaną wartość
        """
        path = Path(path)
        if config is None:
            config = CSVConfig()

        _raise_if_invalid(self.validate(path), path)

        try:
            df = pd.read_csv(
                path,
                sep=config.separator,
                encoding=config.encoding,
                dtype=str,
                skipinitialspace=True
            )
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise KnowledgeBaseError(f"Error while reading {path}: {e}") from e

        df.columns = [str(column).strip().lower() for column in df.columns]
        missing = [column for column in self.required_columns if column not in df.columns]
        if missing:
            raise KnowledgeBaseError(f"Missing columns in {path}: {missing}")

        df["kind"] = df["kind"].fillna("").str.strip().str.lower()
        unknown_kinds = sorted(set(df["kind"]) - {"cause", "goal"})
        if unknown_kinds:
            raise KnowledgeBaseError(f"Unknown values in column 'kind' of {path}: {unknown_kinds}")

        records = []
        for rule_key in pd.unique(df["rule"]):
            rows = df[df["rule"] == rule_key]
            records.append(self._parse_rule(rows))

        logger.debug(f"[KNOWLEDGE_DB] {path}: {len(df)} rows, {len(records)} rules")
        return _build_knowledge_base(records, {}, path)

    @staticmethod
    def _parse_rule(rows: pd.DataFrame) -> Dict[str, Any]:
        causes = []
        goals = []
        question = None

        for _, row in rows.iterrows():
            fact_id = None if pd.isna(row["fact"]) else str(row["fact"]).strip()
            if row["kind"] == "cause":
                weight = row["weight"] if "weight" in row.index else None
                causes.append((fact_id, None if pd.isna(weight) else weight))
            else:
                goals.append(fact_id)

            if question is None and "question" in row.index and not pd.isna(row["question"]):
                question = str(row["question"]).strip() or None

        record = {"causes": causes, "goals": goals}
        if question:
            record["question"] = question
        return record
