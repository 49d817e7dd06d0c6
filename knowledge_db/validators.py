from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional
from pathlib import Path
import math
import os


@dataclass
class ValidationError:

    code: str
    message: str
    is_critical: bool


@dataclass
class ValidationResult:

    is_valid: bool
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def first_critical(self) -> Optional[ValidationError]:
        for error in self.errors:
            if error.is_critical:
                return error
        return None


def validate_file_path(path: Path, allowed_suffixes: Iterable[str] = (".yaml", ".yml", ".csv")) -> ValidationResult:

    errors = []

    if not path.exists():
        errors.append(ValidationError(
            code="K01",
            message=f"Plik bazy wiedzy nie istnieje: {path}",
            is_critical=True
        ))
        return ValidationResult(is_valid=False, errors=errors)

    if path.is_dir():
        errors.append(ValidationError(
            code="K02",
            message=f"Ścieżka wskazuje na folder, nie plik: {path}",
            is_critical=True
        ))
        return ValidationResult(is_valid=False, errors=errors)

    if not os.access(path, os.R_OK):
        errors.append(ValidationError(
            code="K03",
            message=f"Brak uprawnień do odczytu pliku: {path}",
            is_critical=True
        ))
        return ValidationResult(is_valid=False, errors=errors)

    allowed = {suffix.lower() for suffix in allowed_suffixes}
    if path.suffix.lower() not in allowed:
        errors.append(ValidationError(
            code="K04",
            message=f"Niepoprawne rozszerzenie pliku: {path.suffix or '(brak)'}. Dozwolone: {', '.join(sorted(allowed))}",
            is_critical=True
        ))
        return ValidationResult(is_valid=False, errors=errors)

    if path.stat().st_size == 0:
        errors.append(ValidationError(
            code="K05",
            message=f"Plik jest pusty (0 bajtów): {path}",
            is_critical=True
        ))
        return ValidationResult(is_valid=False, errors=errors)

    return ValidationResult(is_valid=True, errors=[])


def _is_bad_weight(weight: Any) -> bool:
    if weight is None:
        return False
    try:
        value = float(weight)
    except (TypeError, ValueError):
        return True
    return math.isnan(value) or value < 0


def validate_rule_records(records: List[Dict[str, Any]]) -> ValidationResult:
    # records: [{"causes": [(fact_id, weight), ...], "goals": [fact_id, ...]}, ...]

    errors = []
    warnings = []

    if not records:
        errors.append(ValidationError(
            code="R01",
            message="Couldn't find any rules",
            is_critical=True
        ))
        return ValidationResult(is_valid=False, errors=errors)

    for index, record in enumerate(records):
        goals = record.get("goals") or []
        causes = record.get("causes") or []

        if not goals:
            errors.append(ValidationError(
                code="R02",
                message=f"Reguła {index} nie ma celów (goals)",
                is_critical=True
            ))

        if not causes:
            errors.append(ValidationError(
                code="R03",
                message=f"Reguła {index} nie ma przyczyn (causes)",
                is_critical=True
            ))

        for fact_id, weight in causes:
            if _is_bad_weight(weight):
                errors.append(ValidationError(
                    code="R04",
                    message=f"Reguła {index}: niepoprawna waga przyczyny '{fact_id}': {weight!r}",
                    is_critical=True
                ))

        fact_ids = [fact_id for fact_id, _ in causes] + list(goals)
        if any(fact_id is None or not str(fact_id).strip() for fact_id in fact_ids):
            errors.append(ValidationError(
                code="R05",
                message=f"Reguła {index} zawiera pusty identyfikator faktu",
                is_critical=True
            ))

        cause_ids = [fact_id for fact_id, _ in causes]
        if len(cause_ids) != len(set(cause_ids)):
            warnings.append(f"Reguła {index} zawiera powtórzone przyczyny")

    is_valid = len(errors) == 0
    return ValidationResult(is_valid=is_valid, errors=errors, warnings=warnings)
