"""
Session Manager - Orkiestracja sesji systemu ekspertowego.

Moduł zawiera:
    - InferenceMethod: Metoda wnioskowania (Forward, Backward, Mixed)
    - ExpertSystemConfig: Konfiguracja sesji (dataclass, również z pliku YAML)
    - SessionOutcome: Wynik sesji
    - ExpertSystemRunner: Wykonuje pełny pipeline sesji

Pipeline sesji:
    1. Logger sesji (dual logging do log_dir)
    2. Wczytanie bazy wiedzy (KnowledgeBaseFactory)
    3. Viewer (ViewerFactory, chyba że podano gotowy)
    4. Wnioskowanie (InferenceEngine.forward/backward/mixed)
    5. Podsumowanie (InferenceEngine.summary)
    6. Zapis na dysk - opcjonalnie (SessionStorage)
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging

import yaml

from core.exceptions import ConfigurationError
from core.inference import InferenceEngine, InferenceResult
from core.logger_config import close_logger, setup_logger
from core.models import Sign
from core.storage import SessionStorage
from core.summary import InferenceSummary
from knowledge_db.factory import KnowledgeBaseFactory
from viewers.base import BaseViewer
from viewers.factory import ViewerFactory

# Logger dla modułu
logger = logging.getLogger(__name__)


class InferenceMethod(str, Enum):
    """Enum dla metod wnioskowania."""
    FORWARD = "Forward"
    BACKWARD = "Backward"
    MIXED = "Mixed"

    @classmethod
    def parse(cls, value: Union["InferenceMethod", str]) -> "InferenceMethod":
        if isinstance(value, cls):
            return value
        for method in cls:
            if str(value).strip().lower() == method.value.lower():
                return method
        raise ConfigurationError(
            f"Unknown inference method: {value!r}. Available: {[m.value for m in cls]}"
        )


def _parse_sign(value: Any) -> Sign:
    try:
        return Sign.parse(value if isinstance(value, Sign) else str(value))
    except ValueError as e:
        raise ConfigurationError(str(e)) from None


def _normalize_fact(item: Any) -> Union[str, tuple]:
    # "A" albo ["A", "-"] / ("A", "-") albo {"A": "-"}
    if isinstance(item, str):
        return item
    if isinstance(item, dict) and len(item) == 1:
        (fact_id, sign), = item.items()
        return (str(fact_id), _parse_sign(sign))
    if isinstance(item, (list, tuple)) and len(item) == 2:
        return (str(item[0]), _parse_sign(item[1]))
    raise ConfigurationError(f"Invalid fact definition: {item!r}")


@dataclass
class ExpertSystemConfig:
    """
    Konfiguracja sesji systemu ekspertowego.

    Attributes:
        knowledge_db: Ścieżka do pliku bazy wiedzy
        inference_method: Metoda wnioskowania (Forward, Backward, Mixed)
        initial_facts: Fakty początkowe - id (znak +) albo para (id, znak)
        goals: Cele do sprawdzenia (wymagane dla Backward)
        knowledge_db_format: Format bazy wiedzy (None = z rozszerzenia pliku)
        viewer_class: Rodzaj viewera z ViewerFactory ("terminal", "scripted")
        found_factor: Próg współczynnika dopasowania dla Mixed (0.0-1.0)
        max_mixed_iterations: Limit przejść pętli Mixed
        verbose: Narracja silnika w viewer.debug()
        log_dir: Katalog plików logów
        log_to_console: Czy logi sesji idą też na stdout
        answers: Odpowiedzi dla viewera "scripted" (fakt -> znak)
        run_id: Identyfikator sesji (None = wygenerowany z czasu)
        output_dir: Katalog zapisu sesji (None = bez zapisu)
    """

    # WYMAGANE
    knowledge_db: Union[str, Path]
    inference_method: InferenceMethod

    initial_facts: List[Any] = field(default_factory=list)
    goals: List[Any] = field(default_factory=list)
    knowledge_db_format: Optional[str] = None
    viewer_class: str = "terminal"
    found_factor: float = 0.5
    max_mixed_iterations: int = 100
    verbose: bool = False
    log_dir: str = "logs"
    log_to_console: bool = False
    answers: Dict[str, str] = field(default_factory=dict)
    run_id: Optional[str] = None
    output_dir: Optional[str] = None

    def __post_init__(self):
        """Walidacja konfiguracji."""
        # Konwersja stringów na enumy jeśli przekazano stringi
        self.inference_method = InferenceMethod.parse(self.inference_method)

        if not self.knowledge_db:
            raise ConfigurationError("knowledge_db must point to a knowledge base file")

        self.initial_facts = [_normalize_fact(item) for item in (self.initial_facts or [])]
        self.goals = [_normalize_fact(item) for item in (self.goals or [])]
        self.answers = {str(fact): _parse_sign(sign).value for fact, sign in (self.answers or {}).items()}

        if not 0.0 <= self.found_factor <= 1.0:
            raise ConfigurationError(f"found_factor must be in range [0.0, 1.0], got: {self.found_factor}")

        if self.max_mixed_iterations <= 0:
            raise ConfigurationError("max_mixed_iterations must be greater than 0")

        if self.inference_method == InferenceMethod.BACKWARD and not self.goals:
            raise ConfigurationError("Backward Chaining requires at least one goal")

        if self.inference_method in (InferenceMethod.FORWARD, InferenceMethod.MIXED) and not self.initial_facts:
            raise ConfigurationError(f"{self.inference_method.value} Chaining requires initial facts")

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ExpertSystemConfig":
        """
        Wczytuje konfigurację z pliku YAML.

        Względna ścieżka knowledge_db liczona jest od katalogu pliku konfiguracji.

        Raises:
            ConfigurationError: Gdy plik nie istnieje, nie jest mapowaniem
                                albo zawiera nieznane klucze
        """
        path = Path(path)
        if not path.is_file():
            raise ConfigurationError(f"Config file does not exist: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown config keys in {path}: {unknown}")

        if "knowledge_db" in data and not Path(str(data["knowledge_db"])).is_absolute():
            data["knowledge_db"] = str(path.parent / str(data["knowledge_db"]))

        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigurationError(f"Invalid config in {path}: {e}") from e


@dataclass
class SessionOutcome:
    run_id: str
    result: InferenceResult
    summary: InferenceSummary
    session_dir: Optional[Path] = None


class ExpertSystemRunner:
    """
    Runner sesji systemu ekspertowego.

    Example:
        >>> config = ExpertSystemConfig(
        ...     knowledge_db="knowledge_bases/medical.yaml",
        ...     inference_method="Backward",
        ...     goals=["flu"],
        ...     viewer_class="scripted",
        ...     answers={"fever": "+", "cough": "+"}
        ... )
        >>> outcome = ExpertSystemRunner(config).run()
        >>> outcome.result.status
        <InferenceStatus.COMPLETED: 'completed'>
    """

    def __init__(self, config: ExpertSystemConfig, viewer: Optional[BaseViewer] = None):
        """
        Inicjalizuje runner.

        Args:
            config: Konfiguracja sesji
            viewer: Gotowy viewer (ma pierwszeństwo przed config.viewer_class)
        """
        self.config = config
        self.viewer = viewer
        self.storage = SessionStorage(config.output_dir) if config.output_dir else None

        self.run_id: Optional[str] = None
        self.logger: logging.Logger = logger
        self.engine: Optional[InferenceEngine] = None

    def run(self) -> SessionOutcome:
        """
        Uruchamia pełny pipeline sesji.

        Raises:
            ConfigurationError: Nieznany viewer lub format bazy wiedzy
            KnowledgeBaseError: Niepoprawny plik bazy wiedzy
            PreconditionError: Algorytm bez faktów początkowych / celów
        """
        self.run_id = self.config.run_id or self._generate_run_id()
        self.logger = setup_logger(self.run_id, log_dir=self.config.log_dir, console=self.config.log_to_console)

        try:
            self.logger.info("=" * 70)
            self.logger.info("SESSION START")
            self.logger.info("=" * 70)
            self.logger.info(f"Run ID: {self.run_id}")
            self.logger.info(f"Knowledge base: {self.config.knowledge_db}")
            self.logger.info(f"Configuration: method={self.config.inference_method.value}, "
                             f"found_factor={self.config.found_factor}, "
                             f"viewer={self.config.viewer_class}")

            # KROK 1: Baza wiedzy
            knowledge_db = KnowledgeBaseFactory.from_path(self.config.knowledge_db, self.config.knowledge_db_format)

            # KROK 2: Viewer
            viewer = self.viewer if self.viewer is not None else self._create_viewer()

            # KROK 3: Silnik
            self.engine = InferenceEngine(
                knowledge_db,
                viewer=viewer,
                initial_facts=self.config.initial_facts,
                goals_to_check=self.config.goals,
                found_factor=self.config.found_factor,
                verbose=self.config.verbose,
                max_mixed_iterations=self.config.max_mixed_iterations,
                run_id=self.run_id,
                logger=self.logger
            )

            # KROK 4: Wnioskowanie
            result = self._run_inference()

            # KROK 5: Podsumowanie
            summary = self.engine.summary()

            self.logger.info("=" * 70)
            self.logger.info("SESSION COMPLETED")
            self.logger.info(f"Result: {result.status.value}, {len(result.inferred_facts)} inferred facts, "
                             f"rules shot: {result.rules_shot}, {result.execution_time_ms:.2f} ms")
            self.logger.info("=" * 70)

            # KROK 6: Zapis (opcjonalnie)
            session_dir = None
            if self.storage is not None:
                for handler in self.logger.handlers:
                    handler.flush()
                session_dir = self.storage.save_session(
                    run_id=self.run_id,
                    config=self.config,
                    result=result,
                    summary=summary,
                    knowledge_db=knowledge_db
                )

            return SessionOutcome(self.run_id, result, summary, session_dir)
        except Exception as e:
            self.logger.error(f"[SESSION] Session {self.run_id} failed: {e}")
            raise
        finally:
            close_logger(self.logger)

    def _create_viewer(self) -> BaseViewer:
        params = {}
        if self.config.viewer_class.lower() == "scripted":
            params["answers"] = self.config.answers
        return ViewerFactory.create(self.config.viewer_class, **params)

    def _run_inference(self) -> InferenceResult:
        method = self.config.inference_method
        if method == InferenceMethod.FORWARD:
            return self.engine.forward()
        elif method == InferenceMethod.BACKWARD:
            return self.engine.backward()
        elif method == InferenceMethod.MIXED:
            return self.engine.mixed()
        raise ConfigurationError(f"Unknown inference method: {method}")

    def _generate_run_id(self) -> str:
        """
        Generuje unikalny identyfikator sesji.
        Np. "es_20240115_123045"
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"es_{timestamp}"
