"""
Session Storage - Trwały zapis sesji systemu ekspertowego na dysk.

Moduł zawiera:
    - SessionStorage: Klasa do zapisywania artefaktów sesji

Struktura zapisu:
    sessions/
        {run_id}_{knowledge_db}_{method}/
            metadata.json                         # Konfiguracja + wynik + fakty
            summary.yaml                          # Podsumowanie odpalonych reguł
            rules.txt                             # Reguły bazy wiedzy
            inference_{run_id}.log                # Standardowe logi
            inference_{run_id}_extended.log       # Rozszerzone logi (DEBUG)
"""

import json
import logging
import shutil
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, TYPE_CHECKING

from core.inference import InferenceResult
from core.models import BaseKnowledgeBase
from core.report import SummaryFormatter
from core.summary import InferenceSummary

# Avoid circular import
if TYPE_CHECKING:
    from core.session import ExpertSystemConfig

# Logger dla modułu
logger = logging.getLogger(__name__)


class SessionStorage:
    """
    Storage Layer dla zapisywania sesji na dysk.

    Odpowiedzialności:
        - Tworzenie katalogu dla każdej sesji
        - Zapis metadata.json z konfiguracją i wynikiem
        - Zapis summary.yaml i rules.txt
        - Kopiowanie logów z log_dir do folderu sesji

    Example:
        >>> storage = SessionStorage("sessions")
        >>> storage.save_session(run_id, config, result, summary, knowledge_db)
        PosixPath('sessions/es_20240115_123045_medical_Mixed')
    """

    def __init__(self, base_dir: str = "sessions"):
        """
        Inicjalizuje storage.

        Args:
            base_dir: Katalog bazowy dla sesji (domyślnie "sessions")
        """
        self.base_dir = Path(base_dir)
        self.logger = logging.getLogger(f"{__name__}.SessionStorage")

        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.logger.info(f"SessionStorage zainicjalizowany. Katalog bazowy: {self.base_dir}")

    def save_session(
        self,
        run_id: str,
        config: "ExpertSystemConfig",
        result: InferenceResult,
        summary: InferenceSummary,
        knowledge_db: BaseKnowledgeBase
    ) -> Path:
        """
        Zapisuje pełną sesję na dysk.

        Returns:
            Path do utworzonego folderu sesji

        Raises:
            ValueError: Gdy run_id jest pusty
            OSError: Gdy nie udało się zapisać plików
        """
        if not run_id:
            raise ValueError("run_id nie może być pusty")

        session_dir = self._create_session_directory(run_id, config)

        self._save_metadata(session_dir, run_id, config, result)
        self._save_summary(session_dir, summary)
        self._save_rules(session_dir, knowledge_db)
        self._copy_logs(session_dir, run_id, Path(config.log_dir))

        self.logger.info(f"[STORAGE] Session saved: {session_dir}")
        return session_dir

    def _create_session_directory(self, run_id: str, config: "ExpertSystemConfig") -> Path:
        kb_name = self._sanitize_filename(Path(str(config.knowledge_db)).stem)
        session_dir = self.base_dir / f"{run_id}_{kb_name}_{config.inference_method.value}"
        session_dir.mkdir(parents=True, exist_ok=True)
        self.logger.info(f"[STORAGE] Utworzono katalog: {session_dir}")
        return session_dir

    def _save_metadata(
        self,
        session_dir: Path,
        run_id: str,
        config: "ExpertSystemConfig",
        result: InferenceResult
    ):
        """
        Zapisuje metadata.json.

        Struktura:
            - run_id, timestamp
            - config: pełna konfiguracja sesji (enumy jako stringi)
            - result: status, success, reguły odpalone, metryki
            - inferred_facts: lista {id, sign, algorithm, rule}
        """
        config_dict = asdict(config)
        config_dict['knowledge_db'] = str(config.knowledge_db)
        config_dict['inference_method'] = config.inference_method.value

        metadata = {
            "run_id": run_id,
            "timestamp": datetime.now().isoformat(),
            "config": config_dict,
            "result": {
                "status": result.status.value,
                "success": result.success,
                "algorithm": result.algorithm,
                "rules_shot": result.rules_shot,
                "metrics": {
                    "execution_time_ms": result.execution_time_ms,
                    "iterations": result.iterations,
                    "rules_evaluated": result.rules_evaluated,
                    "inferred_facts_count": len(result.inferred_facts),
                },
            },
            "inferred_facts": [
                {"id": f.id, "sign": f.sign.value, "algorithm": f.algorithm, "rule": f.rule}
                for f in result.inferred_facts
            ],
        }

        metadata_path = session_dir / "metadata.json"
        with open(metadata_path, 'w', encoding='utf-8') as f:
            json.dump(metadata, f, indent=2, ensure_ascii=False)

        self.logger.info(f"[STORAGE] Zapisano metadata.json ({metadata_path.stat().st_size} bytes)")

    def _save_summary(self, session_dir: Path, summary: InferenceSummary):
        summary_path = session_dir / "summary.yaml"
        summary_path.write_text(SummaryFormatter(summary).to_yaml(), encoding='utf-8')
        self.logger.info(f"[STORAGE] Saved summary of {len(summary.rules)} rules to summary.yaml")

    def _save_rules(self, session_dir: Path, knowledge_db: BaseKnowledgeBase):
        """
        Zapisuje reguły do rules.txt.

        Format:
            Rule(0): IF A AND B(0.4) THEN C
        """
        rules_path = session_dir / "rules.txt"
        rules: List = list(knowledge_db)

        with open(rules_path, 'w', encoding='utf-8') as f:
            f.write(f"# Knowledge base rules - Total: {len(rules)}\n")
            f.write(f"# Date: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
            f.write("#" + "=" * 68 + "\n\n")
            for rule in rules:
                f.write(f"{rule}\n")

        self.logger.info(f"[STORAGE] Saved {len(rules)} rules to rules.txt")

    def _copy_logs(self, session_dir: Path, run_id: str, logs_dir: Path):
        """
        Kopiuje pliki logów sesji do jej folderu.

        Brak pliku logów tylko loguje ostrzeżenie (nie przerywa zapisu).
        """
        log_files = [
            f"inference_{run_id}.log",
            f"inference_{run_id}_extended.log"
        ]

        copied_count = 0
        for log_file in log_files:
            source_path = logs_dir / log_file
            if source_path.exists():
                shutil.copy2(source_path, session_dir / log_file)
                self.logger.info(f"[STORAGE] Copied log: {log_file}")
                copied_count += 1
            else:
                self.logger.warning(f"[STORAGE] Log file does not exist: {source_path}")

        self.logger.info(f"[STORAGE] Copied {copied_count}/{len(log_files)} log files")

    @staticmethod
    def _sanitize_filename(filename: str) -> str:
        invalid_chars = '<>:"/\\|?* '
        for char in invalid_chars:
            filename = filename.replace(char, '_')
        return filename.strip() or "knowledge_db"

    def load_session_metadata(self, session_dir: Path) -> Optional[Dict]:
        """Wczytuje metadata.json z folderu sesji (None gdy brak pliku)."""
        metadata_path = Path(session_dir) / "metadata.json"
        if not metadata_path.exists():
            self.logger.error(f"[STORAGE] No metadata.json in {session_dir}")
            return None

        with open(metadata_path, 'r', encoding='utf-8') as f:
            metadata = json.load(f)
        self.logger.info(f"[STORAGE] Loaded metadata from {metadata_path}")
        return metadata

    def list_sessions(self) -> List[Path]:
        """Zwraca foldery sesji, najnowsze pierwsze."""
        sessions = [d for d in self.base_dir.iterdir() if d.is_dir()]
        sessions.sort(key=lambda x: x.stat().st_mtime, reverse=True)
        self.logger.info(f"[STORAGE] Found {len(sessions)} sessions")
        return sessions
