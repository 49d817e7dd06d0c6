import json
import pytest
import yaml
from pathlib import Path

from core.exceptions import ConfigurationError, KnowledgeBaseError
from core.inference import InferenceStatus
from core.models import Sign
from core.session import ExpertSystemConfig, ExpertSystemRunner, InferenceMethod, SessionOutcome
from core.storage import SessionStorage
from viewers.scripted import ScriptedViewer


MEDICAL_KB = Path(__file__).parent.parent / "knowledge_bases" / "medical.yaml"


def make_config(tmp_path, **kwargs):
    params = dict(
        knowledge_db=MEDICAL_KB,
        inference_method="Mixed",
        initial_facts=["fever"],
        viewer_class="scripted",
        answers={"cough": "+"},
        log_dir=str(tmp_path / "logs"),
    )
    params.update(kwargs)
    return ExpertSystemConfig(**params)


class TestExpertSystemConfig:



    def test_string_method_is_coerced(self, tmp_path):

        config = make_config(tmp_path, inference_method="backward", goals=["flu"])
        assert config.inference_method is InferenceMethod.BACKWARD

    def test_fact_definitions_are_normalized(self, tmp_path):

        config = make_config(tmp_path, initial_facts=["fever", ["cough", "-"], {"sneezing": "~"}])
        assert config.initial_facts == ["fever", ("cough", Sign.NEGATIVE), ("sneezing", Sign.UNSURE)]

    def test_unknown_method_raises(self, tmp_path):

        with pytest.raises(ConfigurationError, match="Unknown inference method"):
            make_config(tmp_path, inference_method="Sideways")

    def test_backward_requires_goals(self, tmp_path):

        with pytest.raises(ConfigurationError, match="goal"):
            make_config(tmp_path, inference_method="Backward")

    def test_forward_requires_initial_facts(self, tmp_path):

        with pytest.raises(ConfigurationError, match="initial facts"):
            make_config(tmp_path, inference_method="Forward", initial_facts=[])

    def test_found_factor_range(self, tmp_path):

        with pytest.raises(ConfigurationError, match="found_factor"):
            make_config(tmp_path, found_factor=-0.1)

    def test_max_mixed_iterations_positive(self, tmp_path):

        with pytest.raises(ConfigurationError):
            make_config(tmp_path, max_mixed_iterations=0)

    def test_invalid_answer_sign(self, tmp_path):

        with pytest.raises(ConfigurationError):
            make_config(tmp_path, answers={"cough": "maybe"})

    def test_from_file(self, tmp_path):

        kb_path = tmp_path / "kb.yaml"
        kb_path.write_text(MEDICAL_KB.read_text(encoding="utf-8"), encoding="utf-8")
        config_path = tmp_path / "session.yaml"
        config_path.write_text(yaml.safe_dump({
            "knowledge_db": "kb.yaml",
            "inference_method": "Backward",
            "goals": ["flu"],
            "viewer_class": "scripted",
            "answers": {"fever": "+", "cough": "-"},
        }), encoding="utf-8")

        config = ExpertSystemConfig.from_file(config_path)

        assert Path(config.knowledge_db) == kb_path
        assert config.inference_method is InferenceMethod.BACKWARD
        assert config.answers == {"fever": "+", "cough": "-"}

    def test_from_file_unknown_key(self, tmp_path):

        config_path = tmp_path / "session.yaml"
        config_path.write_text("knowledge_db: kb.yaml\ninference_method: Forward\ncolour: red\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="colour"):
            ExpertSystemConfig.from_file(config_path)

    def test_from_file_missing(self, tmp_path):

        with pytest.raises(ConfigurationError, match="does not exist"):
            ExpertSystemConfig.from_file(tmp_path / "missing.yaml")


class TestExpertSystemRunner:



    def test_mixed_session(self, tmp_path):

        config = make_config(tmp_path, run_id="test_mixed")
        outcome = ExpertSystemRunner(config).run()

        assert isinstance(outcome, SessionOutcome)
        assert outcome.run_id == "test_mixed"
        assert outcome.result.status is InferenceStatus.CONCLUDED
        assert [trace.rule_id for trace in outcome.summary.rules] == [0]
        assert outcome.session_dir is None

    def test_backward_session(self, tmp_path):

        config = make_config(
            tmp_path,
            inference_method="Backward",
            initial_facts=[],
            goals=["stay_in_bed"],
            answers={"fever": "+", "cough": "+", "muscle_pain": "+"},
            run_id="test_backward"
        )
        runner = ExpertSystemRunner(config)
        outcome = runner.run()

        assert outcome.result.success is True
        assert runner.engine.inference_facts.get("stay_in_bed", "sign") is Sign.POSITIVE
        assert outcome.result.rules_shot == [0, 1]

    def test_forward_session(self, tmp_path):

        config = make_config(
            tmp_path,
            inference_method="Forward",
            initial_facts=["sneezing", "runny_nose"],
            run_id="test_forward"
        )
        outcome = ExpertSystemRunner(config).run()

        assert outcome.result.rules_shot == [2]
        assert outcome.result.inferred_facts[0].id == "cold"

    def test_writes_dual_logs_and_closes_handlers(self, tmp_path):

        config = make_config(tmp_path, run_id="test_logs")
        runner = ExpertSystemRunner(config)
        runner.run()

        log_dir = tmp_path / "logs"
        standard = (log_dir / "inference_test_logs.log").read_text(encoding="utf-8")
        extended = (log_dir / "inference_test_logs_extended.log").read_text(encoding="utf-8")
        assert "SESSION START" in standard
        assert "[SHOOT]" in standard
        assert "DEBUG" not in standard
        assert "DEBUG" in extended
        assert runner.logger.handlers == []

    def test_injected_viewer_wins(self, tmp_path):

        # config answers alone would leave cough unanswered
        viewer = ScriptedViewer({"cough": "+"})
        config = make_config(tmp_path, answers={}, run_id="test_viewer")
        outcome = ExpertSystemRunner(config, viewer=viewer).run()

        assert viewer.asked_facts == ["cough"]
        assert outcome.result.status is InferenceStatus.CONCLUDED

    def test_unsure_answers_stall_mixed(self, tmp_path):

        config = make_config(tmp_path, answers={}, run_id="test_stall")
        outcome = ExpertSystemRunner(config).run()

        assert outcome.result.status is InferenceStatus.STALLED
        assert outcome.result.success is False

    def test_missing_knowledge_base_raises(self, tmp_path):

        config = make_config(tmp_path, knowledge_db=tmp_path / "missing.yaml", run_id="test_missing")
        runner = ExpertSystemRunner(config)
        with pytest.raises(KnowledgeBaseError):
            runner.run()
        assert runner.logger.handlers == []

    def test_storage_saves_session(self, tmp_path):

        config = make_config(tmp_path, run_id="test_storage", output_dir=str(tmp_path / "sessions"))
        outcome = ExpertSystemRunner(config).run()

        session_dir = outcome.session_dir
        assert session_dir == tmp_path / "sessions" / "test_storage_medical_Mixed"
        metadata = json.loads((session_dir / "metadata.json").read_text(encoding="utf-8"))
        assert metadata["run_id"] == "test_storage"
        assert metadata["result"]["status"] == "concluded"
        assert metadata["config"]["inference_method"] == "Mixed"
        assert metadata["inferred_facts"][0]["id"] == "flu"

        summary = yaml.safe_load((session_dir / "summary.yaml").read_text(encoding="utf-8"))
        assert 0 in summary["rules"]
        assert "Rule(0): IF fever AND cough THEN flu" in (session_dir / "rules.txt").read_text(encoding="utf-8")
        assert (session_dir / "inference_test_storage.log").exists()
        assert (session_dir / "inference_test_storage_extended.log").exists()

        storage = SessionStorage(str(tmp_path / "sessions"))
        assert storage.list_sessions() == [session_dir]
        assert storage.load_session_metadata(session_dir)["run_id"] == "test_storage"
