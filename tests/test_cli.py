import pytest
import yaml
from pathlib import Path
from click.testing import CliRunner

from core.cli import cli


KNOWLEDGE_BASES = Path(__file__).parent.parent / "knowledge_bases"
MEDICAL_KB = str(KNOWLEDGE_BASES / "medical.yaml")


@pytest.fixture
def runner():
    return CliRunner()


class TestRunCommand:



    def test_mixed_with_answers(self, runner, tmp_path):

        result = runner.invoke(cli, [
            "run", MEDICAL_KB, "-m", "mixed", "-f", "fever", "-a", "cough=+",
            "--log-dir", str(tmp_path)
        ])

        assert result.exit_code == 0, result.output
        assert "Status: concluded" in result.output
        assert "Inferred facts: flu+" in result.output
        assert "Rule 0" in result.output

    def test_forward_yaml_output(self, runner, tmp_path):

        result = runner.invoke(cli, [
            "run", MEDICAL_KB, "-f", "sneezing", "-f", "runny_nose",
            "--log-dir", str(tmp_path), "--output-format", "yaml"
        ])

        assert result.exit_code == 0, result.output
        assert "rules:" in result.output
        assert "Inferred facts: cold+" in result.output

    def test_negative_initial_fact(self, runner, tmp_path):

        result = runner.invoke(cli, [
            "run", MEDICAL_KB, "-f", "fever", "-f", "cough=-", "--log-dir", str(tmp_path)
        ])

        assert result.exit_code == 0, result.output
        assert "Inferred facts: flu-" in result.output

    def test_backward_with_terminal_viewer(self, runner, tmp_path):

        result = runner.invoke(cli, [
            "run", MEDICAL_KB, "-m", "Backward", "-g", "flu", "--log-dir", str(tmp_path)
        ], input="+\n+\n")

        assert result.exit_code == 0, result.output
        assert "Does the patient have a fever?" in result.output
        assert "Is the patient coughing?" in result.output
        assert "Inferred facts: flu+" in result.output

    def test_unsure_exits_with_failure_status(self, runner, tmp_path):

        result = runner.invoke(cli, [
            "run", MEDICAL_KB, "-m", "Backward", "-g", "flu", "-a", "fever=~",
            "--log-dir", str(tmp_path)
        ])

        assert result.exit_code == 2
        assert "Status: aborted" in result.output

    def test_backward_without_goal_is_error(self, runner, tmp_path):

        result = runner.invoke(cli, ["run", MEDICAL_KB, "-m", "Backward", "--log-dir", str(tmp_path)])

        assert result.exit_code == 1
        assert "requires at least one goal" in result.output

    def test_missing_knowledge_base_is_error(self, runner, tmp_path):

        result = runner.invoke(cli, [
            "run", str(tmp_path / "missing.yaml"), "-f", "A", "--log-dir", str(tmp_path)
        ])

        assert result.exit_code == 1
        assert "K01" in result.output


class TestRunConfigCommand:



    def test_bundled_session_config(self, runner, tmp_path):

        config = yaml.safe_load((KNOWLEDGE_BASES / "medical_session.yaml").read_text(encoding="utf-8"))
        config["knowledge_db"] = MEDICAL_KB
        config["log_dir"] = str(tmp_path / "logs")
        config_path = tmp_path / "session.yaml"
        config_path.write_text(yaml.safe_dump(config), encoding="utf-8")

        result = runner.invoke(cli, ["run-config", str(config_path)])

        assert result.exit_code == 0, result.output
        assert "Status: concluded" in result.output


class TestRulesCommand:



    def test_lists_rules(self, runner):

        result = runner.invoke(cli, ["rules", MEDICAL_KB])

        assert result.exit_code == 0
        assert "Rule(0): IF fever AND cough THEN flu" in result.output
        assert "Total: 4 rules" in result.output

    def test_csv_rules(self, runner):

        result = runner.invoke(cli, ["rules", str(KNOWLEDGE_BASES / "medical.csv")])

        assert result.exit_code == 0
        assert "Rule(2): IF sneezing(0.6) AND runny_nose(0.4) THEN cold" in result.output
