"""CLI for running the expert system against a knowledge base file."""

from typing import Optional, Tuple

import click

from core.exceptions import ExpertSystemError
from core.report import SummaryFormatter
from core.session import ExpertSystemConfig, ExpertSystemRunner, InferenceMethod, SessionOutcome
from knowledge_db.factory import KnowledgeBaseFactory


def _parse_pair(text: str) -> Tuple[str, str]:
    # "A" -> ("A", "+"), "A=-" -> ("A", "-")
    fact_id, sep, sign = text.partition("=")
    fact_id = fact_id.strip()
    if not fact_id:
        raise click.BadParameter(f"Empty fact id in {text!r}")
    return fact_id, (sign.strip() if sep else "+")


def _echo_outcome(outcome: SessionOutcome, output_format: str) -> None:
    result = outcome.result
    formatter = SummaryFormatter(outcome.summary)

    if output_format == "yaml":
        click.echo(formatter.to_yaml(), nl=False)
    else:
        click.echo(formatter.to_text())

    facts = ", ".join(f"{f.id}{f.sign.value}" for f in result.inferred_facts) or "-"
    click.echo(f"Status: {result.status.value}")
    click.echo(f"Inferred facts: {facts}")
    if outcome.session_dir is not None:
        click.echo(f"Session saved to: {outcome.session_dir}")


def _run(config: ExpertSystemConfig, output_format: str) -> None:
    try:
        outcome = ExpertSystemRunner(config).run()
    except ExpertSystemError as e:
        raise click.ClickException(str(e))

    _echo_outcome(outcome, output_format)
    if not outcome.result.success:
        raise SystemExit(2)


@click.group()
def cli() -> None:
    """Forward, backward and mixed chaining over a rule knowledge base."""
    pass


@cli.command()
@click.argument("knowledge_db", type=click.Path(dir_okay=False))
@click.option("-m", "--method", type=click.Choice([m.value for m in InferenceMethod], case_sensitive=False),
              default=InferenceMethod.FORWARD.value, show_default=True, help="Inference algorithm.")
@click.option("-f", "--fact", "facts", multiple=True, help="Initial fact: ID or ID=SIGN (+, -, ~).")
@click.option("-g", "--goal", "goals", multiple=True, help="Goal to check (backward).")
@click.option("-a", "--answer", "answers", multiple=True, help="Scripted answer: ID=SIGN.")
@click.option("--found-factor", type=float, default=0.5, show_default=True, help="Mixed chaining threshold.")
@click.option("--max-iterations", type=int, default=100, show_default=True, help="Mixed chaining iteration limit.")
@click.option("--format", "kb_format", default=None, help="Knowledge base format (default: file extension).")
@click.option("--viewer", default=None, help="Viewer class (default: scripted when answers are given, else terminal).")
@click.option("-v", "--verbose", is_flag=True, help="Print engine debug messages.")
@click.option("--log-dir", default="logs", show_default=True)
@click.option("--output-dir", default=None, help="Save the session (metadata, summary, logs) here.")
@click.option("--output-format", type=click.Choice(["text", "yaml"]), default="text", show_default=True)
def run(
    knowledge_db: str,
    method: str,
    facts: Tuple[str, ...],
    goals: Tuple[str, ...],
    answers: Tuple[str, ...],
    found_factor: float,
    max_iterations: int,
    kb_format: Optional[str],
    viewer: Optional[str],
    verbose: bool,
    log_dir: str,
    output_dir: Optional[str],
    output_format: str,
) -> None:
    """Run inference on KNOWLEDGE_DB."""
    answer_map = dict(_parse_pair(text) for text in answers)
    try:
        config = ExpertSystemConfig(
            knowledge_db=knowledge_db,
            inference_method=method,
            initial_facts=[_parse_pair(text) for text in facts],
            goals=[_parse_pair(text)[0] for text in goals],
            knowledge_db_format=kb_format,
            viewer_class=viewer or ("scripted" if answer_map else "terminal"),
            found_factor=found_factor,
            max_mixed_iterations=max_iterations,
            verbose=verbose,
            log_dir=log_dir,
            answers=answer_map,
            output_dir=output_dir,
        )
    except ExpertSystemError as e:
        raise click.ClickException(str(e))

    _run(config, output_format)


@cli.command("run-config")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--output-format", type=click.Choice(["text", "yaml"]), default="text", show_default=True)
def run_config(config_file: str, output_format: str) -> None:
    """Run a session described by a YAML config file."""
    try:
        config = ExpertSystemConfig.from_file(config_file)
    except ExpertSystemError as e:
        raise click.ClickException(str(e))

    _run(config, output_format)


@cli.command()
@click.argument("knowledge_db", type=click.Path(dir_okay=False))
@click.option("--format", "kb_format", default=None, help="Knowledge base format (default: file extension).")
def rules(knowledge_db: str, kb_format: Optional[str]) -> None:
    """List the rules of KNOWLEDGE_DB."""
    try:
        kb = KnowledgeBaseFactory.from_path(knowledge_db, kb_format)
    except ExpertSystemError as e:
        raise click.ClickException(str(e))

    for rule in kb:
        click.echo(str(rule))
    click.echo(f"Total: {kb.rule_count()} rules")
