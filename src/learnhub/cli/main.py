"""Main CLI entry point for learnhub.

This module defines the Typer application and all CLI commands.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import typer

from learnhub import __version__
from learnhub.adapters.llm.ollama import OllamaLLM
from learnhub.adapters.search.opensearch import OpenSearchBackend
from learnhub.core.config import OrchestratorConfig, RelevanceConfig, Settings
from learnhub.core.distribution import distribute as distribute_questions
from learnhub.core.exceptions import BackendUnavailableError, LearnHubError, RequestValidationError
from learnhub.core.orchestrator import GenerationOrchestrator
from learnhub.generators.llm import LLMQuestionGenerator
from learnhub.generators.templates import TemplateQuestionGenerator
from learnhub.relevance.retriever import RelevanceRetriever

if TYPE_CHECKING:
    from learnhub.core.types import GenerationResponse

# Exit code for requests rejected by validation
EXIT_INVALID_REQUEST = 2

# Create the main Typer app
app = typer.Typer(
    name="learnhub",
    help="learnhub: Personalized multi-type practice question generation.",
    add_completion=False,
    no_args_is_help=True,
)

# Global state for options
state: dict[str, bool] = {
    "json": False,
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"learnhub v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results in JSON format.",
        ),
    ] = False,
) -> None:
    """learnhub: Personalized multi-type practice question generation.

    Distribute, generate and format practice questions for a student.
    """
    state["json"] = json_output
    settings = Settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def version() -> None:
    """Show the current version."""
    typer.echo(f"learnhub v{__version__}")


@app.command()
def distribute(
    total: Annotated[int, typer.Argument(help="Total number of questions.")],
    types: Annotated[list[str], typer.Argument(help="Question types, in request order.")],
) -> None:
    """Show how many questions each type gets.

    Example:
        learnhub distribute 10 ADDITION SUBTRACTION MULTIPLICATION
    """
    try:
        distribution = distribute_questions(total, types)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_INVALID_REQUEST) from None

    if state["json"]:
        typer.echo(json.dumps(distribution, indent=2))
        return

    typer.echo()
    for question_type, count in distribution.items():
        typer.echo(f"  {question_type:<24} {count}")
    typer.echo()


@app.command()
def health() -> None:
    """Probe the configured search cluster.

    Example:
        LEARNHUB_OPENSEARCH_URL=http://search:9200 learnhub health
    """
    settings = Settings()
    backend = OpenSearchBackend.from_settings(settings)

    try:
        cluster = asyncio.run(backend.health())
    except BackendUnavailableError as e:
        if state["json"]:
            typer.echo(json.dumps({"url": backend.url, "status": "unreachable", "error": str(e)}, indent=2))
        else:
            typer.echo(f"  {backend.url}: unreachable ({e})", err=True)
        raise typer.Exit(1) from None

    result = {
        "url": backend.url,
        "index": backend.index,
        "status": cluster.status.value,
        "cluster": cluster.cluster_name,
        "usable": cluster.status.is_usable,
    }
    if state["json"]:
        typer.echo(json.dumps(result, indent=2))
    else:
        name = f" ({cluster.cluster_name})" if cluster.cluster_name else ""
        typer.echo(f"  {backend.url}{name}: {cluster.status.value}")

    if not cluster.status.is_usable:
        raise typer.Exit(1)


async def _run_generation(
    payload: dict[str, Any],
    settings: Settings,
    *,
    offline: bool,
    seed: int | None,
    timeout: float | None,
) -> GenerationResponse:
    rng = random.Random(seed)
    config = OrchestratorConfig.from_settings(settings)
    relevance_config = RelevanceConfig.from_settings(settings)

    if offline:
        orchestrator = GenerationOrchestrator(
            TemplateQuestionGenerator(rng),
            RelevanceRetriever(config=relevance_config),
            config=config,
            rng=rng,
        )
        return await orchestrator.generate_from_payload(payload, timeout=timeout)

    async with OllamaLLM.from_settings(settings) as llm, OpenSearchBackend.from_settings(settings) as backend:
        orchestrator = GenerationOrchestrator(
            LLMQuestionGenerator(llm),
            RelevanceRetriever(backend, config=relevance_config),
            config=config,
            rng=rng,
        )
        return await orchestrator.generate_from_payload(payload, timeout=timeout)


def _print_response(response: GenerationResponse) -> None:
    metrics = response.quality_metrics
    typer.echo()
    typer.echo(f"  Session: {response.session_id}")
    typer.echo(f"  {response.personalization_applied.summary}")
    typer.echo()

    number = 0
    for question_type, count in response.type_distribution.items():
        if count == 0:
            continue
        typer.echo(f"  {question_type} ({count})")
        for question in response.questions_for(question_type):
            number += 1
            typer.echo(f"    {number}. {question.question}")
            for letter, option in zip("ABCDEFGH", question.options or []):
                typer.echo(f"       {letter}) {option}")
            typer.echo(f"       Answer: {question.answer}")
        typer.echo()

    typer.echo("  " + "-" * 40)
    typer.echo(f"    Relevance:        {metrics.vector_relevance_score:.4f}")
    typer.echo(f"    Validation:       {metrics.agentic_validation_score:.4f}")
    typer.echo(f"    Personalization:  {metrics.personalization_score:.4f}")
    typer.echo("  " + "-" * 40)

    for warning in response.warnings:
        typer.echo(f"  Warning: {warning}", err=True)
    typer.echo()


@app.command()
def generate(
    grade: Annotated[
        int,
        typer.Option(
            "--grade",
            "-g",
            help="Grade of the student (1-12).",
        ),
    ],
    question_types: Annotated[
        list[str],
        typer.Option(
            "--type",
            "-t",
            help="Question type; repeat for several types, in order.",
        ),
    ],
    interests: Annotated[
        list[str],
        typer.Option(
            "--interest",
            "-i",
            help="Student interest; repeat for several (1-5).",
        ),
    ],
    num_questions: Annotated[
        int,
        typer.Option(
            "--num",
            "-n",
            help="Total number of questions.",
        ),
    ] = 10,
    subject: Annotated[
        str,
        typer.Option(
            "--subject",
            help="Subject identifier.",
        ),
    ] = "mathematics",
    category: Annotated[
        str,
        typer.Option(
            "--category",
            "-c",
            help="Category identifier, e.g. number-operations.",
        ),
    ] = "number-operations",
    question_format: Annotated[
        str,
        typer.Option(
            "--format",
            "-f",
            help="multiple_choice, short_answer, true_false or fill_in_blank.",
        ),
    ] = "multiple_choice",
    difficulty: Annotated[
        str,
        typer.Option(
            "--difficulty",
            "-d",
            help="easy, medium or hard.",
        ),
    ] = "medium",
    learning_style: Annotated[
        str,
        typer.Option(
            "--style",
            help="visual, auditory, kinesthetic or reading_writing.",
        ),
    ] = "visual",
    motivators: Annotated[
        list[str] | None,
        typer.Option(
            "--motivator",
            "-m",
            help="Student motivator; repeat for several (up to 3).",
        ),
    ] = None,
    focus_areas: Annotated[
        list[str] | None,
        typer.Option(
            "--focus",
            help="Topic to emphasize; repeat for several.",
        ),
    ] = None,
    no_explanations: Annotated[
        bool,
        typer.Option(
            "--no-explanations",
            help="Do not ask for worked explanations.",
        ),
    ] = False,
    offline: Annotated[
        bool,
        typer.Option(
            "--offline",
            help="Use built-in templates instead of Ollama and OpenSearch.",
        ),
    ] = False,
    seed: Annotated[
        int | None,
        typer.Option(
            "--seed",
            help="Random seed for option order and template content.",
        ),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option(
            "--timeout",
            help="Give up after this many seconds.",
        ),
    ] = None,
    output: Annotated[
        str | None,
        typer.Option(
            "--output",
            "-o",
            help="Output file path for the generated questions.",
        ),
    ] = None,
) -> None:
    """Generate a personalized multi-type question set.

    Example:
        learnhub generate -g 3 -t ADDITION -t SUBTRACTION -i Sports -n 10 --offline
    """
    settings = Settings()
    payload: dict[str, Any] = {
        "subject": subject,
        "category": category,
        "gradeLevel": grade,
        "questionTypes": question_types,
        "questionFormat": question_format,
        "difficultyLevel": difficulty,
        "numberOfQuestions": num_questions,
        "learningStyle": learning_style,
        "interests": interests,
        "motivators": motivators or [],
        "focusAreas": focus_areas or [],
        "includeExplanations": not no_explanations,
    }

    try:
        response = asyncio.run(
            _run_generation(
                payload,
                settings,
                offline=offline,
                seed=seed,
                timeout=timeout,
            )
        )
    except RequestValidationError as e:
        if state["json"]:
            typer.echo(json.dumps({"status": "invalid", "errors": e.messages}, indent=2))
        else:
            typer.echo("  Invalid request:", err=True)
            for message in e.messages:
                typer.echo(f"    - {message}", err=True)
        raise typer.Exit(EXIT_INVALID_REQUEST) from None
    except LearnHubError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    payload_out = response.to_payload()
    if state["json"]:
        typer.echo(json.dumps(payload_out, indent=2))
    else:
        _print_response(response)

    if output:
        Path(output).write_text(json.dumps(payload_out, indent=2))
        if not state["json"]:
            typer.echo(f"  Questions saved to: {output}")
            typer.echo()


if __name__ == "__main__":
    app()
