"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from resume_insight.clients.llm_client import create_llm_client
from resume_insight.config import AppConfig, load_config
from resume_insight.errors import InvalidInputError, ResumeInsightError
from resume_insight.logging.usage_store import UsageStore
from resume_insight.models import (
    ANALYSIS_STATUS_COMPLETED,
    AnalysisRecord,
    AnalyzeInput,
    DocumentRecord,
    ResumeExperience,
    ResumeHeader,
    ResumeModel,
)
from resume_insight.parsers.resume_parser import extract_text
from resume_insight.pipeline.analyzer import AnalyzePipeline
from resume_insight.pipeline.apply import ApplyPipeline
from resume_insight.pipeline.validators import AnalysisOutcome
from resume_insight.prompts.registry import PromptTemplateRegistry
from resume_insight.storage.artifact_store import ArtifactStore
from resume_insight.storage.object_store import LocalObjectStore
from resume_insight.storage.repositories import (
    MemoryAnalysisRepository,
    MemoryDocumentRepository,
)
from resume_insight.templates.docx_renderer import save_resume_docx
from resume_insight.utils.json_parser import extract_json

app = typer.Typer(
    name="resume-insight",
    help="Resume analysis and ATS resume generation",
    no_args_is_help=True,
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_client(config: AppConfig):
    usage_store = UsageStore(config.storage.resolved_usage_db_path)
    return create_llm_client(config.llm, usage_store=usage_store)


def _fail(err: ResumeInsightError) -> None:
    console.print(f"[red]{type(err).__name__}: {err}[/red]")
    raise typer.Exit(1)


def _print_recommendations(outcome: AnalysisOutcome) -> None:
    if outcome.recommendations:
        table = Table(title="Recommendations")
        for column in ("#", "Severity", "Impact", "Category", "Title"):
            table.add_column(column)
        for rec in outcome.recommendations:
            table.add_row(str(rec.order), rec.severity, rec.impact, rec.category, rec.title)
        console.print(table)

    plan = outcome.apply_plan
    if plan is not None:
        console.print(
            f"Apply plan: {len(plan.auto_fixes)} auto-fixes, "
            f"{len(plan.safe_rewrites)} safe rewrites, "
            f"{len(plan.blocked_rewrites)} blocked rewrites"
        )
        if plan.needs_input:
            console.print(f"[yellow]Needs input: {', '.join(plan.needs_input)}[/yellow]")


@app.command()
def analyze(
    resume: Path = typer.Argument(help="Resume file (PDF/DOCX/TXT/MD)"),
    jd: Path = typer.Option(None, "--jd", help="Job description text file"),
    schema_version: str = typer.Option("v1", "--schema-version", "-s", help="Analysis schema version"),
    target_role: str = typer.Option("", "--role", help="Target role"),
    output: Path = typer.Option(None, "--out", "-o", help="Write the analysis JSON here"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Analyze a resume and print the validated JSON result."""
    _setup_logging(verbose)
    if not resume.exists():
        console.print(f"[red]Resume file not found: {resume}[/red]")
        raise typer.Exit(1)
    if jd is not None and not jd.exists():
        console.print(f"[red]Job description file not found: {jd}[/red]")
        raise typer.Exit(1)

    try:
        config = load_config()
        data = AnalyzeInput(
            resume_text=extract_text(resume),
            job_description=jd.read_text(encoding="utf-8") if jd else "",
            schema_version=schema_version,
            target_role=target_role,
        )
        pipeline = AnalyzePipeline(_build_client(config))
        with console.status(f"Analyzing ({config.llm.provider}/{config.llm.model})..."):
            outcome = asyncio.run(pipeline.analyze(data))
    except ResumeInsightError as e:
        _fail(e)

    payload = outcome.result.model_dump_json(by_alias=True, indent=2)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload, encoding="utf-8")
        console.print(f"[green]Analysis saved: {output}[/green]")
    else:
        console.print_json(payload)

    console.print(
        Panel(
            f"Requested: {schema_version} | Validated as: {outcome.version}\n"
            f"Prompt hash: {outcome.prompt_hash[:16]}",
            title="Analysis",
        )
    )
    _print_recommendations(outcome)


@app.command()
def apply(
    resume: Path = typer.Argument(help="Resume file the analysis was made from"),
    analysis: Path = typer.Argument(help="Analysis JSON produced by `analyze`"),
    template_id: str = typer.Option("", "--template-id", "-t", help="Resume template id"),
    output: Path = typer.Option(None, "--out", "-o", help="Output .docx path"),
    user_id: str = typer.Option("local", "--user-id", help="Owner of the stored artifact"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Generate an ATS resume .docx from a resume and its analysis."""
    _setup_logging(verbose)
    for path in (resume, analysis):
        if not path.exists():
            console.print(f"[red]File not found: {path}[/red]")
            raise typer.Exit(1)

    try:
        config = load_config()
        try:
            result = extract_json(analysis.read_text(encoding="utf-8"))
        except ValueError as e:
            raise InvalidInputError(f"analysis file is not JSON: {e}") from e
        if not isinstance(result, dict):
            raise InvalidInputError("analysis file must hold a JSON object")

        store = LocalObjectStore(config.storage.local_store_dir)
        text_key = store.save(user_id, f"{resume.stem}.txt", extract_text(resume).encode("utf-8")).key
        document = DocumentRecord(id=str(uuid.uuid4()), user_id=user_id, extracted_text_key=text_key)
        record = AnalysisRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            document_id=document.id,
            status=ANALYSIS_STATUS_COMPLETED,
            result=result,
        )

        pipeline = ApplyPipeline(
            _build_client(config),
            MemoryAnalysisRepository([record]),
            MemoryDocumentRepository([document]),
            ArtifactStore(config.storage.resolved_artifact_db_path),
            store,
        )
        with console.status("Generating resume..."):
            artifact = asyncio.run(
                pipeline.apply(user_id, record.id, template_id or config.apply.template_id)
            )
        data = store.open(artifact.storage_key)
    except ResumeInsightError as e:
        _fail(e)

    if output is None:
        output = Path(f"./output/{resume.stem}_{artifact.template_id}.docx")
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data)
    console.print(f"[green]Resume saved: {output}[/green]")
    console.print(f"[dim]artifact={artifact.id} key={artifact.storage_key} size={artifact.size_bytes}[/dim]")


@app.command("render-demo")
def render_demo(
    output: Path = typer.Argument(Path("./output/demo_resume.docx"), help="Output .docx path"),
) -> None:
    """Render a sample resume with the default template (no LLM call)."""
    model = ResumeModel(
        header=ResumeHeader(
            name="Jane Doe",
            title="Backend Engineer",
            email="jane@example.com",
            links=["https://github.com/janedoe"],
        ),
        summary=["Backend engineer focused on payment APIs and data pipelines."],
        skills={"languages": ["Python", "Go"], "databases": ["PostgreSQL"]},
        experience=[
            ResumeExperience(
                company="Acme",
                role="Software Engineer",
                start="2021-03",
                end="Present",
                highlights=["Built the settlement service handling daily payouts."],
            )
        ],
    )
    path = save_resume_docx(model, output)
    console.print(f"[green]Demo resume saved: {path}[/green]")


@app.command()
def versions() -> None:
    """List the analysis schema versions."""
    registry = PromptTemplateRegistry.default()
    for version in registry.versions:
        marker = " (default)" if version == registry.default_version else ""
        console.print(f"  - {version}{marker}")


@app.command()
def usage(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of recent calls to show"),
) -> None:
    """Show recent LLM calls and their estimated cost."""
    config = load_config()
    store = UsageStore(config.storage.resolved_usage_db_path)
    records = store.get_records(limit=limit)
    if not records:
        console.print("[yellow]No usage recorded yet.[/yellow]")
        return

    table = Table(title="LLM usage")
    for column in ("Time", "Model", "Schema", "Tokens", "Cost ($)", "OK"):
        table.add_column(column)
    for r in records:
        table.add_row(
            r.timestamp.strftime("%Y-%m-%d %H:%M"),
            r.model,
            r.schema_version or "-",
            str(r.total_tokens),
            f"{r.estimated_cost_usd:.4f}",
            "yes" if r.success else "no",
        )
    console.print(table)

    stats = store.get_monthly_stats()
    console.print(
        f"{stats['month']}: {stats['total_calls']} calls, "
        f"{stats['total_prompt_tokens']}+{stats['total_completion_tokens']} tokens, "
        f"${stats['total_cost_usd']:.4f}, {stats['success_rate']:.0f}% ok"
    )
    console.print(f"Total cost: ${store.get_total_cost():.4f}")


@app.command("show-config")
def show_config() -> None:
    """Print the effective configuration."""
    config = load_config()
    console.print_json(
        json.dumps(
            {
                "llm": {
                    "provider": config.llm.provider,
                    "model": config.llm.model,
                    "timeout": config.llm.timeout,
                    "maxTokens": config.llm.max_tokens,
                    "noTemperatureModels": list(config.llm.no_temperature_models),
                },
                "apply": {"templateId": config.apply.template_id},
                "storage": {
                    "localStoreDir": config.storage.local_store_dir,
                    "artifactDb": str(config.storage.resolved_artifact_db_path),
                    "usageDb": str(config.storage.resolved_usage_db_path),
                },
            }
        )
    )


if __name__ == "__main__":
    app()
