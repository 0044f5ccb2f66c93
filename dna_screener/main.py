# dna_screener/main.py

"""
Command-line interface (CLI) entry point for the DNA Customer Screener.

Streams the pipeline's events to the terminal (or as raw SSE frames with
``--sse``), then prints the decision and the per-criterion checks.
"""
import asyncio
import json
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

import config.settings as settings

from dna_screener.graph.workflow import ScreeningWorkflow
from dna_screener.llm import CompletionClient, CostTracker, LLMFactory
from dna_screener.models.inputs import ScreeningRequest
from dna_screener.models.outputs import CompleteData
from dna_screener.observability.tracer import setup_tracing_environment
from dna_screener.utils.logger import get_logger
from dna_screener.utils.sse import SSE_DONE, format_sse
from dna_screener.utils.validators import validate_customer_info

logger = get_logger("CLI")
console = Console()

STATUS_COLORS = {"PASS": "green", "FLAG": "red", "REVIEW": "yellow"}
CHECK_COLORS = {"NO FLAG": "green", "FLAG": "red", "UNDETERMINED": "yellow"}

# --- Helper Functions for Output Formatting ---


def print_summary_table(data: CompleteData, usage: dict):
    """Prints the overall decision and run metadata."""
    decision = data.decision
    color = STATUS_COLORS.get(decision.status, "white")
    console.rule(f"[bold]{decision.status} Screening Summary[/bold]", style="bold magenta")

    table = Table(title="Decision", show_header=True, header_style="bold blue", padding=(0, 1))
    table.add_column("Metric", style="dim")
    table.add_column("Value")

    table.add_row("Screening Decision", f"[{color} bold]{decision.status}[/]", end_section=True)
    table.add_row("Flags", str(decision.flags_count))
    table.add_row("Summary", decision.summary)
    table.add_row("Cited Results", str(len(data.audit.tool_calls)))
    table.add_row("LLM Calls", str(usage.get("llm_calls", 0)))
    table.add_row("Total Tokens", str(usage.get("total_tokens", 0)))
    table.add_row("Estimated Cost", f"USD [green]${usage.get('estimated_cost_usd', 0):.4f}[/green]")

    console.print(table)


def print_checks_table(data: CompleteData):
    """Prints one row per verification criterion."""
    table = Table(title="Verification Checks", show_header=True, header_style="bold blue", show_lines=True)
    table.add_column("Criterion", style="bold")
    table.add_column("Status")
    table.add_column("Evidence")
    table.add_column("Sources", style="dim")

    for check in data.checks:
        color = CHECK_COLORS.get(check.status, "white")
        table.add_row(check.criterion, f"[{color}]{check.status}[/]", check.evidence, ", ".join(check.sources))
    console.print(table)

    if data.background_work:
        work_table = Table(title="Background Work", show_header=True, header_style="bold blue")
        work_table.add_column("Relevance", justify="right")
        work_table.add_column("Organism")
        work_table.add_column("Summary")
        work_table.add_column("Sources", style="dim")
        for item in data.background_work:
            work_table.add_row(str(item.relevance), item.organism, item.summary, ", ".join(item.sources))
        console.print(work_table)


async def _stream(workflow: ScreeningWorkflow, customer_info: str, sse: bool) -> Optional[CompleteData]:
    """Consumes the event stream, rendering each event. Returns the payload on success."""
    result = None
    async for event in workflow.run(customer_info):
        if sse:
            click.echo(format_sse(event), nl=False)
        elif event.type == "status":
            console.print(f"[bold cyan]>[/bold cyan] {event.message}")
        elif event.type == "tool_call":
            console.print(f"  [dim]calling[/dim] {event.tool} {json.dumps(event.args, ensure_ascii=False)}")
        elif event.type == "tool_result":
            console.print(f"  [dim]result[/dim] {event.tool} -> {event.id or '-'} ({event.count})")
        elif event.type == "delta":
            console.print(Markdown(event.content))
        elif event.type == "error":
            console.print(f"[bold red]Screening Failed:[/bold red] {event.message}")

        if event.type == "complete":
            result = event.data
    if sse:
        click.echo(SSE_DONE, nl=False)
    return result


# --- CLI Command Group ---


@click.group()
def cli():
    """DNA Customer Screening CLI."""
    settings.get_settings()
    setup_tracing_environment()


@cli.command()
@click.option("--customer-info", "customer_info", type=str, default=None, help="Customer and order details as free text.")
@click.option(
    "--file",
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read the customer information from a file.",
)
@click.option(
    "--provider",
    type=click.Choice([p.value for p in settings.LLMProvider]),
    default=None,
    help="Optional override for the default LLM provider.",
)
@click.option("--model", type=str, default=None, help="Optional override for the research model name.")
@click.option("--sse", is_flag=True, default=False, help="Write raw SSE frames to stdout instead of rich output.")
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Save the complete payload as JSON.",
)
def screen(
    customer_info: Optional[str],
    input_file: Optional[Path],
    provider: Optional[str],
    model: Optional[str],
    sse: bool,
    output: Optional[Path],
):
    """
    Screens one synthetic DNA customer and prints the decision.
    """
    settings_instance = settings.get_settings()

    if input_file is not None:
        customer_info = input_file.read_text(encoding="utf-8")

    try:
        request = ScreeningRequest(
            customer_info=validate_customer_info(customer_info),
            provider=settings.LLMProvider(provider) if provider else None,
            model=model,
        )
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--customer-info / --file")

    client = CompletionClient(
        settings_instance,
        llm_factory=LLMFactory(settings_instance),
        cost_tracker=CostTracker(),
        provider=request.provider,
        main_model=request.model,
    )
    workflow = ScreeningWorkflow(settings_instance, client)

    logger.info("Starting screening", provider=client.provider.value)
    result = asyncio.run(_stream(workflow, request.customer_info, sse))

    if result is None:
        raise SystemExit(1)

    if output is not None:
        output.write_text(
            json.dumps(result.model_dump(by_alias=True, mode="json"), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        logger.info(f"Saved screening result to {output}")

    if not sse:
        print_summary_table(result, client.cost_tracker.get_metadata())
        print_checks_table(result)


# --- Main Execution ---

if __name__ == "__main__":
    cli()
