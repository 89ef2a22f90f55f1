"""Main CLI interface using Typer."""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from scriptran.core.exceptions import ScripTransError, ConfigurationError
from scriptran.core.models import Provider, TranslationUnit
from scriptran.core.pipeline import TranslationPipeline
from scriptran.core.validator import validate_json
from scriptran.utils import load_config, setup_logger

app = typer.Typer(
    name="scriptrans",
    help="ScriptTrans-LLMs: script-aware text and JSON translation",
    add_completion=False
)

console = Console()

EXAMPLE_DOCUMENT = {
    "greeting": "Hello, world!",
    "question": "How are you today?",
    "response": "I'm doing great, thank you!",
    "nested": {
        "message": "This is a nested message",
        "array": ["First item", "Second item", "Third item"]
    },
    "number": 42,
    "boolean": True,
    "null_value": None
}


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", help="YAML config file (default: configs/default.yaml)"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level (DEBUG/INFO/WARNING/ERROR)"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this file"),
):
    """Load environment, configuration and logging for every command."""
    load_dotenv()
    setup_logger(level=log_level, log_file=str(log_file) if log_file else None)
    try:
        ctx.obj = load_config(str(config_path) if config_path else None)
    except (FileNotFoundError, ScripTransError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def _fail(error: Exception):
    """Print an error (with its suggestion, if any) and exit."""
    if isinstance(error, ScripTransError):
        console.print(f"[red]Error: {escape(error.message)}[/red]")
        if error.suggestion:
            console.print(f"[dim]Suggestion: {escape(error.suggestion)}[/dim]")
    else:
        console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise typer.Exit(1)


def _resolve(
    config: Dict[str, Any],
    source_lang: Optional[str],
    target_lang: Optional[str],
    provider: Optional[str],
    model: Optional[str]
):
    """Fill unset selections from the configured defaults."""
    defaults = config.get("defaults", {})
    provider_id = Provider.parse(provider or defaults.get("provider", "openai"))
    if not model:
        model = config.get("providers", {}).get(provider_id.value, {}).get("default_model")
    if not model:
        raise ConfigurationError(
            f"No model configured for provider '{provider_id.value}'",
            config_key=f"providers.{provider_id.value}.default_model"
        )
    return (
        source_lang or defaults.get("source_lang", "English"),
        target_lang or defaults.get("target_lang", "Spanish"),
        provider_id,
        model,
    )


@app.command()
def translate(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="Text to translate"),
    source_lang: Optional[str] = typer.Option(None, "-s", "--source", help="Language the text is written in, e.g. English"),
    target_lang: Optional[str] = typer.Option(None, "-t", "--target", help="Language to translate into, e.g. Spanish"),
    provider: Optional[str] = typer.Option(None, "-p", "--provider", help="Provider (openai/anthropic)"),
    model: Optional[str] = typer.Option(None, "-m", "--model", help="Model name (e.g., gpt-3.5-turbo, claude-3-haiku-20240307)"),
    json_output: bool = typer.Option(False, "--json-output", help="Print the full outcome as JSON"),
):
    """Translate a piece of text, correcting wrong-script or wrong-keyboard input first."""
    config = ctx.obj
    try:
        source_lang, target_lang, provider_id, model = _resolve(config, source_lang, target_lang, provider, model)
        pipeline = TranslationPipeline.from_config(config)
        outcome = pipeline.translate_text(TranslationUnit(
            text=text,
            source_lang=source_lang,
            target_lang=target_lang,
            provider=provider_id,
            model=model,
        ))
    except (ScripTransError, ValueError) as e:
        _fail(e)

    if json_output:
        typer.echo(json.dumps(outcome.to_dict(), ensure_ascii=False, indent=2))
        return

    if outcome.language_mismatch:
        console.print(
            f"[yellow]Detected {escape(outcome.detected_language)}, not {source_lang}. "
            f"Translated the input as written.[/yellow]"
        )
    if outcome.suggested_text:
        console.print(f"[cyan]Interpreted input as:[/cyan] {escape(outcome.suggested_text)}")

    console.print(Panel(
        escape(outcome.translated_text),
        title=f"{source_lang} → {target_lang}",
        subtitle=f"{provider_id.value}/{model}",
        border_style="green"
    ))


@app.command("json")
def translate_json_file(
    ctx: typer.Context,
    input_file: Path = typer.Argument(..., help="JSON document to translate ('-' reads stdin)"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output file (default: stdout)"),
    source_lang: Optional[str] = typer.Option(None, "-s", "--source", help="Language of the string values"),
    target_lang: Optional[str] = typer.Option(None, "-t", "--target", help="Language to translate into"),
    provider: Optional[str] = typer.Option(None, "-p", "--provider", help="Provider (openai/anthropic)"),
    model: Optional[str] = typer.Option(None, "-m", "--model", help="Model name"),
    concurrency: Optional[int] = typer.Option(None, "-c", "--concurrency", help="Strings translated in parallel (default from config)"),
):
    """Translate every string value in a JSON document, keeping keys and structure."""
    config = ctx.obj

    if str(input_file) == "-":
        raw = sys.stdin.read()
    elif not input_file.exists():
        console.print(f"[red]Error: Input file not found: {input_file}[/red]")
        raise typer.Exit(1)
    else:
        raw = input_file.read_text(encoding="utf-8")

    try:
        document = validate_json(raw)
        source_lang, target_lang, provider_id, model = _resolve(config, source_lang, target_lang, provider, model)
        pipeline = TranslationPipeline.from_config(config)
        if concurrency is not None:
            pipeline.config.max_concurrency = concurrency
        issues = pipeline.config.validate()
        if issues:
            raise ConfigurationError("; ".join(issues))

        with console.status(f"[cyan]Translating {source_lang} → {target_lang}...", spinner="dots"):
            translated = pipeline.translate_json(document, source_lang, target_lang, provider_id, model)
    except (ScripTransError, ValueError) as e:
        _fail(e)

    rendered = json.dumps(translated, ensure_ascii=False, indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(rendered + "\n", encoding="utf-8")
        console.print(f"[bold green]Translation Complete![/bold green] Output: {output}")
    else:
        typer.echo(rendered)


@app.command()
def languages(ctx: typer.Context):
    """List the configured languages."""
    table = Table(title="Supported Languages", show_header=True)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Language", style="cyan")
    for index, name in enumerate(ctx.obj.get("languages", []), start=1):
        table.add_row(str(index), name)
    console.print(table)


@app.command()
def providers(ctx: typer.Context):
    """List providers, their default models and whether a key is configured."""
    table = Table(title="Providers", show_header=True)
    table.add_column("Provider", style="cyan")
    table.add_column("Name")
    table.add_column("Default model", style="yellow")
    table.add_column("Status")

    for provider_id, settings in ctx.obj.get("providers", {}).items():
        status = "[green]✓ Configured[/green]" if settings.get("api_key") else "[yellow]✗ No API key[/yellow]"
        table.add_row(
            provider_id,
            settings.get("display_name", provider_id),
            settings.get("default_model", ""),
            status
        )
    console.print(table)


@app.command()
def example():
    """Print an example JSON document to try the json command on."""
    typer.echo(json.dumps(EXAMPLE_DOCUMENT, ensure_ascii=False, indent=2))


def show_welcome():
    """Show welcome banner."""
    console.print("""
[bold cyan]ScriptTrans-LLMs[/bold cyan] - script-aware translation

[green]Quick Start:[/green]
  scriptrans translate "핼로" -s English -t French     # Wrong-script input
  scriptrans json messages.json -t German -o de.json   # Translate a JSON document
  scriptrans providers                                 # Show provider status
  scriptrans --help                                    # All commands
""")


def cli():
    """Main CLI entry point."""
    if len(sys.argv) == 1:
        show_welcome()
        return

    app()


if __name__ == "__main__":
    cli()
