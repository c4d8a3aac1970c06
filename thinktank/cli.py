"""CLI entry point for thinktank."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from thinktank.config import AppConfig, load_config
from thinktank.config.editor import (
    add_model,
    edit_target,
    remove_model,
    set_model_enabled,
)
from thinktank.config.loader import (
    DEFAULT_CONFIG_TEMPLATE,
    PROJECT_CONFIG_NAME,
    find_config_path,
    user_config_path,
)
from thinktank.config.lookup import filter_models, get_api_key
from thinktank.errors import (
    ErrorContext,
    ThinktankError,
    create_contextual_error,
)
from thinktank.llm import SystemPrompt, create_default_registry
from thinktank.output import ResponseWriter
from thinktank.workflow import QueryResult, query_models, select_models

app = typer.Typer(
    name="thinktank",
    help="Send one prompt to many LLMs and compare what comes back.",
)

config_app = typer.Typer(help="Manage thinktank configuration.")
app.add_typer(config_app, name="config")

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

# Global state
_config: AppConfig | None = None
_config_path: str | None = None


def _get_config() -> AppConfig:
    global _config
    if _config is None:
        _config = load_config(_config_path)
    return _config


def _render_error(error: ThinktankError, title: str | None = None) -> None:
    # Text() keeps "[provider]" prefixes from being parsed as rich markup.
    rprint(Panel(Text(error.format()), title=title or error.name, border_style="red"))


def _fail(exc: BaseException, operation: str, file_path: str | None = None) -> typer.Exit:
    error = create_contextual_error(exc, ErrorContext(operation=operation, file_path=file_path))
    _render_error(error)
    return typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to thinktank.yaml")
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
) -> None:
    """Global options."""
    global _config, _config_path
    _config, _config_path = None, config
    level = logging.DEBUG if verbose else logging.WARNING
    if ctx.invoked_subcommand == "config":
        # `config init --force` must work even when the current file is broken.
        logging.basicConfig(level=level)
        return
    try:
        cfg = _get_config()
    except ThinktankError as e:
        logging.basicConfig(level=level)
        raise _fail(e, "loading configuration")
    if not verbose:
        level = _LOG_LEVELS[cfg.log_level]
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


def _display_result(result: QueryResult) -> None:
    if result.error is not None:
        _render_error(result.error, title=f"{result.model_key} (failed)")
        return
    response = result.response
    subtitle = f"group: {response.group_info.name}" if response.group_info else None
    rprint(
        Panel(
            Text(response.text or "(empty response)"),
            title=result.model_key,
            subtitle=subtitle,
            border_style="green",
        )
    )


@app.command()
def run(
    prompt_file: Annotated[Path, typer.Argument(help="File containing the prompt")],
    model: Annotated[
        list[str] | None,
        typer.Option("--model", "-m", help="Model as provider:modelId (repeatable)"),
    ] = None,
    group: Annotated[
        str | None, typer.Option("--group", "-g", help="Model group to run")
    ] = None,
    system_prompt: Annotated[
        str | None, typer.Option("--system-prompt", help="Override the system prompt")
    ] = None,
    temperature: Annotated[
        float | None, typer.Option("--temperature", help="Sampling temperature")
    ] = None,
    max_tokens: Annotated[
        int | None, typer.Option("--max-tokens", help="Maximum tokens to generate")
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Also write each response to this directory"),
    ] = None,
    include_metadata: Annotated[
        bool,
        typer.Option(
            "--include-metadata", help="Add usage and vendor metadata to written files"
        ),
    ] = False,
) -> None:
    """Send the prompt in PROMPT_FILE to the selected models."""
    try:
        prompt = prompt_file.read_text()
    except OSError as e:
        raise _fail(e, "reading the prompt file", str(prompt_file))

    cli_options = {}
    if temperature is not None:
        cli_options["temperature"] = temperature
    if max_tokens is not None:
        cli_options["max_tokens"] = max_tokens

    cfg = _get_config()
    try:
        models = select_models(cfg, model, group)
    except ThinktankError as e:
        _render_error(e)
        raise typer.Exit(1)

    registry = create_default_registry()
    results = asyncio.run(
        query_models(
            registry,
            cfg,
            prompt,
            models,
            group=group,
            cli_options=cli_options or None,
            system_prompt=SystemPrompt(text=system_prompt) if system_prompt else None,
        )
    )
    for result in results:
        _display_result(result)

    if output is not None:
        writer = ResponseWriter(output, include_metadata=include_metadata, group=group)
        try:
            paths = writer.write_batch(results)
        except ThinktankError as e:
            _render_error(e)
            raise typer.Exit(1)
        rprint(f"[green]Wrote {len(paths)} file(s) to[/green] {output}")

    failed = [r for r in results if not r.ok]
    if failed:
        rprint(f"[red]{len(failed)} of {len(results)} model(s) failed.[/red]")
        raise typer.Exit(1)


@app.command()
def models(
    provider: Annotated[
        str | None, typer.Option("--provider", "-p", help="Only show this provider")
    ] = None,
    available: Annotated[
        bool,
        typer.Option("--available", help="Ask provider APIs which models they offer"),
    ] = False,
) -> None:
    """List configured models, or the models a provider offers."""
    if available:
        _list_available_models(provider)
        return

    cfg = _get_config()
    entries = filter_models(cfg, provider) if provider else cfg.models
    table = Table(title=f"Configured models ({len(entries)})")
    table.add_column("Model", style="cyan")
    table.add_column("Enabled")
    table.add_column("Groups", style="yellow")
    table.add_column("API key")
    for m in entries:
        groups = [g.name for g in cfg.groups.values() if any(x.same_model(m) for x in g.models)]
        table.add_row(
            m.key,
            "yes" if m.enabled else "no",
            ", ".join(groups) or "-",
            "[green]set[/green]" if get_api_key(m) else "[red]missing[/red]",
        )
    rprint(table)


def _list_available_models(provider: str | None) -> None:
    registry = create_default_registry()
    ids = [provider] if provider else registry.get_provider_ids()
    failures = 0
    for provider_id in ids:
        llm = registry.get_provider(provider_id)
        if llm is None or not llm.supports_model_listing:
            rprint(f"[yellow]No model listing for provider {provider_id!r}[/yellow]")
            failures += 1
            continue
        try:
            listed = asyncio.run(llm.list_models())
        except ThinktankError as e:
            _render_error(e, title=f"{provider_id} (failed)")
            failures += 1
            continue
        table = Table(title=f"{provider_id} ({len(listed)})")
        table.add_column("ID", style="cyan")
        table.add_column("Description")
        for entry in listed:
            table.add_row(entry.id, entry.description or "-")
        rprint(table)
    if failures:
        raise typer.Exit(1)


@config_app.command("path")
def config_path() -> None:
    """Show which configuration file is in use."""
    try:
        path = find_config_path(_config_path)
    except ThinktankError as e:
        _render_error(e)
        raise typer.Exit(1)
    if path is None:
        rprint("[yellow]No configuration file found; using built-in defaults.[/yellow]")
        rprint(f"User config location: {user_config_path()}")
    else:
        rprint(str(path))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default thinktank.yaml in current directory."""
    target = Path(PROJECT_CONFIG_NAME)
    if target.exists() and not force:
        rprint(f"[yellow]{PROJECT_CONFIG_NAME} already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    try:
        target.write_text(DEFAULT_CONFIG_TEMPLATE)
    except OSError as e:
        raise _fail(e, "writing the configuration file", str(target))
    rprint(f"[green]Created[/green] {target}")


@config_app.command("show")
def config_show() -> None:
    """Show the resolved configuration."""
    try:
        path = find_config_path(_config_path)
        cfg = _get_config()
    except ThinktankError as e:
        _render_error(e)
        raise typer.Exit(1)
    rprint(f"[dim]Source:[/dim] {path or 'built-in defaults'}")
    data = cfg.model_dump(exclude_none=True)
    rprint(Syntax(yaml.safe_dump(data, default_flow_style=False, sort_keys=False), "yaml"))


def _edit(action, *args):
    try:
        target = edit_target(_config_path)
        return target, action(target, *args)
    except ThinktankError as e:
        _render_error(e)
        raise typer.Exit(1)


@config_app.command("add-model")
def config_add_model(
    reference: Annotated[str, typer.Argument(help="Model as provider:modelId")],
    disabled: bool = typer.Option(False, "--disabled", help="Add the model switched off"),
    temperature: Annotated[
        float | None, typer.Option("--temperature", help="Default temperature")
    ] = None,
    max_tokens: Annotated[
        int | None, typer.Option("--max-tokens", help="Default maximum tokens")
    ] = None,
) -> None:
    """Add a model to the configuration file."""
    options = {}
    if temperature is not None:
        options["temperature"] = temperature
    if max_tokens is not None:
        options["max_tokens"] = max_tokens
    target, added = _edit(
        lambda path: add_model(path, reference, enabled=not disabled, options=options)
    )
    rprint(f"[green]Added[/green] {added.key} to {target}")


@config_app.command("remove-model")
def config_remove_model(
    reference: Annotated[str, typer.Argument(help="Model as provider:modelId")],
) -> None:
    """Remove a model, and its group memberships, from the configuration file."""
    target, groups = _edit(remove_model, reference)
    rprint(f"[green]Removed[/green] {reference} from {target}")
    if groups:
        rprint(f"[dim]Also removed from groups:[/dim] {', '.join(groups)}")


@config_app.command("enable")
def config_enable(
    reference: Annotated[str, typer.Argument(help="Model as provider:modelId")],
) -> None:
    """Enable a configured model."""
    target, _ = _edit(set_model_enabled, reference, True)
    rprint(f"[green]Enabled[/green] {reference} in {target}")


@config_app.command("disable")
def config_disable(
    reference: Annotated[str, typer.Argument(help="Model as provider:modelId")],
) -> None:
    """Disable a configured model without removing it."""
    target, _ = _edit(set_model_enabled, reference, False)
    rprint(f"[yellow]Disabled[/yellow] {reference} in {target}")


if __name__ == "__main__":
    app()
