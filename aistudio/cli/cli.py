"""Command-line front end for AI Studio.

Manages provider configurations and runs the assistant workflows against
them from the terminal.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Awaitable, Callable, List, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from aistudio import __version__
from aistudio.core.assistant_options import CommonLanguages, IconSources
from aistudio.core.assistants.base import AssistantBase
from aistudio.core.assistants.icon_finder import IconFinderAssistant
from aistudio.core.assistants.translation import TranslationAssistant
from aistudio.core.confidence import provider_confidence
from aistudio.core.config import Host, LLMProviders, ProviderSettings, SettingsManager
from aistudio.core.providers import create_provider
from aistudio.utils.log import enable_file_logging, get_logger

console = Console()
logger = get_logger()

_SELECTABLE_PROVIDERS = [p.value for p in LLMProviders if p != LLMProviders.NONE]
_SELECTABLE_HOSTS = [h.value for h in Host if h != Host.NONE]


def _settings(ctx: click.Context) -> SettingsManager:
    manager = ctx.obj.get("settings") if ctx.obj else None
    if manager is None:
        manager = SettingsManager()
        ctx.ensure_object(dict)["settings"] = manager
    return manager


def _resolve_provider(manager: SettingsManager, name: str) -> ProviderSettings:
    provider = manager.get_provider(name)
    if provider is None:
        raise click.ClickException(f"Provider '{name}' does not exist.")
    return provider


def _run_assistant(
    assistant: AssistantBase,
    provider_name: Optional[str],
    run: Callable[[], Awaitable[Optional[str]]],
) -> str:
    """Select the provider, validate and run one exchange; returns the answer."""
    if provider_name:
        assistant.provider_settings = _resolve_provider(assistant.settings_manager, provider_name)
    if not assistant.validate():
        raise click.ClickException("\n".join(assistant.input_issues))

    answer = asyncio.run(run()) or ""
    if not answer:
        raise click.ClickException("No answer received from the provider; check the log for details.")
    return answer


@click.group()
@click.version_option(version=__version__)
@click.option("--log-file", is_flag=True, help="Also write logs to the data directory")
@click.pass_context
def cli(ctx: click.Context, log_file: bool) -> None:
    """AI Studio - manage LLM providers and run assistants."""
    ctx.ensure_object(dict)
    if log_file:
        enable_file_logging()


@cli.group(name="providers")
def providers_group() -> None:
    """Configure LLM providers"""


@providers_group.command(name="list")
@click.pass_context
def providers_list(ctx: click.Context) -> None:
    """List configured providers with their confidence"""
    manager = _settings(ctx)
    providers = manager.configuration_data.providers
    if not providers:
        console.print("[yellow]No providers configured.[/yellow]")
        return

    table = Table(title="Providers")
    table.add_column("#", justify="right")
    table.add_column("Instance")
    table.add_column("Provider")
    table.add_column("Model")
    table.add_column("Confidence")
    for provider in providers:
        confidence = provider_confidence(provider.used_provider, manager)
        table.add_row(
            str(provider.num),
            escape(provider.instance_name),
            provider.used_provider.to_name(),
            escape(provider.model),
            confidence.level.value,
        )
    console.print(table)


@providers_group.command(name="add")
@click.argument("instance_name")
@click.option(
    "--provider",
    "used_provider",
    type=click.Choice(_SELECTABLE_PROVIDERS),
    required=True,
    help="Vendor of the provider",
)
@click.option("--model", default="", help="Model to use")
@click.option("--hostname", default="", help="Base URL of a self-hosted server")
@click.option(
    "--host",
    type=click.Choice(_SELECTABLE_HOSTS),
    default=None,
    help="Kind of self-hosted server",
)
@click.option("--api-key", default=None, help="API key (environment variables take precedence)")
@click.pass_context
def providers_add(
    ctx: click.Context,
    instance_name: str,
    used_provider: str,
    model: str,
    hostname: str,
    host: Optional[str],
    api_key: Optional[str],
) -> None:
    """Add a provider configuration"""
    provider = LLMProviders(used_provider)
    if provider == LLMProviders.SELF_HOSTED and not hostname:
        raise click.ClickException("Self-hosted providers need --hostname.")

    try:
        stored = _settings(ctx).add_provider(
            ProviderSettings(
                instance_name=instance_name,
                used_provider=provider,
                model=model,
                hostname=hostname,
                host=Host(host) if host else (
                    Host.LM_STUDIO if provider == LLMProviders.SELF_HOSTED else Host.NONE
                ),
                api_key=api_key,
            )
        )
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"Added provider '{escape(stored.instance_name)}' (#{stored.num})")


@providers_group.command(name="remove")
@click.argument("name")
@click.pass_context
def providers_remove(ctx: click.Context, name: str) -> None:
    """Remove a provider configuration"""
    try:
        removed = _settings(ctx).remove_provider(name)
    except KeyError as exc:
        raise click.ClickException(f"Provider '{name}' does not exist.") from exc
    console.print(f"Removed provider '{escape(removed.instance_name)}'")


@providers_group.command(name="models")
@click.argument("name")
@click.pass_context
def providers_models(ctx: click.Context, name: str) -> None:
    """List the text models a provider offers"""
    manager = _settings(ctx)
    handle = create_provider(_resolve_provider(manager, name))
    models: List[str] = asyncio.run(handle.list_text_models(manager))
    if not models:
        console.print("[yellow]No models found.[/yellow]")
        return
    for model in models:
        console.print(escape(model))


@cli.command(name="confidence")
@click.argument("provider", type=click.Choice([p.value for p in LLMProviders]))
@click.pass_context
def confidence_cmd(ctx: click.Context, provider: str) -> None:
    """Show how far a provider is trusted with your data"""
    confidence = provider_confidence(LLMProviders(provider), _settings(ctx))
    console.print(f"[bold]{LLMProviders(provider).to_name()}[/bold]: {confidence.level.value}")
    if confidence.region:
        console.print(f"Region: {confidence.region}")
    console.print(confidence.description)
    for source in confidence.sources:
        console.print(f"  - {source}", highlight=False)


@cli.command(name="translate")
@click.argument("text")
@click.option(
    "--to",
    "target",
    default=CommonLanguages.EN_US.value,
    show_default=True,
    help="Target language code, or any other language name",
)
@click.option("--provider", "provider_name", default=None, help="Provider instance name or id")
@click.pass_context
def translate_cmd(ctx: click.Context, text: str, target: str, provider_name: Optional[str]) -> None:
    """Translate TEXT into another language"""
    assistant = TranslationAssistant(_settings(ctx))
    assistant.initialize()
    assistant.input_text = text
    try:
        assistant.selected_target_language = CommonLanguages(target)
    except ValueError:
        assistant.selected_target_language = CommonLanguages.OTHER
        assistant.custom_target_language = target

    answer = _run_assistant(assistant, provider_name, lambda: assistant.translate_text(force=True))
    console.print(escape(answer))


@cli.command(name="icons")
@click.argument("context")
@click.option(
    "--source",
    type=click.Choice([s.value for s in IconSources]),
    default=None,
    help="Icon library to search",
)
@click.option("--provider", "provider_name", default=None, help="Provider instance name or id")
@click.pass_context
def icons_cmd(
    ctx: click.Context, context: str, source: Optional[str], provider_name: Optional[str]
) -> None:
    """Suggest icon search keywords for CONTEXT"""
    assistant = IconFinderAssistant(_settings(ctx))
    assistant.initialize()
    assistant.input_context = context
    if source:
        assistant.selected_icon_source = IconSources(source)

    answer = _run_assistant(assistant, provider_name, assistant.find_icon)
    console.print(escape(answer))


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except SystemExit:
        raise
    except (RuntimeError, ValueError, OSError) as e:
        console.print(f"[red]Fatal error: {escape(str(e))}[/red]")
        logger.warning(
            "[cli] Fatal error in main CLI entrypoint: %s: %s",
            type(e).__name__,
            e,
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
