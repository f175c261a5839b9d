#!filepath: src/pathx_ai/cli.py
from __future__ import annotations

from typing import Optional

import typer

from pathx_ai.ai_service import AIService
from pathx_ai.llm.catalog import available_models
from pathx_ai.llm.errors import LLMError
from pathx_ai.llm.provider_config import ProviderConfig
from pathx_ai.llm.types import ProviderIdentity
from pathx_ai.utils.logger import get_logger

app = typer.Typer(help="PathX AI provider administration.")
config_app = typer.Typer(help="Show or change the provider configuration.")
app.add_typer(config_app, name="config")

logger = get_logger(__name__)


def _service() -> AIService:
    return AIService()


def _mask(key: str) -> str:
    k = key.strip()
    if not k:
        return "(not set)"
    if len(k) <= 8:
        return "****"
    return f"{k[:4]}…{k[-4:]}"


def _parse_provider(value: str) -> ProviderIdentity:
    try:
        return ProviderIdentity.parse(value)
    except LLMError as e:
        raise typer.BadParameter(str(e)) from e


@app.command()
def generate(
    prompt: str = typer.Argument(..., help="Prompt text."),
    provider: Optional[str] = typer.Option(
        None, "--provider", help="Force a single provider."
    ),
    skip_fallback: bool = typer.Option(
        False, "--skip-fallback", help="Try only the configured primary."
    ),
) -> None:
    """Generate text with automatic fallback."""
    try:
        result = _service().generate(
            prompt, force_provider=provider, skip_fallback=skip_fallback
        )
    except LLMError as e:
        logger.error(f"Generation failed: {e}")
        raise typer.Exit(code=1) from e
    typer.echo(f"[{result.provider.value}:{result.model}]")
    typer.echo(result.text)


@app.command("test-provider")
def test_provider(
    provider: str = typer.Argument(..., help="gemini, openrouter or groq."),
    api_key: str = typer.Option(..., "--api-key", help="Key to test."),
    model: str = typer.Option(..., "--model", help="Model to test."),
) -> None:
    """Check a key and model pair without saving it."""
    result = _service().test_provider(provider, api_key, model)
    typer.echo(result.message)
    if result.response:
        typer.echo(result.response)
    if not result.success:
        raise typer.Exit(code=1)


@app.command()
def models(provider: str = typer.Argument(..., help="Provider name.")) -> None:
    """List known models for a provider."""
    options = available_models(provider)
    if not options:
        typer.echo(f"No models known for {provider}")
        raise typer.Exit(code=1)
    for opt in options:
        typer.echo(f"{opt.value}\t{opt.label}")


@config_app.command("show")
def config_show() -> None:
    """Print the active configuration with keys masked."""
    try:
        cfg = _service().load_config()
    except Exception as e:
        logger.error(f"Failed to load API config: {e}")
        raise typer.Exit(code=2) from e
    typer.echo(f"primary:        {cfg.primary.value}")
    typer.echo(f"fallback:       {cfg.fallback1.value}")
    typer.echo(
        f"2nd fallback:   {cfg.fallback2.value if cfg.fallback2 else '(none)'}"
    )
    typer.echo(f"auto fallback:  {'on' if cfg.auto_fallback_enabled else 'off'}")
    for p in ProviderIdentity:
        c = cfg.credentials_for(p)
        typer.echo(f"{p.value:<11} model={c.model} key={_mask(c.api_key)}")


@config_app.command("set")
def config_set(
    primary: Optional[str] = typer.Option(None, "--primary"),
    fallback: Optional[str] = typer.Option(None, "--fallback"),
    second_fallback: Optional[str] = typer.Option(
        None, "--second-fallback", help="Provider name, or none to disable."
    ),
    auto_fallback: Optional[bool] = typer.Option(
        None, "--auto-fallback/--no-auto-fallback"
    ),
    gemini_key: Optional[str] = typer.Option(None, "--gemini-key"),
    gemini_model: Optional[str] = typer.Option(None, "--gemini-model"),
    openrouter_key: Optional[str] = typer.Option(None, "--openrouter-key"),
    openrouter_model: Optional[str] = typer.Option(None, "--openrouter-model"),
    groq_key: Optional[str] = typer.Option(None, "--groq-key"),
    groq_model: Optional[str] = typer.Option(None, "--groq-model"),
) -> None:
    """Update the stored configuration, starting from the active one."""
    service = _service()
    try:
        current = service.load_config()
    except Exception as e:
        logger.error(f"Failed to load API config: {e}")
        raise typer.Exit(code=2) from e

    changes: dict = {}
    if primary is not None:
        changes["primary"] = _parse_provider(primary)
    if fallback is not None:
        changes["fallback1"] = _parse_provider(fallback)
    if second_fallback is not None:
        changes["fallback2"] = (
            None
            if second_fallback.strip().lower() in {"", "none"}
            else _parse_provider(second_fallback)
        )
    if auto_fallback is not None:
        changes["auto_fallback_enabled"] = auto_fallback

    cfg: ProviderConfig = current.model_copy(update=changes)
    overrides = {
        ProviderIdentity.GEMINI: (gemini_key, gemini_model),
        ProviderIdentity.OPENROUTER: (openrouter_key, openrouter_model),
        ProviderIdentity.GROQ: (groq_key, groq_model),
    }
    for p, (key, model) in overrides.items():
        if key is None and model is None:
            continue
        c = cfg.credentials_for(p)
        cfg = cfg.with_credentials(
            p,
            key if key is not None else c.api_key,
            model if model is not None else c.model,
        )

    try:
        service.update_config(cfg)
    except Exception as e:
        raise typer.Exit(code=2) from e
    typer.echo("API configuration updated")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
