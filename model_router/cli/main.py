"""
Model Router CLI main entry point.

The main Typer application that provides all CLI commands.
"""

import asyncio
import time
from typing import Optional

import httpx
import typer
from dotenv import load_dotenv

from model_router.cli.output import Formatter, OutputFormat
from model_router.config import get_settings
from model_router.errors import ModelRoutingError
from model_router.providers.base import ChatMessage, GenerateRequest
from model_router.services.resolver import ModelResolver, get_resolver

# Create main app
app = typer.Typer(
    name="model-router",
    help="Inspect and smoke-test the models the router can serve",
    no_args_is_help=True,
)


# Global options
@app.callback()
def main(
    ctx: typer.Context,
    output: str = typer.Option(
        "human",
        "--output", "-o",
        help="Output format (human, json)",
    ),
    env_file: Optional[str] = typer.Option(
        ".env",
        "--env-file",
        help="Environment file with provider credentials",
    ),
):
    """
    Model Router CLI.

    Credentials are read from the environment (and the env file, if present).
    """
    ctx.ensure_object(dict)

    if env_file:
        load_dotenv(env_file)

    try:
        output_format = OutputFormat(output.lower())
    except ValueError:
        output_format = OutputFormat.HUMAN

    ctx.obj["formatter"] = Formatter(format=output_format)


@app.command("models")
def models(
    ctx: typer.Context,
    show_all: bool = typer.Option(
        False,
        "--all", "-a",
        help="Include models whose provider is not configured",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print JSON (same as the global --output json)",
    ),
):
    """List registered models and whether they can be used."""
    formatter: Formatter = ctx.obj["formatter"]
    if as_json:
        formatter = Formatter(format=OutputFormat.JSON)
    resolver = get_resolver()

    definitions = resolver.registry.list_definitions() if show_all else resolver.list_enabled_definitions()
    rows = [
        {
            "id": d.id,
            "name": d.display_name,
            "provider": d.provider.value,
            "supports_tools": d.capabilities.supports_tools,
            "supports_reasoning": d.capabilities.supports_reasoning,
            "enabled": resolver.gate.is_configured(d.provider),
        }
        for d in definitions
    ]
    formatter.print_models(rows)


async def _check_model(resolver: ModelResolver, model_id: str, prompt: str, max_tokens: int) -> dict:
    """Send one short prompt to a model and report the outcome."""
    if model_id in resolver.registry and not resolver.is_model_enabled(model_id):
        definition = resolver.registry.get_definition(model_id)
        missing = " or ".join(resolver.gate.missing_credentials(definition.provider))
        return {"model_id": model_id, "status": "skipped", "error": f"{missing} not configured"}

    start_time = time.time()
    try:
        resolved = resolver.resolve(model_id)
        response = await resolved.handle.generate(
            GenerateRequest(
                messages=[ChatMessage(role="user", content=prompt)],
                max_tokens=max_tokens,
            )
        )
    except (ModelRoutingError, httpx.HTTPError) as e:
        return {
            "model_id": model_id,
            "status": "failed",
            "error": str(e),
            "response_time_ms": int((time.time() - start_time) * 1000),
        }

    return {
        "model_id": model_id,
        "status": "passed",
        "response_time_ms": int((time.time() - start_time) * 1000),
        "tokens": {"input": response.tokens_input, "output": response.tokens_output},
    }


async def _check_models(resolver: ModelResolver, model_ids: list[str], prompt: str, max_tokens: int) -> list[dict]:
    # Sequential: providers rate-limit bursts
    results = []
    try:
        for model_id in model_ids:
            results.append(await _check_model(resolver, model_id, prompt, max_tokens))
    finally:
        await resolver.close()
    return results


@app.command("check")
def check(
    ctx: typer.Context,
    model_ids: Optional[list[str]] = typer.Argument(
        None,
        help="Models to test (default: every registered model)",
    ),
    prompt: str = typer.Option(
        "Say hello in one sentence.",
        "--prompt", "-p",
        help="Prompt sent to each model",
    ),
    max_tokens: int = typer.Option(
        50,
        "--max-tokens",
        help="Maximum tokens per answer",
    ),
):
    """
    Smoke-test models with a short prompt.

    Models whose provider has no credentials are skipped. Exits with
    status 1 if any model fails.
    """
    formatter: Formatter = ctx.obj["formatter"]
    resolver = get_resolver()

    targets = model_ids or list(resolver.registry.supported_ids())
    results = asyncio.run(_check_models(resolver, targets, prompt, max_tokens))
    formatter.print_check_results(results)

    if any(r["status"] == "failed" for r in results):
        raise typer.Exit(code=1)


@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="Port (default: SERVICE_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the HTTP service."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "model_router.main:app",
        host=host,
        port=port or settings.service_port,
        reload=reload,
    )


if __name__ == "__main__":
    app()
