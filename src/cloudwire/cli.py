"""CLI entry point for the SDK."""

from __future__ import annotations

import json
from typing import Any

import click

from .core.errors import CloudWireError


def _settings(ctx: click.Context) -> Any:
    from .core.config import load_settings
    from .observability.logger import setup_logging

    obj = ctx.obj or {}
    overrides: dict[str, Any] = {}
    if obj.get("region"):
        overrides["region"] = obj["region"]
    if obj.get("endpoint_url"):
        overrides["endpoint_url"] = obj["endpoint_url"]
    settings = load_settings(obj.get("config"), overrides)
    setup_logging(
        level=obj.get("log_level") or settings.observability.log_level,
        format=settings.observability.log_format,
    )
    return settings


def _parse_json(value: str | None, what: str) -> dict[str, Any]:
    if not value:
        return {}
    try:
        data = json.loads(value)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"{what} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise click.BadParameter(f"{what} must be a JSON object")
    return data


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, sort_keys=True, default=str))


@click.group()
@click.option("--config", default=None, help="TOML config file path")
@click.option("--region", default=None, help="Region override")
@click.option("--endpoint-url", default=None, help="Send requests to this URL")
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
@click.pass_context
def main(
    ctx: click.Context,
    config: str | None,
    region: str | None,
    endpoint_url: str | None,
    log_level: str | None,
) -> None:
    """cloudwire: model-driven cloud service client."""
    ctx.obj = {
        "config": config,
        "region": region,
        "endpoint_url": endpoint_url,
        "log_level": log_level,
    }


@main.command()
@click.pass_context
def services(ctx: click.Context) -> None:
    """List services with a loadable model."""
    from .model.loader import list_api_versions, list_available_services

    settings = _settings(ctx)
    for name in list_available_services(settings.model_paths):
        versions = ", ".join(list_api_versions(name, settings.model_paths))
        click.echo(f"{name:20s} {versions}")


@main.command()
@click.argument("service")
@click.pass_context
def operations(ctx: click.Context, service: str) -> None:
    """List the operations of SERVICE."""
    from .model.loader import load_service_model

    settings = _settings(ctx)
    try:
        model = load_service_model(service, search_paths=settings.model_paths)
    except CloudWireError as exc:
        raise click.ClickException(str(exc)) from exc
    for name in model.operation_names:
        op = model.operation(name)
        flag = "  (deprecated)" if op.deprecated else ""
        click.echo(f"{op.python_name:35s} {name}{flag}")


@main.command()
@click.argument("service")
@click.argument("operation")
@click.option("--params", default=None, help="Operation parameters as a JSON object")
@click.option("--async", "use_async", is_flag=True, help="Use the async client")
@click.pass_context
def call(
    ctx: click.Context,
    service: str,
    operation: str,
    params: str | None,
    use_async: bool,
) -> None:
    """Call OPERATION on SERVICE and print the response as JSON."""
    from .client.factory import create_client

    settings = _settings(ctx)
    payload = _parse_json(params, "--params")
    try:
        client = create_client(service, settings=settings)
        if use_async:
            import asyncio

            async def _run() -> Any:
                async with client:
                    return await client.ainvoke(operation, **payload)

            response = asyncio.run(_run())
        else:
            with client:
                response = client.invoke(operation, **payload)
    except CloudWireError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(response.model_dump(mode="json", by_alias=True, exclude_none=True))


@main.command()
@click.argument("model_id")
@click.option("--record", required=True, help="Record as a JSON object of strings")
@click.option("--endpoint", default=None, help="Real-time endpoint URL (looked up if omitted)")
@click.pass_context
def predict(ctx: click.Context, model_id: str, record: str, endpoint: str | None) -> None:
    """Run a real-time prediction against MODEL_ID."""
    from .ml.predictor import RealtimePredictor

    settings = _settings(ctx)
    values = {k: str(v) for k, v in _parse_json(record, "--record").items()}
    try:
        with RealtimePredictor(model_id=model_id, endpoint=endpoint, settings=settings) as predictor:
            prediction = predictor.predict(values)
    except CloudWireError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(prediction.model_dump(mode="json", by_alias=True, exclude_none=True))


if __name__ == "__main__":
    main()
