from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer
import uvicorn
from dotenv import load_dotenv

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_page, render_reading, render_threshold, render_user
from settings import ConfigurationError, load_settings


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for running and talking to the sensor API.",
    context_settings={"help_option_names": ["-h", "--help"]},
)
readings_app = typer.Typer(help="Temperature readings.")
thresholds_app = typer.Typer(help="Alert thresholds.")
app.add_typer(readings_app, name="readings")
app.add_typer(thresholds_app, name="thresholds")


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    token: Optional[str] = typer.Option(
        None,
        "--token",
        "-t",
        help="Bearer token for protected endpoints (defaults to API_TOKEN env).",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, token=token)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("serve")
def serve_command(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind."),
    port: int = typer.Option(8000, "--port", "-p", help="Port to listen on."),
    reload: bool = typer.Option(False, "--reload/--no-reload", help="Restart on code changes."),
) -> None:
    """Validate configuration and run the HTTP server."""
    load_dotenv()
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Serving on http://{host}:{port} (log level {settings.log_level})")
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command("register")
def register_command(
    ctx: typer.Context,
    email: str = typer.Argument(..., help="Account email address."),
    name: str = typer.Argument(..., help="Display name."),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, confirmation_prompt=True
    ),
) -> None:
    """Create an account and print its token."""
    state = _get_state(ctx)
    payload = state.client.register(email, password, name)
    typer.secho("Account created.", fg=typer.colors.GREEN)
    render_user(payload.get("user") or {})
    typer.echo(f"token: {payload.get('token')}")


@app.command("login")
def login_command(
    ctx: typer.Context,
    email: str = typer.Argument(..., help="Account email address."),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True),
) -> None:
    """Log in and print a token usable with --token."""
    state = _get_state(ctx)
    payload = state.client.login(email, password)
    render_user(payload.get("user") or {})
    typer.echo(f"token: {payload.get('token')}")


@app.command("profile")
def profile_command(ctx: typer.Context) -> None:
    """Show the account the current token belongs to."""
    state = _get_state(ctx)
    payload = state.client.profile()
    render_user(payload.get("user") or {})


@readings_app.command("list")
def readings_list_command(
    ctx: typer.Context,
    page: int = typer.Option(1, "--page", min=1),
    limit: int = typer.Option(10, "--limit", min=1, max=100),
) -> None:
    """List readings, newest first."""
    state = _get_state(ctx)
    payload = state.client.list_readings(page, limit)
    render_page("Readings", payload, ("recorded_at", "temperature", "threshold_value"))


@readings_app.command("latest")
def readings_latest_command(ctx: typer.Context) -> None:
    """Show the most recent reading."""
    state = _get_state(ctx)
    render_reading(state.client.latest_reading())


@readings_app.command("add")
def readings_add_command(
    ctx: typer.Context,
    temperature: float = typer.Argument(..., help="Temperature value."),
    threshold: Optional[float] = typer.Option(None, "--threshold", help="Threshold in force."),
) -> None:
    """Record a reading."""
    state = _get_state(ctx)
    render_reading(state.client.create_reading(temperature, threshold))


@thresholds_app.command("list")
def thresholds_list_command(
    ctx: typer.Context,
    page: int = typer.Option(1, "--page", min=1),
    limit: int = typer.Option(10, "--limit", min=1, max=100),
) -> None:
    """List thresholds, newest first."""
    state = _get_state(ctx)
    payload = state.client.list_thresholds(page, limit)
    render_page("Thresholds", payload, ("created_at", "threshold_value"))


@thresholds_app.command("latest")
def thresholds_latest_command(ctx: typer.Context) -> None:
    """Show the threshold currently in force."""
    state = _get_state(ctx)
    render_threshold(state.client.latest_threshold())


@thresholds_app.command("add")
def thresholds_add_command(
    ctx: typer.Context,
    value: float = typer.Argument(..., help="New threshold value."),
) -> None:
    """Set a new threshold (needs --token)."""
    state = _get_state(ctx)
    render_threshold(state.client.create_threshold(value))
