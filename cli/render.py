from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_user(user: Dict[str, Any]) -> None:
    echo_heading("User")
    echo_key_values(
        [
            ("id", user.get("id")),
            ("email", user.get("email")),
            ("name", user.get("name")),
            ("created_at", user.get("created_at")),
        ]
    )


def render_reading(reading: Optional[Dict[str, Any]]) -> None:
    echo_heading("Reading")
    if not reading:
        typer.echo("No readings recorded.")
        return
    echo_key_values(
        [
            ("id", reading.get("id")),
            ("temperature", reading.get("temperature")),
            ("threshold_value", reading.get("threshold_value")),
            ("recorded_at", reading.get("recorded_at")),
        ]
    )


def render_threshold(threshold: Optional[Dict[str, Any]]) -> None:
    echo_heading("Threshold")
    if not threshold:
        typer.echo("No thresholds configured.")
        return
    echo_key_values(
        [
            ("id", threshold.get("id")),
            ("threshold_value", threshold.get("threshold_value")),
            ("created_at", threshold.get("created_at")),
        ]
    )


def render_page(title: str, payload: Dict[str, Any], columns: Iterable[str]) -> None:
    pagination = payload.get("pagination") or {}
    echo_heading(
        f"{title} (page {pagination.get('page')} of {pagination.get('totalPages')}, "
        f"{pagination.get('total')} total)"
    )
    rows = payload.get("data") or []
    if not rows:
        typer.echo("No entries.")
        return
    columns = tuple(columns)
    for row in rows:
        typer.echo("  - " + " ".join(f"{column}={row.get(column)}" for column in columns))
