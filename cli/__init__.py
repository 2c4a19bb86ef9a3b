"""Command-line tools for the sensor API."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)

# ``cli.app`` is looked up lazily and left pointing at the module, not the
# Typer instance, so ``monkeypatch.setattr("cli.app.ApiClient", ...)`` works.

__all__ = []
