"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from dataclasses import replace

import typer

from matebookctl.api import ApplyResult, Client
from matebookctl.core.errors import MatebookctlError
from matebookctl.core.loader import load_settings

app = typer.Typer(help="Battery protection and Fn-Lock control for Huawei MateBook laptops")


@app.callback()
def main(
    ctx: typer.Context,
    wait: bool = typer.Option(False, "--wait", help="Wait for the driver to apply new thresholds"),
    scripts: bool = typer.Option(False, "--scripts", help="Fall back to batpro/fnlock helper scripts"),
    no_save: bool = typer.Option(False, "--no-save", help="Do not mirror thresholds for persistence"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print debug output"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(name)s: %(message)s")
    ctx.obj = {"wait": wait, "scripts": scripts, "no_save": no_save}


def _build_client(ctx: typer.Context) -> Client:
    flags = ctx.obj or {}
    settings = load_settings()
    if flags.get("wait"):
        settings = replace(settings, wait=True)
    if flags.get("scripts"):
        settings = replace(settings, use_scripts=True)
    if flags.get("no_save"):
        settings = replace(settings, save_values=False)

    client = Client(settings=settings)
    for warning in getattr(client, "warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return client


def _report(result: ApplyResult) -> None:
    if not result.applied:
        typer.echo(f"Error: {result.error}", err=True)
        typer.echo(result.status.text)
        raise typer.Exit(code=1)
    typer.echo(result.status.text)
    if result.settled is False:
        typer.echo("Warning: driver did not report the new thresholds yet", err=True)
    if result.persisted is False:
        typer.echo("Warning: thresholds were not saved for persistence", err=True)


@app.command("status")
def status(ctx: typer.Context) -> None:
    """Show battery protection and Fn-Lock status."""
    try:
        with _build_client(ctx) as client:
            typer.echo(client.threshold_status().text)
            typer.echo(client.lock_status().text)
    except MatebookctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("set")
def set_mode(ctx: typer.Context, mode: str = typer.Argument(..., help="off, travel, office or home")) -> None:
    """Switch battery protection to a preset mode."""
    try:
        with _build_client(ctx) as client:
            _report(client.set_mode(mode))
    except (MatebookctlError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("custom")
def set_custom(
    ctx: typer.Context,
    low: int = typer.Argument(..., metavar="MIN", help="Resume charging below this level"),
    high: int = typer.Argument(..., metavar="MAX", help="Stop charging above this level"),
) -> None:
    """Set custom charging thresholds."""
    try:
        with _build_client(ctx) as client:
            _report(client.set_custom(low, high))
    except MatebookctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("fnlock")
def fnlock(
    ctx: typer.Context,
    action: str | None = typer.Argument(None, help="'toggle' to flip Fn-Lock"),
) -> None:
    """Show Fn-Lock status, or toggle it."""
    try:
        with _build_client(ctx) as client:
            if action is None:
                typer.echo(client.lock_status().text)
                return
            if action != "toggle":
                typer.echo(f"Error: Unknown action '{action}'. Allowed: toggle", err=True)
                raise typer.Exit(code=1)
            result = client.toggle_lock()
            if not result.toggled:
                typer.echo(f"Error: {result.error}", err=True)
                raise typer.Exit(code=1)
            typer.echo(result.status.text)
    except MatebookctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("endpoints")
def endpoints(ctx: typer.Context) -> None:
    """Show which interface was selected for each feature."""
    try:
        with _build_client(ctx) as client:
            info = client.describe()
            for name, endpoint, writable in (
                ("thresholds", info.threshold, info.threshold_writable),
                ("fnlock", info.fnlock, info.fnlock_writable),
            ):
                if endpoint is None:
                    typer.echo(f"{name}: <unavailable>")
                else:
                    access = "read-write" if writable else "read-only"
                    typer.echo(f"{name}: {endpoint} ({access})")
            typer.echo(f"persistence: {info.persistence or '<none>'}")
    except MatebookctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
