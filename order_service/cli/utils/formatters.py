"""Output formatting for CLI commands."""

import click


def success(message: str) -> None:
    click.secho(f"✓ {message}", fg="green")


def error(message: str) -> None:
    """Print to stderr in red."""
    click.secho(f"✗ {message}", fg="red", err=True)


def info(message: str) -> None:
    click.secho(f"  {message}")


def header(message: str) -> None:
    click.secho(f"\n{message}", fg="cyan", bold=True)


def bullet(label: str, value: object) -> None:
    """Print an aligned ``label: value`` line."""
    click.echo(f"  {click.style(f'{label:<24}', dim=True)} {value}")
