"""Helpers shared by the CLI command modules."""

from __future__ import annotations

from decimal import Decimal

import click

from ordercore.domain.exceptions import DomainException


def fail(exc: DomainException) -> click.ClickException:
    """Turn a domain error into a CLI error, flagging retryable ones."""
    message = str(exc)
    if exc.retryable:
        message += " (retryable)"
    return click.ClickException(message)


def money(amount: Decimal) -> str:
    return f"${amount:.2f}"
