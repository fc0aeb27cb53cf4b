"""Centralized error handler for depviz commands."""

from collections.abc import Callable
from functools import wraps
from typing import Any

import click

from depviz.errors import DepvizError, InternalError
from depviz.utils.exit_codes import ExitCodes
from depviz.utils.logging import logger


class CommandFailed(click.ClickException):
    """ClickException that keeps the exit code of the underlying error."""

    def __init__(self, message: str, exit_code: int):
        super().__init__(message)
        self.exit_code = exit_code


def handle_exceptions(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator that turns pipeline errors into click failures with exit codes."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        """Inner wrapper that implements the try-except logic."""
        try:
            return func(*args, **kwargs)
        except click.ClickException:
            raise
        except DepvizError as e:
            logger.error(
                "Command '{cmd}' failed ({reason}): {err}",
                cmd=func.__name__,
                reason=ExitCodes.get_description(e.exit_code),
                err=e.message,
            )
            raise CommandFailed(f"{type(e).__name__}: {e.message}", e.exit_code) from e
        except Exception as e:
            logger.opt(exception=True).error(
                "Command '{cmd}' failed: {err}",
                cmd=func.__name__,
                err=str(e),
            )
            wrapped = InternalError(f"{type(e).__name__}: {e}", operation=func.__name__)
            raise CommandFailed(f"InternalError: {wrapped.message}", wrapped.exit_code) from e

    return wrapper
