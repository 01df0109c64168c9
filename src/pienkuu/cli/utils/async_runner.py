"""
Async execution utilities for CLI commands
"""

import asyncio
import sys
from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

from rich.console import Console

from ...models.composition_models import PackagingError
from ..ui.display import create_error_display

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def async_command(f: F) -> Callable[..., Any]:
    """
    Decorator to run async functions in CLI context with proper error handling.

    Packaging failures are reported on stderr and exit with status 1.
    """

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return asyncio.run(f(*args, **kwargs))  # type: ignore
        except KeyboardInterrupt:
            console = Console(stderr=True)
            console.print("\n[yellow]Operation interrupted by user[/yellow]")
            sys.exit(130)  # Standard exit code for SIGINT
        except PackagingError as e:
            console = Console(stderr=True)
            console.print(create_error_display(e, "Packaging Error"))
            sys.exit(1)

    return wrapper
