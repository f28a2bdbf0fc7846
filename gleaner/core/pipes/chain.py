"""Runs ordered pipe chains over extracted values."""

from collections.abc import Sequence
from typing import Any

from gleaner.core.pipes.base import PipeContext
from gleaner.core.pipes.registry import PipeRegistry, default_registry
from gleaner.exceptions import PipeError
from gleaner.models.descriptors import PipeInvocation


def stringify(value: Any) -> str:
    """String form of a pipe result as fed to the next pipe."""
    if value is None:
        return ''
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    return str(value)


def check_pipes(pipes: Sequence[PipeInvocation], registry: PipeRegistry | None = None) -> None:
    """Fail fast if any pipe in the chain is not registered.

    Raises:
        UnknownPipeError: For the first unregistered name

    """
    registry = registry or default_registry
    for pipe in pipes:
        registry.require(pipe.name)


def apply_pipes(
    value: str,
    pipes: Sequence[PipeInvocation],
    context: PipeContext | None = None,
    registry: PipeRegistry | None = None,
) -> Any:
    """Apply pipes in declared order.

    Each pipe receives the string form of the previous result. The last
    pipe's result is returned with its own type (int, float, datetime...).

    Args:
        value: Raw extracted string
        pipes: Ordered pipe invocations
        context: Ambient values such as the page base URL
        registry: Registry to resolve names against, defaults to the process-wide one

    Returns:
        Result of the final pipe, or the input when there are no pipes

    Raises:
        UnknownPipeError: If a pipe name is not registered
        PipeError: If a pipe rejects its input

    """
    registry = registry or default_registry
    context = context or PipeContext()

    result: Any = value
    for pipe in pipes:
        func = registry.require(pipe.name)
        current = stringify(result)
        try:
            result = func(current, list(pipe.params), context)
        except PipeError:
            raise
        except Exception as e:
            raise PipeError(pipe.name, f'failed: {e}', current, list(pipe.params)) from e
    return result
