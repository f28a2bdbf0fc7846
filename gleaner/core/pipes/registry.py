"""Process-wide registry of named pipes."""

import logging
import threading

from gleaner.core.pipes.base import PipeFunc
from gleaner.core.pipes.builtin import BUILTIN_PIPES
from gleaner.exceptions import ConfigError, UnknownPipeError

logger = logging.getLogger(__name__)


def normalize_pipe_name(name: str) -> str:
    return name.strip().lower()


class PipeRegistry:
    """Maps case-insensitive pipe names to implementations.

    All access goes through a lock, so registration may race safely with
    lookups from concurrent extraction calls. Registering a name again
    replaces the previous implementation.

    Attributes:
        include_builtins: Whether the built-in pipes were registered on creation

    """

    def __init__(self, include_builtins: bool = True):
        """Initialize the registry.

        Args:
            include_builtins: Register the built-in pipes immediately

        """
        self.include_builtins = include_builtins
        self._pipes: dict[str, PipeFunc] = {}
        self._lock = threading.RLock()
        if include_builtins:
            self.register_builtins()

    def register_builtins(self) -> None:
        """(Re)register every built-in pipe."""
        with self._lock:
            self._pipes.update(BUILTIN_PIPES)

    def register(self, name: str, func: PipeFunc) -> None:
        """Register a pipe under a name.

        Args:
            name: Pipe name, matched case-insensitively
            func: Callable taking (value, params, context)

        Raises:
            ConfigError: If the name is empty or func is not callable

        """
        key = normalize_pipe_name(name or '')
        if not key:
            raise ConfigError('pipe name must not be empty')
        if not callable(func):
            raise ConfigError(f"pipe '{key}' implementation is not callable")
        with self._lock:
            if key in self._pipes and self._pipes[key] is not func:
                logger.debug(f'Replacing pipe: {key}')
            self._pipes[key] = func

    def unregister(self, name: str) -> bool:
        """Remove a pipe; returns True if it was registered."""
        with self._lock:
            return self._pipes.pop(normalize_pipe_name(name), None) is not None

    def get(self, name: str) -> PipeFunc | None:
        with self._lock:
            return self._pipes.get(normalize_pipe_name(name))

    def require(self, name: str) -> PipeFunc:
        """Look up a pipe, raising if it is not registered.

        Raises:
            UnknownPipeError: If no pipe has this name

        """
        func = self.get(name)
        if func is None:
            raise UnknownPipeError(normalize_pipe_name(name), self.names())
        return func

    def names(self) -> list[str]:
        """Registered pipe names, sorted."""
        with self._lock:
            return sorted(self._pipes)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None


default_registry = PipeRegistry()


def register_pipe(name: str, func: PipeFunc) -> None:
    """Register a pipe in the process-wide registry."""
    default_registry.register(name, func)


def unregister_pipe(name: str) -> bool:
    """Remove a pipe from the process-wide registry."""
    return default_registry.unregister(name)


def get_pipe(name: str) -> PipeFunc | None:
    """Look up a pipe in the process-wide registry."""
    return default_registry.get(name)


def list_pipes() -> list[str]:
    """Names registered in the process-wide registry."""
    return default_registry.names()
