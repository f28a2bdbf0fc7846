"""Named value transformations applied to extracted strings."""

from gleaner.core.pipes.base import PipeContext, PipeFunc
from gleaner.core.pipes.builtin import BUILTIN_PIPES
from gleaner.core.pipes.chain import apply_pipes, check_pipes, stringify
from gleaner.core.pipes.registry import (
    PipeRegistry,
    default_registry,
    get_pipe,
    list_pipes,
    register_pipe,
    unregister_pipe,
)

__all__ = [
    'BUILTIN_PIPES',
    'PipeContext',
    'PipeFunc',
    'PipeRegistry',
    'apply_pipes',
    'check_pipes',
    'default_registry',
    'get_pipe',
    'list_pipes',
    'register_pipe',
    'stringify',
    'unregister_pipe',
]
