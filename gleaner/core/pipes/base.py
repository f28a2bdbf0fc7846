"""Types shared by pipe implementations."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PipeContext:
    """Ambient values a pipe may consult besides its input.

    Attributes:
        base_url: URL of the page being processed, used to resolve relative links

    """

    base_url: str | None = None


# A pipe receives the string input, its parameters and the context, and
# returns the transformed value (any type) or raises on failure.
PipeFunc = Callable[[str, list[str], PipeContext], Any]
