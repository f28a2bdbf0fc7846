"""Compiles XPath selectors and resolves ordered candidate lists."""

import logging
import threading
from collections.abc import Iterable
from typing import Any

from lxml import etree

from gleaner.exceptions import SelectorSyntaxError

logger = logging.getLogger(__name__)


def as_node_list(result: Any) -> list[Any]:
    """Normalize any XPath return value into an ordered list of matches.

    Node sets are returned as-is. Scalars (``count()``, ``string()``,
    ``boolean()``) become a single match, except an empty string or False,
    which count as no match.
    """
    if isinstance(result, list):
        return result
    if result is None or result is False or result == '':
        return []
    return [result]


class SelectorResolver:
    """Evaluates selectors with first-match-wins semantics.

    Compiled expressions are cached per selector string. The resolver holds no
    per-document state, so a single instance may be shared across threads.

    Attributes:
        max_cache_size: Compiled expressions kept before the cache is reset

    """

    def __init__(self, max_cache_size: int = 512):
        """Initialize the resolver.

        Args:
            max_cache_size: Compiled expressions kept before the cache is reset

        """
        self.max_cache_size = max_cache_size
        self._compiled: dict[str, etree.XPath] = {}
        self._lock = threading.Lock()

    def compile(self, selector: str) -> etree.XPath:
        """Compile a selector, raising on bad syntax.

        Args:
            selector: XPath expression

        Returns:
            Compiled expression

        Raises:
            SelectorSyntaxError: If the expression does not compile

        """
        with self._lock:
            compiled = self._compiled.get(selector)
        if compiled is not None:
            return compiled

        try:
            compiled = etree.XPath(selector, smart_strings=False)
        except etree.XPathError as e:
            raise SelectorSyntaxError(selector, str(e)) from e

        with self._lock:
            if len(self._compiled) >= self.max_cache_size:
                self._compiled.clear()
            self._compiled[selector] = compiled
        return compiled

    def evaluate(self, selector: str, scope: Any) -> list[Any]:
        """Evaluate one selector against a scope node.

        Raises:
            SelectorSyntaxError: If the expression fails to compile or evaluate

        """
        compiled = self.compile(selector)
        try:
            result = compiled(scope)
        except etree.XPathError as e:
            raise SelectorSyntaxError(selector, str(e)) from e
        return as_node_list(result)

    def resolve_with_selector(self, candidates: Iterable[str], scope: Any) -> tuple[list[Any], str | None]:
        """Try each candidate in order and return the first non-empty match set.

        Candidates that fail to compile or evaluate are skipped as if they
        matched nothing.

        Args:
            candidates: Ordered selector expressions
            scope: Node the selectors are evaluated against

        Returns:
            Tuple of (matched nodes, winning selector); ([], None) if nothing matched

        """
        for selector in candidates:
            if not selector:
                continue
            try:
                nodes = self.evaluate(selector, scope)
            except SelectorSyntaxError as e:
                logger.debug(f'Skipping selector: {e}')
                continue
            if nodes:
                return nodes, selector
        return [], None

    def resolve(self, candidates: Iterable[str], scope: Any) -> list[Any]:
        """Return the matches of the first candidate that matches anything."""
        nodes, _ = self.resolve_with_selector(candidates, scope)
        return nodes

    def check(self, selector: str) -> str | None:
        """Return the compile error for a selector, or None if it is valid."""
        try:
            self.compile(selector)
        except SelectorSyntaxError as e:
            return e.reason
        return None


default_resolver = SelectorResolver()
