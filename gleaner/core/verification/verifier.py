"""Verifies that configured selectors compile and match a document."""

from typing import Any

from rich.console import Console
from rich.markup import escape

from gleaner.core.selector import SelectorResolver, default_resolver, ensure_tree
from gleaner.exceptions import SelectorSyntaxError
from gleaner.models.descriptors import ScrapeConfig
from gleaner.models.results import SelectorCheck, ValidationReport


class SelectorVerifier:
    """Tests selectors against real documents.

    ``check_syntax`` is the strict, document-free check run before a scrape.
    ``verify`` reports, for every selector, whether it compiles and how many
    nodes it matches. Field selectors are evaluated inside the first matched
    container, the way extraction would see them.

    Attributes:
        console: Optional Rich console for output
        resolver: Selector resolver used to compile and evaluate

    """

    def __init__(self, console: Console | None = None, resolver: SelectorResolver | None = None):
        """Initialize the SelectorVerifier."""
        self.console = console
        self.resolver = resolver or default_resolver

    def check_syntax(self, config: ScrapeConfig) -> None:
        """Raise ConfigError listing every selector that does not compile."""
        config.validate_for_run()

    def verify(self, document: Any, config: ScrapeConfig, url: str | None = None) -> ValidationReport:
        """Check every selector in a config against a document.

        Args:
            document: Raw HTML/XML or a parsed tree
            config: Scrape config whose selectors are checked
            url: Where the document came from, for the report

        Returns:
            ValidationReport with one check per selector

        """
        root = ensure_tree(document)
        report = ValidationReport(url=url)
        field_scope = root

        if config.container:
            for level, selector in self._levels(config.container.selectors, config.container.alternatives):
                report.checks.append(self._check(root, 'container', level, selector))
            containers = self.resolver.resolve(
                [*config.container.selectors, *config.container.alternatives], root
            )
            report.container_count = len(containers)
            if containers:
                field_scope = containers[0]

        for field in config.fields:
            for level, selector in self._levels(field.selectors, field.alternatives):
                report.checks.append(self._check(field_scope, field.key, level, selector))

        if config.pagination:
            primary = [config.pagination.primary_selector] if config.pagination.primary_selector else []
            for level, selector in self._levels(primary, config.pagination.alternatives):
                report.checks.append(self._check(root, 'pagination', level, selector))

        if self.console:
            self._print_report(report)
        return report

    @staticmethod
    def _levels(primary: list[str], alternatives: list[str]) -> list[tuple[str, str]]:
        return [('primary', s) for s in primary] + [('alternative', s) for s in alternatives]

    def _check(self, scope: Any, target: str, level: str, selector: str) -> SelectorCheck:
        try:
            nodes = self.resolver.evaluate(selector, scope)
        except SelectorSyntaxError as e:
            return SelectorCheck(target=target, level=level, selector=selector, status='invalid', reason=e.reason)
        return SelectorCheck(
            target=target,
            level=level,
            selector=selector,
            status='matched' if nodes else 'no_match',
            match_count=len(nodes),
        )

    def _print_report(self, report: ValidationReport) -> None:
        """Print the per-selector results."""
        if not self.console:
            return

        if report.container_count is not None:
            self.console.print(f'  → Containers matched: {report.container_count}')
        for check in report.checks:
            if check.status == 'matched':
                self.console.print(
                    f'  ✓ {check.target} ({check.level}): {escape(check.selector)} → {check.match_count} nodes'
                )
            elif check.status == 'no_match':
                self.console.print(f'  ✗ {check.target} ({check.level}): {escape(check.selector)} → no match')
            else:
                prefix = f'  ✗ {check.target} ({check.level}): {escape(check.selector)}'
                self.console.print(f'{prefix} → invalid: {escape(check.reason or "")}')

        total = len({check.target for check in report.checks})
        unmatched = len(report.unmatched_targets)
        self.console.print(f'  → Summary: {total - unmatched}/{total} targets matched')
