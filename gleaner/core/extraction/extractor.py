"""Extracts records from documents using container and field descriptors."""

import logging
from collections.abc import Sequence
from typing import Any, TypeVar

import logfire
from pydantic import BaseModel, ValidationError

from gleaner.core.pipes import PipeContext, PipeRegistry, apply_pipes, check_pipes, default_registry, stringify
from gleaner.core.selector import SelectorResolver, default_resolver, ensure_tree, node_content
from gleaner.exceptions import RecordValidationError
from gleaner.models.descriptors import ContainerDescriptor, FieldDescriptor, Multiplicity
from gleaner.models.results import Record

logger = logging.getLogger(__name__)

ModelT = TypeVar('ModelT', bound=BaseModel)

_JOIN_SEPARATORS = {
    Multiplicity.SPACE: ' ',
    Multiplicity.COMMA: ', ',
}


def is_empty(value: Any) -> bool:
    """Whether a post-pipe field value counts as nothing extracted.

    Only None, the empty string and empty sequences are empty. Falsy results
    such as ``0`` or ``"0"`` are legitimate values.
    """
    if value is None:
        return True
    if isinstance(value, str | list | tuple):
        return len(value) == 0
    return False


class PatternExtractor:
    """Turns a parsed document into records, one per container match.

    Selectors are resolved first-match-wins. A field whose primary selectors
    yield an empty post-pipe value is retried with its alternatives, and a
    field that is still empty is left out of the record.

    Attributes:
        resolver: Selector resolver shared across calls
        registry: Pipe registry used to look up pipe names

    """

    def __init__(self, resolver: SelectorResolver | None = None, registry: PipeRegistry | None = None):
        """Initialize the extractor.

        Args:
            resolver: Selector resolver, defaults to the shared one
            registry: Pipe registry, defaults to the process-wide one

        """
        self.resolver = resolver or default_resolver
        self.registry = registry or default_registry

    def extract(
        self,
        document: Any,
        container: ContainerDescriptor | None,
        fields: Sequence[FieldDescriptor],
        base_url: str | None = None,
    ) -> list[Record]:
        """Extract records from a document.

        Without a container the whole document is one scope and exactly one
        record is returned, even if it is empty. With a container, each
        matched node yields a record and records with no populated keys are
        dropped; no container match means no records.

        Args:
            document: Raw HTML/XML or an already parsed lxml tree
            container: Optional repeating-element descriptor
            fields: Field descriptors, in output order
            base_url: URL of the document, made available to pipes

        Returns:
            Records in document order

        Raises:
            ParseError: If raw content cannot be parsed
            PipeError: If a pipe is unknown or rejects its input; aborts the whole call

        """
        self.require_pipes(fields)
        root = ensure_tree(document)
        context = PipeContext(base_url=base_url)

        with logfire.span('extract_records', fields=len(fields), has_container=container is not None):
            if container is None:
                return [self._extract_record(root, fields, context)]

            scopes = self.resolver.resolve([*container.selectors, *container.alternatives], root)
            logger.debug(f'Matched {len(scopes)} containers')

            records = []
            for scope in scopes:
                record: Record = {}
                if container.value_key:
                    value = node_content(scope, container.content)
                    if value:
                        record[container.value_key] = value
                record.update(self._extract_record(scope, fields, context))
                if record:
                    records.append(record)
            return records

    def require_pipes(self, fields: Sequence[FieldDescriptor]) -> None:
        """Check that every pipe named by the fields is registered.

        Raises:
            UnknownPipeError: For the first unregistered name

        """
        for field in fields:
            check_pipes(field.pipes, self.registry)

    def _extract_record(self, scope: Any, fields: Sequence[FieldDescriptor], context: PipeContext) -> Record:
        record: Record = {}
        for field in fields:
            value = self.extract_field(scope, field, context)
            if not is_empty(value):
                record[field.key] = value
        return record

    def extract_field(self, scope: Any, field: FieldDescriptor, context: PipeContext | None = None) -> Any:
        """Extract one field within a scope, falling back to alternatives.

        Args:
            scope: Node the field selectors are evaluated against
            field: Field descriptor
            context: Pipe context

        Returns:
            The combined post-pipe value, or None if nothing was extracted

        """
        context = context or PipeContext()
        check_pipes(field.pipes, self.registry)

        nodes = self.resolver.resolve(field.selectors, scope)
        value = self._combine(nodes, field, context)
        if not is_empty(value) or not field.alternatives:
            return value if not is_empty(value) else None

        logger.debug(f"Field '{field.key}' empty after primary selectors, trying alternatives")
        nodes = self.resolver.resolve(field.alternatives, scope)
        value = self._combine(nodes, field, context)
        return value if not is_empty(value) else None

    def _combine(self, nodes: list[Any], field: FieldDescriptor, context: PipeContext) -> Any:
        if not nodes:
            return None

        if field.multiple == Multiplicity.FIRST:
            return self._pipe(node_content(nodes[0], field.content), field, context)

        values = []
        for node in nodes:
            raw = node_content(node, field.content)
            if not raw:
                continue
            value = self._pipe(raw, field, context)
            if not is_empty(value):
                values.append(value)

        if field.multiple == Multiplicity.ARRAY:
            return values
        return _JOIN_SEPARATORS[field.multiple].join(stringify(value) for value in values)

    def _pipe(self, value: str, field: FieldDescriptor, context: PipeContext) -> Any:
        if not field.pipes:
            return value
        return apply_pipes(value, field.pipes, context, self.registry)


def to_models(records: Sequence[Record], model: type[ModelT]) -> list[ModelT]:
    """Validate records into instances of a pydantic model.

    Record keys are matched to model fields by name (or alias). Keys the
    model does not declare follow the model's own ``extra`` setting.

    Args:
        records: Extracted records
        model: Target pydantic model class

    Returns:
        One model instance per record, in the same order

    Raises:
        RecordValidationError: For the first record that does not validate

    """
    items = []
    for index, record in enumerate(records):
        try:
            items.append(model.model_validate(record))
        except ValidationError as e:
            raise RecordValidationError(model.__name__, index, dict(record), e.errors()) from e
    return items


def extract_records(
    document: Any,
    container: ContainerDescriptor | None,
    fields: Sequence[FieldDescriptor],
    base_url: str | None = None,
    registry: PipeRegistry | None = None,
    model: type[BaseModel] | None = None,
) -> list[Any]:
    """Extract records with a default-configured PatternExtractor.

    Args:
        document: Raw HTML/XML or an already parsed lxml tree
        container: Optional repeating-element descriptor
        fields: Field descriptors, in output order
        base_url: URL of the document, made available to pipes
        registry: Pipe registry, defaults to the process-wide one
        model: Optional pydantic model each record is validated into

    Returns:
        Records in document order, as model instances when a model is given

    """
    records = PatternExtractor(registry=registry).extract(document, container, fields, base_url=base_url)
    if model is None:
        return records
    return to_models(records, model)
