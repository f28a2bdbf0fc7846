"""Pydantic models describing what to extract and how to walk pages."""

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from gleaner.exceptions import ConfigError

DEFAULT_MAX_PAGES = 100
DEFAULT_PAGINATION_TIMEOUT = 600.0  # seconds
DEFAULT_FETCH_TIMEOUT = 30.0  # seconds
DEFAULT_USER_AGENT = 'gleaner/1.0 (HTML extraction library)'

PAGINATION_TYPES = ('next-link', 'numbered')

# Compact pipe form splits on colons not escaped as "\:"
_COMPACT_SPLIT_RE = re.compile(r'(?<!\\):')


class Multiplicity(str, Enum):
    """How several matched nodes are combined into one field value."""

    FIRST = 'first'
    ARRAY = 'array'
    SPACE = 'space'
    COMMA = 'comma'


# Spellings accepted in config files besides the enum values
_MULTIPLICITY_ALIASES = {
    '': Multiplicity.FIRST,
    'none': Multiplicity.FIRST,
    'single': Multiplicity.FIRST,
    'all': Multiplicity.ARRAY,
    'list': Multiplicity.ARRAY,
    'with space': Multiplicity.SPACE,
    'with comma': Multiplicity.COMMA,
}


class ContentMode(str, Enum):
    """Whether a node contributes its text or its serialized markup."""

    TEXT = 'text'
    HTML = 'html'


def _as_selector_list(value: Any) -> list[str]:
    """Accept a single selector or a list, dropping blank entries."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    return [selector for selector in value if isinstance(selector, str) and selector.strip()]


def _rename_selector_keys(data: Any) -> Any:
    """Map the 'selector'/'xpath' spellings onto 'selectors'."""
    if isinstance(data, dict) and 'selectors' not in data:
        for alias in ('selector', 'xpath'):
            if alias in data:
                data = dict(data)
                data['selectors'] = data.pop(alias)
                break
    return data


class PipeInvocation(BaseModel):
    """A single named transformation and its parameters.

    Accepts either ``{'name': ..., 'params': [...]}`` or the compact
    ``'name:param1:param2'`` string form.

    Attributes:
        name: Registered pipe name (matched case-insensitively)
        params: Ordered string parameters passed to the pipe

    """

    name: str
    params: list[str] = Field(default_factory=list)

    @model_validator(mode='before')
    @classmethod
    def _parse_compact(cls, data: Any) -> Any:
        if isinstance(data, str):
            name, *params = [part.replace('\\:', ':') for part in _COMPACT_SPLIT_RE.split(data)]
            return {'name': name, 'params': params}
        return data

    @field_validator('name')
    @classmethod
    def _normalize_name(cls, value: str) -> str:
        name = value.strip().lower()
        if not name:
            raise ConfigError('pipe name must not be empty')
        return name

    @field_validator('params', mode='before')
    @classmethod
    def _stringify_params(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [str(param) for param in value]
        return value

    @classmethod
    def parse(cls, definition: str) -> 'PipeInvocation':
        """Parse a compact ``name:param1:param2`` definition."""
        return cls.model_validate(definition)

    def __str__(self) -> str:
        """Return the compact string form."""
        return ':'.join(part.replace(':', '\\:') for part in [self.name, *self.params])


class FieldDescriptor(BaseModel):
    """One named value to extract from each record scope.

    Attributes:
        key: Output name, unique within a record
        selectors: Primary selectors, tried in order
        alternatives: Selectors tried only when the primary result is empty after pipes
        content: Text content or serialized markup
        multiple: How multiple matches are combined
        pipes: Transformations applied to each extracted value

    """

    key: str
    selectors: list[str] = Field(default_factory=list)
    alternatives: list[str] = Field(default_factory=list)
    content: ContentMode = ContentMode.TEXT
    multiple: Multiplicity = Multiplicity.FIRST
    pipes: list[PipeInvocation] = Field(default_factory=list)

    @model_validator(mode='before')
    @classmethod
    def _normalize_keys(cls, data: Any) -> Any:
        return _rename_selector_keys(data)

    @field_validator('selectors', 'alternatives', mode='before')
    @classmethod
    def _listify(cls, value: Any) -> list[str]:
        return _as_selector_list(value)

    @field_validator('multiple', mode='before')
    @classmethod
    def _multiplicity_alias(cls, value: Any) -> Any:
        if value is None:
            return Multiplicity.FIRST
        if isinstance(value, str):
            return _MULTIPLICITY_ALIASES.get(value.strip().lower(), value.strip().lower())
        return value

    @model_validator(mode='after')
    def _check_required(self) -> 'FieldDescriptor':
        if not self.key or not self.key.strip():
            raise ConfigError('field key must not be empty')
        if not self.selectors:
            raise ConfigError(f"field '{self.key}' needs at least one selector")
        return self

    @property
    def all_selectors(self) -> list[str]:
        """Primary selectors followed by alternatives."""
        return [*self.selectors, *self.alternatives]


class ContainerDescriptor(BaseModel):
    """The repeating element that scopes one output record.

    Attributes:
        selectors: Primary container selectors
        alternatives: Fallback container selectors
        value_key: If set, each record also gets the container's own content under this key
        content: Content mode used for the injected container value

    """

    selectors: list[str] = Field(default_factory=list)
    alternatives: list[str] = Field(default_factory=list)
    value_key: str | None = None
    content: ContentMode = ContentMode.TEXT

    @model_validator(mode='before')
    @classmethod
    def _accept_shorthand(cls, data: Any) -> Any:
        if isinstance(data, str | list):
            return {'selectors': data}
        return _rename_selector_keys(data)

    @field_validator('selectors', 'alternatives', mode='before')
    @classmethod
    def _listify(cls, value: Any) -> list[str]:
        return _as_selector_list(value)

    @model_validator(mode='after')
    def _check_required(self) -> 'ContainerDescriptor':
        if not self.selectors:
            raise ConfigError('container needs at least one selector')
        return self


class PaginationConfig(BaseModel):
    """How to find further pages of a listing.

    Attributes:
        type: 'next-link' to follow a chain, 'numbered' to enumerate page links
        next_selector: Selector for the "next page" link (next-link)
        page_selector: Selector for every page link (numbered)
        alternatives: Fallback selectors for whichever selector the strategy uses
        pipes: Transformations applied to the raw link value
        max_pages: Upper bound on pages visited
        timeout: Wall-clock bound on a traversal, in seconds

    """

    model_config = ConfigDict(populate_by_name=True)

    type: str = 'next-link'
    next_selector: str | None = Field(default=None, alias='nextSelector')
    page_selector: str | None = Field(default=None, alias='pageSelector')
    alternatives: list[str] = Field(default_factory=list, alias='altSelectors')
    pipes: list[PipeInvocation] = Field(default_factory=list)
    max_pages: int = Field(default=DEFAULT_MAX_PAGES, alias='maxPages')
    timeout: float = DEFAULT_PAGINATION_TIMEOUT

    @field_validator('alternatives', mode='before')
    @classmethod
    def _listify(cls, value: Any) -> list[str]:
        return _as_selector_list(value)

    @field_validator('type', mode='before')
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower().replace('_', '-')
        return value

    @model_validator(mode='after')
    def _check_strategy(self) -> 'PaginationConfig':
        if self.type not in PAGINATION_TYPES:
            raise ConfigError(f'unknown pagination type: {self.type}')
        if self.max_pages <= 0:
            raise ConfigError('pagination max_pages must be positive')
        if self.timeout <= 0:
            raise ConfigError('pagination timeout must be positive')
        if self.type == 'next-link' and not (self.next_selector or self.alternatives):
            raise ConfigError('next_selector is required for next-link pagination')
        if self.type == 'numbered' and not (self.page_selector or self.alternatives):
            raise ConfigError('page_selector is required for numbered pagination')
        return self

    @property
    def primary_selector(self) -> str | None:
        """The selector the configured strategy uses."""
        selector = self.next_selector if self.type == 'next-link' else self.page_selector
        return selector if selector and selector.strip() else None

    @property
    def link_selectors(self) -> list[str]:
        """Primary selector for the configured strategy, followed by alternatives."""
        return _as_selector_list(self.primary_selector) + self.alternatives


class FetchSettings(BaseModel):
    """Transport settings for the bundled fetcher.

    Attributes:
        timeout: Per-request timeout in seconds
        user_agent: Static User-Agent header
        random_user_agent: Rotate realistic browser user agents instead
        max_retries: Extra attempts after the first failure
        proxy: Proxy URL for both http and https
        headers: Extra request headers
        allow_private_ips: Disable SSRF protection (private and loopback hosts)

    """

    timeout: float = DEFAULT_FETCH_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    random_user_agent: bool = False
    max_retries: int = 0
    proxy: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    allow_private_ips: bool = False

    @model_validator(mode='after')
    def _check_bounds(self) -> 'FetchSettings':
        if self.timeout <= 0:
            raise ConfigError('timeout must be positive')
        if self.max_retries < 0:
            raise ConfigError('max_retries must not be negative')
        return self


class ScrapeConfig(BaseModel):
    """Complete description of a scrape.

    ``fields`` may be given as a list of descriptors or as a mapping from key
    to descriptor, where a bare string value is shorthand for a single
    primary selector.

    Attributes:
        container: Optional repeating-element boundary
        fields: Ordered field descriptors
        pagination: Optional pagination strategy
        fetch: Transport settings

    """

    container: ContainerDescriptor | None = None
    fields: list[FieldDescriptor]
    pagination: PaginationConfig | None = None
    fetch: FetchSettings = Field(default_factory=FetchSettings)

    @field_validator('fields', mode='before')
    @classmethod
    def _fields_from_mapping(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        fields = []
        for key, entry in value.items():
            if isinstance(entry, str | list):
                entry = {'selectors': entry}
            elif isinstance(entry, dict):
                entry = _rename_selector_keys(entry)
            fields.append({**entry, 'key': key})
        return fields

    @model_validator(mode='after')
    def _check_fields(self) -> 'ScrapeConfig':
        if not self.fields:
            raise ConfigError('at least one field is required')
        seen: set[str] = set()
        duplicates = []
        for field in self.fields:
            if field.key in seen:
                duplicates.append(field.key)
            seen.add(field.key)
        if duplicates:
            raise ConfigError('field keys must be unique', [f'duplicate key {key!r}' for key in duplicates])
        if self.container and self.container.value_key in seen:
            raise ConfigError(f"container value_key '{self.container.value_key}' collides with a field key")
        return self

    def require_pagination(self) -> PaginationConfig:
        """Return the pagination config or raise if none is set."""
        if self.pagination is None:
            raise ConfigError('pagination config is required')
        return self.pagination

    def selectors_by_target(self) -> list[tuple[str, str, str]]:
        """Every selector in the config as (target, level, selector) tuples."""
        entries: list[tuple[str, str, str]] = []
        if self.container:
            entries += [('container', 'primary', s) for s in self.container.selectors]
            entries += [('container', 'alternative', s) for s in self.container.alternatives]
        for field in self.fields:
            entries += [(field.key, 'primary', s) for s in field.selectors]
            entries += [(field.key, 'alternative', s) for s in field.alternatives]
        if self.pagination:
            primary = self.pagination.primary_selector
            if primary:
                entries.append(('pagination', 'primary', primary))
            entries += [('pagination', 'alternative', s) for s in self.pagination.alternatives]
        return entries

    def validate_for_run(self, require_pagination: bool = False) -> 'ScrapeConfig':
        """Run the checks that must pass before extraction or traversal starts.

        Structural checks already ran at construction; this adds strict
        selector syntax validation.

        Args:
            require_pagination: Also require a pagination section

        Returns:
            The config itself

        Raises:
            ConfigError: Listing every selector that does not compile

        """
        from gleaner.core.selector.resolver import default_resolver

        if require_pagination:
            self.require_pagination()

        problems = []
        for target, level, selector in self.selectors_by_target():
            reason = default_resolver.check(selector)
            if reason:
                problems.append(f'{target} {level} selector {selector!r}: {reason}')
        if problems:
            raise ConfigError('invalid selectors', problems)
        return self
