import pytest

from gleaner.exceptions import ConfigError
from gleaner.models import (
    DEFAULT_MAX_PAGES,
    DEFAULT_PAGINATION_TIMEOUT,
    ContainerDescriptor,
    FetchSettings,
    FieldDescriptor,
    PaginationConfig,
    PipeInvocation,
    ScrapeConfig,
)


def test_pipe_invocation_compact_form():
    pipe = PipeInvocation.parse('RegexReplace:\\d+:X:i')
    assert pipe.name == 'regexreplace'
    assert pipe.params == ['\\d+', 'X', 'i']


def test_pipe_invocation_escaped_colon():
    pipe = PipeInvocation.parse('parsetime:%H\\:%M:UTC')
    assert pipe.params == ['%H:%M', 'UTC']
    assert str(pipe) == 'parsetime:%H\\:%M:UTC'


def test_pipe_invocation_mapping_form():
    pipe = PipeInvocation.model_validate({'name': 'substring', 'params': [0, 5]})
    assert pipe.params == ['0', '5']
    assert str(PipeInvocation(name='trim')) == 'trim'


def test_pipe_invocation_requires_name():
    with pytest.raises(ConfigError):
        PipeInvocation(name='  ')


def test_field_descriptor_aliases():
    field = FieldDescriptor.model_validate({'key': 'title', 'xpath': '//h1', 'alternatives': '//h2'})
    assert field.selectors == ['//h1']
    assert field.alternatives == ['//h2']
    assert field.all_selectors == ['//h1', '//h2']


def test_field_descriptor_drops_blank_selectors():
    field = FieldDescriptor(key='title', selectors=['//h1', '  ', ''])
    assert field.selectors == ['//h1']


def test_field_descriptor_requires_key_and_selectors():
    with pytest.raises(ConfigError):
        FieldDescriptor(key='', selectors=['//h1'])
    with pytest.raises(ConfigError):
        FieldDescriptor(key='title', selectors=[])
    with pytest.raises(ConfigError):
        FieldDescriptor(key='title', selectors=['   '])


def test_container_shorthand():
    assert ContainerDescriptor.model_validate('//li').selectors == ['//li']
    assert ContainerDescriptor.model_validate(['//li', '//tr']).selectors == ['//li', '//tr']
    assert ContainerDescriptor.model_validate({'selector': '//li', 'value_key': 'v'}).value_key == 'v'


def test_container_without_selectors():
    with pytest.raises(ConfigError):
        ContainerDescriptor(selectors=[], alternatives=['//li'])


def test_pagination_defaults():
    pagination = PaginationConfig(next_selector='//a[@rel="next"]/@href')
    assert pagination.type == 'next-link'
    assert pagination.max_pages == DEFAULT_MAX_PAGES == 100
    assert pagination.timeout == DEFAULT_PAGINATION_TIMEOUT == 600.0
    assert pagination.link_selectors == ['//a[@rel="next"]/@href']


def test_pagination_aliases():
    pagination = PaginationConfig.model_validate(
        {'type': 'Numbered', 'pageSelector': '//nav//a', 'altSelectors': ['//ul[@class="pages"]//a'], 'maxPages': 5}
    )
    assert pagination.type == 'numbered'
    assert pagination.max_pages == 5
    assert pagination.link_selectors == ['//nav//a', '//ul[@class="pages"]//a']


def test_pagination_type_spelling():
    assert PaginationConfig(type='next_link', next_selector='//a').type == 'next-link'


@pytest.mark.parametrize(
    'data',
    [
        {'type': 'infinite', 'next_selector': '//a'},
        {'type': 'next-link'},
        {'type': 'numbered', 'next_selector': '//a'},
        {'next_selector': '//a', 'max_pages': 0},
        {'next_selector': '//a', 'timeout': 0},
        {'next_selector': '//a', 'timeout': -5},
    ],
)
def test_pagination_invalid(data):
    with pytest.raises(ConfigError):
        PaginationConfig.model_validate(data)


def test_fetch_settings_bounds():
    assert FetchSettings().timeout == 30.0
    with pytest.raises(ConfigError):
        FetchSettings(timeout=0)
    with pytest.raises(ConfigError):
        FetchSettings(max_retries=-1)


def test_scrape_config_field_mapping():
    config = ScrapeConfig.model_validate(
        {
            'container': '//div[@class="product"]',
            'fields': {
                'name': './/h2/text()',
                'price': {'selector': './/span', 'pipes': ['trim', 'tofloat']},
                'tags': {'selectors': ['.//li'], 'multiple': 'array'},
            },
        }
    )

    assert [f.key for f in config.fields] == ['name', 'price', 'tags']
    assert config.fields[0].selectors == ['.//h2/text()']
    assert [p.name for p in config.fields[1].pipes] == ['trim', 'tofloat']
    assert config.pagination is None


def test_scrape_config_requires_fields():
    with pytest.raises(ConfigError):
        ScrapeConfig(fields=[])


def test_scrape_config_duplicate_keys():
    with pytest.raises(ConfigError) as exc_info:
        ScrapeConfig.model_validate(
            {'fields': [{'key': 'a', 'selectors': '//a'}, {'key': 'a', 'selectors': '//b'}]}
        )
    assert exc_info.value.problems == ["duplicate key 'a'"]


def test_scrape_config_value_key_collision():
    with pytest.raises(ConfigError):
        ScrapeConfig.model_validate({'container': {'selectors': '//li', 'value_key': 'a'}, 'fields': {'a': '//a'}})


def test_require_pagination():
    config = ScrapeConfig.model_validate({'fields': {'a': '//a'}})
    with pytest.raises(ConfigError):
        config.require_pagination()


def test_selectors_by_target():
    config = ScrapeConfig.model_validate(
        {
            'container': {'selectors': '//li', 'alternatives': ['//tr']},
            'fields': {'a': {'selectors': './a', 'alternatives': ['./b']}},
            'pagination': {'next_selector': '//a[@rel="next"]', 'alternatives': ['//a[.="Next"]']},
        }
    )

    assert config.selectors_by_target() == [
        ('container', 'primary', '//li'),
        ('container', 'alternative', '//tr'),
        ('a', 'primary', './a'),
        ('a', 'alternative', './b'),
        ('pagination', 'primary', '//a[@rel="next"]'),
        ('pagination', 'alternative', '//a[.="Next"]'),
    ]


def test_validate_for_run_is_strict_about_syntax():
    config = ScrapeConfig.model_validate(
        {
            'container': '//li',
            'fields': {'a': {'selectors': './a', 'alternatives': ['./b[']}},
            'pagination': {'next_selector': '//a[@rel="next"'},
        }
    )

    with pytest.raises(ConfigError) as exc_info:
        config.validate_for_run()

    problems = exc_info.value.problems
    assert len(problems) == 2
    assert problems[0].startswith("a alternative selector './b['")
    assert problems[1].startswith('pagination primary selector')


def test_validate_for_run_passes_valid_config(listing_config):
    assert listing_config.validate_for_run(require_pagination=True) is listing_config


def test_validate_for_run_requires_pagination_when_asked():
    config = ScrapeConfig.model_validate({'fields': {'a': '//a'}})
    with pytest.raises(ConfigError):
        config.validate_for_run(require_pagination=True)
