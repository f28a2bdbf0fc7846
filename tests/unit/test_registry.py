import threading

import pytest

from gleaner.core.pipes import PipeRegistry, get_pipe, list_pipes, register_pipe, unregister_pipe
from gleaner.exceptions import ConfigError, PipeError, UnknownPipeError


def shout(value, params, context):
    return value.upper() + '!'


def test_registry_starts_with_builtins():
    registry = PipeRegistry()
    assert 'trim' in registry
    assert 'humanduration' in registry.names()
    assert registry.names() == sorted(registry.names())


def test_empty_registry():
    registry = PipeRegistry(include_builtins=False)
    assert registry.names() == []
    assert 'trim' not in registry


def test_register_is_case_insensitive():
    registry = PipeRegistry(include_builtins=False)
    registry.register('  Shout ', shout)

    assert registry.get('SHOUT') is shout
    assert 'shout' in registry
    assert registry.require('shout')('hi', [], None) == 'HI!'


def test_register_replaces_existing():
    registry = PipeRegistry()
    registry.register('trim', shout)
    assert registry.get('trim') is shout

    registry.register_builtins()
    assert registry.get('trim') is not shout


def test_register_rejects_bad_input():
    registry = PipeRegistry()
    with pytest.raises(ConfigError):
        registry.register('', shout)
    with pytest.raises(ConfigError):
        registry.register('broken', 'not callable')


def test_require_unknown_pipe():
    registry = PipeRegistry(include_builtins=False)
    registry.register('shout', shout)

    with pytest.raises(UnknownPipeError) as exc_info:
        registry.require('Whisper')

    assert isinstance(exc_info.value, PipeError)
    assert exc_info.value.pipe_name == 'whisper'
    assert exc_info.value.available == ['shout']
    assert 'not registered' in str(exc_info.value)


def test_unregister():
    registry = PipeRegistry()
    assert registry.unregister('trim') is True
    assert registry.unregister('trim') is False
    assert registry.get('trim') is None


def test_process_wide_registry_functions():
    register_pipe('test_shout', shout)
    try:
        assert get_pipe('TEST_SHOUT') is shout
        assert 'test_shout' in list_pipes()
    finally:
        assert unregister_pipe('test_shout') is True
    assert get_pipe('test_shout') is None


def test_concurrent_register_and_lookup():
    registry = PipeRegistry()
    errors = []

    def writer(index):
        for n in range(50):
            registry.register(f'pipe_{index}_{n}', shout)

    def reader():
        for _ in range(200):
            if registry.get('trim') is None:
                errors.append('trim missing')
            registry.names()

    threads = [threading.Thread(target=writer, args=(i,)) for i in range(4)]
    threads += [threading.Thread(target=reader) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert all(f'pipe_{i}_49' in registry for i in range(4))
