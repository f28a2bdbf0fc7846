import logging
from pathlib import Path

from gleaner.utils.files import get_logs_path, get_output_path, get_project_root, init_workdir, output_filename
from gleaner.utils.logging import setup_local_logging


def test_get_project_root(monkeypatch, tmp_path):
    # Create a dummy project structure
    project_root = tmp_path / 'project'
    project_root.mkdir()
    (project_root / 'pyproject.toml').touch()

    sub_dir = project_root / 'src' / 'deep' / 'dir'
    sub_dir.mkdir(parents=True)

    # Mock Path.cwd() to simulate being in the sub_dir
    monkeypatch.setattr(Path, 'cwd', lambda: sub_dir)

    root = get_project_root()
    assert root == project_root


def test_get_project_root_default(monkeypatch, tmp_path):
    # Test fallback to CWD if no markers found
    monkeypatch.setattr(Path, 'cwd', lambda: tmp_path)

    assert get_project_root() == tmp_path


def test_init_workdir(monkeypatch, tmp_path):
    monkeypatch.setattr('gleaner.utils.files.get_project_root', lambda: tmp_path)

    workdir = init_workdir()

    assert workdir == tmp_path / '.gleaner'
    assert get_logs_path().is_dir()
    assert get_output_path().is_dir()
    assert (workdir / '.gitignore').read_text() == '# Automatically created by gleaner\n*\n'


def test_output_filename():
    assert output_filename('https://shop.example.com/products/list', 'json') == 'shop.example.com_products_list.json'
    assert output_filename('pages/listing.html', 'md') == 'listing.md'
    assert output_filename('https://example.com/', 'json') == 'example.com.json'
    assert output_filename('???', 'json') == 'output.json'


def test_setup_local_logging(tmp_path):
    root_logger = logging.getLogger()
    before = list(root_logger.handlers)
    level = root_logger.level

    try:
        log_file = setup_local_logging('INFO', logs_dir=tmp_path / 'logs')
        logging.getLogger('gleaner.test').info('hello from test')

        assert log_file.parent == tmp_path / 'logs'
        assert log_file.name.startswith('run_')
        for handler in root_logger.handlers:
            handler.flush()
        assert 'hello from test' in log_file.read_text()
    finally:
        for handler in root_logger.handlers[:]:
            if handler not in before:
                root_logger.removeHandler(handler)
                handler.close()
        root_logger.setLevel(level)
