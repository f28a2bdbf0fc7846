"""
cli.py
=======
Command line entry point for running scrape configs.

Usage:
    gleaner scrape  config.yaml https://example.com/products
    gleaner scrape  config.yaml page.html --format markdown
    gleaner pages   config.yaml https://example.com/products --output out.json
    gleaner urls    config.yaml https://example.com/products
    gleaner validate config.yaml https://example.com/products
    gleaner pipes
    gleaner tojson  page.html --attributes
"""

import argparse
import os
import sys
from pathlib import Path
from urllib.parse import urlparse

import logfire
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from gleaner.config import env_overrides, load_config
from gleaner.core.pipes import list_pipes
from gleaner.core.scraper import Scraper, url_to_json
from gleaner.core.selector import JSONOptions, document_to_json
from gleaner.exceptions import GleanerError, PaginationError
from gleaner.models.descriptors import FetchSettings
from gleaner.models.results import PaginatedResults, Record, ValidationReport
from gleaner.outputs import OUTPUT_FORMATS, render, save_formatted
from gleaner.utils.files import get_output_path, init_workdir, output_filename
from gleaner.utils.logging import setup_local_logging

custom_theme = Theme(
    {
        'info': 'dim cyan',
        'warning': 'magenta',
        'danger': 'bold red',
        'success': 'bold green',
        'step': 'bold blue',
    }
)


def is_url(source: str) -> bool:
    return urlparse(source).scheme in ('http', 'https')


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(prog='gleaner', description='Extract structured records from HTML with XPath')
    parser.add_argument('--log-level', default='INFO', help='Log file level (DEBUG, INFO, ... or ALL)')
    parser.add_argument('--no-log-file', action='store_true', help='Do not write a log file under .gleaner/logs')
    subparsers = parser.add_subparsers(dest='command', required=True)

    def add_output_options(sub: argparse.ArgumentParser) -> None:
        sub.add_argument('--output', '-o', type=str, help='Write results to this file instead of stdout')
        sub.add_argument('--format', '-f', choices=OUTPUT_FORMATS, default='json', help='Output format')
        sub.add_argument('--save', action='store_true', help='Write results under .gleaner/output')

    scrape = subparsers.add_parser('scrape', help='Extract records from one page (URL or local file)')
    scrape.add_argument('config', help='Scrape config (.json, .yaml or .yml)')
    scrape.add_argument('source', help='URL or local HTML/XML file')
    add_output_options(scrape)

    pages = subparsers.add_parser('pages', help='Extract records from every page of a paginated listing')
    pages.add_argument('config', help='Scrape config with a pagination section')
    pages.add_argument('url', help='Start URL')
    add_output_options(pages)

    urls = subparsers.add_parser('urls', help='List page URLs without extracting records')
    urls.add_argument('config', help='Scrape config with a pagination section')
    urls.add_argument('url', help='Start URL')

    validate = subparsers.add_parser('validate', help='Check config selectors against a page')
    validate.add_argument('config', help='Scrape config (.json, .yaml or .yml)')
    validate.add_argument('source', nargs='?', help='URL or local file; omit to only check selector syntax')

    tojson = subparsers.add_parser('tojson', help='Convert a whole document (URL or local file) to JSON')
    tojson.add_argument('source', help='URL or local HTML/XML file')
    tojson.add_argument('--attributes', action='store_true', help='Include element attributes')
    tojson.add_argument('--no-text', action='store_true', help='Leave out text content')
    tojson.add_argument('--keep-whitespace', action='store_true', help='Do not trim text nodes')
    tojson.add_argument('--compact', action='store_true', help='Write JSON on a single line')
    tojson.add_argument('--output', '-o', type=str, help='Write JSON to this file instead of stdout')

    subparsers.add_parser('pipes', help='List registered pipes')
    return parser


def _default_output(source: str, output_format: str) -> Path:
    init_workdir()
    extension = 'md' if output_format == 'markdown' else 'json'
    return get_output_path() / output_filename(source, extension)


def _emit(console: Console, args: argparse.Namespace, source: str, data: list[Record] | PaginatedResults) -> None:
    if args.output or args.save:
        filepath = args.output or str(_default_output(source, args.format))
        path = save_formatted(filepath, source, data, args.format)
        console.print(f'[success]✓ Saved to {path}[/success]')
    else:
        # Plain print keeps stdout machine-readable
        print(render(source, data, args.format))


def _print_report(console: Console, report: ValidationReport) -> None:
    table = Table(title='Selector validation')
    table.add_column('Target', style='cyan')
    table.add_column('Level')
    table.add_column('Selector')
    table.add_column('Result')
    styles = {'matched': 'green', 'no_match': 'yellow', 'invalid': 'red'}
    for check in report.checks:
        result = f'{check.match_count} nodes' if check.status == 'matched' else check.reason or check.status
        table.add_row(check.target, check.level, escape(check.selector), f'[{styles[check.status]}]{escape(result)}[/]')
    console.print(table)
    if report.container_count is not None:
        console.print(f'[info]Containers matched: {report.container_count}[/info]')
    if report.success:
        console.print('[success]✓ Every target matched[/success]')
    else:
        console.print(f'[warning]⚠ Unmatched: {", ".join(report.unmatched_targets) or "none"}[/warning]')


def _to_json(args: argparse.Namespace, console: Console) -> int:
    options = JSONOptions(
        include_attributes=args.attributes,
        include_text=not args.no_text,
        trim_whitespace=not args.keep_whitespace,
        pretty=not args.compact,
    )
    with logfire.span('cli_tojson', source=args.source):
        if is_url(args.source):
            text = url_to_json(args.source, options, settings=FetchSettings(**env_overrides()))
        else:
            text = document_to_json(Path(args.source).read_bytes(), options)

    if args.output:
        path = Path(args.output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding='utf-8')
        console.print(f'[success]✓ Saved to {path}[/success]')
    else:
        print(text)
    return 0


def run_command(args: argparse.Namespace, console: Console) -> int:
    """Run the parsed subcommand and return the exit code."""
    if args.command == 'pipes':
        for name in list_pipes():
            print(name)
        return 0

    if args.command == 'tojson':
        return _to_json(args, console)

    config = load_config(args.config)
    with Scraper(config) as scraper:
        if args.command == 'scrape':
            with logfire.span('cli_scrape', source=args.source):
                if is_url(args.source):
                    records = scraper.scrape_url(args.source)
                else:
                    records = scraper.scrape_html(Path(args.source).read_bytes())
            console.print(f'[success]✓ Extracted {len(records)} records[/success]')
            _emit(console, args, args.source, records)
            return 0

        if args.command == 'pages':
            console.print(Panel(f'Paginating: {args.url}', style='bold blue'))
            try:
                results = scraper.scrape_pages(args.url)
            except PaginationError as e:
                console.print(f'[danger]✗ {escape(str(e))}[/danger]')
                partial = PaginatedResults(pages=list(e.partial_pages))
                if partial.pages:
                    console.print(f'[warning]⚠ Writing {partial.total_items} items from earlier pages[/warning]')
                    _emit(console, args, args.url, partial)
                return 1
            console.print(f'[success]✓ {results.total_items} records from {results.total_pages} pages[/success]')
            _emit(console, args, args.url, results)
            return 0

        if args.command == 'urls':
            for url in scraper.extract_page_urls(args.url):
                print(url)
            return 0

        if args.command == 'validate':
            if not args.source:
                # Selectors and pipe names were checked when the scraper was built
                console.print('[success]✓ All selectors compile and all pipes are registered[/success]')
                return 0
            if is_url(args.source):
                report = scraper.validate(url=args.source)
            else:
                report = scraper.validate(Path(args.source).read_bytes(), url=args.source)
            _print_report(console, report)
            return 0 if report.success else 1

    return 2


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    load_dotenv()

    logfire_token = os.getenv('LOGFIRE_TOKEN')
    if logfire_token:
        logfire.configure(token=logfire_token)
    else:
        logfire.configure(send_to_logfire=False, console=False)

    args = build_parser().parse_args(argv)
    console = Console(theme=custom_theme, stderr=True)

    if not args.no_log_file:
        log_file = setup_local_logging(args.log_level)
        console.print(f'[info]Logging to {log_file}[/info]')

    try:
        return run_command(args, console)
    except GleanerError as e:
        logfire.error('Command failed', command=args.command, error=str(e))
        console.print(f'[danger]Error: {escape(str(e))}[/danger]')
        return 1
    except OSError as e:
        console.print(f'[danger]Error: {escape(str(e))}[/danger]')
        return 1


if __name__ == '__main__':
    sys.exit(main())
