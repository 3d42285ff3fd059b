# === FILE: doc_scout/cli.py ===
#!/usr/bin/env python3
"""
Command-line entry point for the DocScout documentation crawler.

Commands:
  crawl URL   Crawl a documentation site and print/save the result
  config      Show the effective configuration

Common options:
  --config PATH       Path to a YAML/JSON config (default: configs/default.yaml if present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stderr only when omitted)
  --log-format FORMAT Logging format (e.g. "%(asctime)s %(levelname)s %(message)s")

crawl options:
  --depth INT         Crawl depth ceiling (override depth)
  --max-pages INT     Upper bound on collected pages (override max_pages)
  --fetcher KIND      Page fetch strategy: http or browser
  --json PATH         Save the JSON result to a file
  --pretty            Indent the JSON output (2 spaces)
  --scan-timeout SEC  Timeout of the whole crawl (seconds)

Also:
  --version, -v       Show the DocScout version

Example:
  doc_scout crawl https://docs.example.com/docs --depth 2 --max-pages 100 --json out.json --pretty
"""
import json
import sys
from pathlib import Path

import click

from doc_scout import __version__
from doc_scout.config import load_config
from doc_scout.engine import Engine
from doc_scout.logger import configure
from doc_scout.report.json_report import render_json, result_to_dict

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='DocScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML or JSON configuration file.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file path (stderr only when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """DocScout CLI command group."""
    # stdout carries the JSON result
    configure(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format,
        stream=sys.stderr,
    )
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path


def _load(ctx, **overrides):
    try:
        return load_config(ctx.obj['config_path'], **overrides)
    except Exception as e:
        print_error(f'Failed to load configuration: {e}')


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--depth', '-d', type=int, default=None, help='Crawl depth ceiling (override depth)')
@click.option('--max-pages', '-l', 'max_pages', type=int, default=None,
              help='Upper bound on collected pages (override max_pages)')
@click.option('--fetcher', '-f', type=click.Choice(['http', 'browser']), default=None,
              help='Page fetch strategy')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save the JSON result to a file'
)
@click.option('--pretty', is_flag=True, help='Indent the JSON output (2 spaces)')
@click.option(
    '--scan-timeout', 'scan_timeout',
    type=float,
    default=None,
    help='Timeout of the whole crawl (seconds)'
)
@click.pass_context
def crawl(ctx, url, depth, max_pages, fetcher, json_output, pretty, scan_timeout):
    """Crawl the documentation site at URL and classify its pages."""
    cfg = _load(ctx, seed_url=url, depth=depth, max_pages=max_pages, fetcher=fetcher)
    click.echo(f'Starting crawl of {cfg.seed}', err=True)
    try:
        result = Engine(cfg, scan_timeout=scan_timeout).run()
    except TimeoutError:
        print_error(f'Crawl did not finish within {scan_timeout} seconds')
    except Exception as e:
        print_error(f'Crawl failed: {e}')

    if not json_output:
        indent = 2 if pretty else None
        click.echo(json.dumps(result_to_dict(result), ensure_ascii=False, indent=indent))
        return

    try:
        saved_json = render_json(result, json_output, pretty=pretty)
        click.echo(f'JSON report: {saved_json}')
    except OSError as e:
        print_error(f'Failed to save JSON: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.argument('url', required=False)
@click.pass_context
def show_config(ctx, url):
    """Show the effective configuration as JSON."""
    cfg = _load(ctx, seed_url=url)
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
