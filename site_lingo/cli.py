# === FILE: site_lingo/cli.py ===
#!/usr/bin/env python3
"""
Command line entry point of SiteLingo.

Commands:
  serve      Run the translation proxy server
  map        Crawl a site and list its pages
  fetch      Store the fragments of selected pages
  translate  Fill in translations for a stored site
  config     Show the active configuration

Common options:
  --config PATH       YAML/JSON config (default: configs/default.yaml when present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stdout only when omitted)
  --log-format FORMAT Logging format string

Example:
  site-lingo map https://example.com --limit 10 --json pages.json --pretty
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from site_lingo import __version__
from site_lingo.config import ProxyConfig, load_config
from site_lingo.engine import TranslationProxy
from site_lingo.errors import SiteLingoError
from site_lingo.logger import DEFAULT_FORMAT, init_logging
from site_lingo.report.json_report import render_json
from site_lingo.web import run_server

CONTEXT_SETTINGS = dict(help_option_names=["--help"])
_DEFAULT_CONFIG = Path("configs/default.yaml")


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


async def _with_proxy(cfg: ProxyConfig, operation):
    async with TranslationProxy.running(cfg) as proxy:
        return await operation(proxy)


def run_operation(cfg: ProxyConfig, operation):
    """Run *operation(proxy)* inside a fresh event loop and proxy lifetime."""
    return asyncio.run(_with_proxy(cfg, operation))


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteLingo, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to the YAML/JSON configuration file.'
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
    help='Log file (stdout when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """SiteLingo command group."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        if config_path is None and not _DEFAULT_CONFIG.exists():
            cfg = ProxyConfig()
        else:
            cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Failed to load configuration: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('serve', context_settings=CONTEXT_SETTINGS)
@click.option('--host', default=None, help='Bind address (overrides config)')
@click.option('--port', type=int, default=None, help='Port (overrides config)')
@click.pass_context
def serve(ctx, host, port):
    """Run the translation proxy server."""
    cfg = ctx.obj['config']
    run_server(cfg, host=host, port=port)


@cli.command('map', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--limit', '-l', 'limit', type=int, default=None, help='Page cap (overrides max_pages)')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save the page inventory to a JSON file'
)
@click.option('--pretty', is_flag=True, help='Indent JSON output (2 spaces)')
@click.pass_context
def map_site(ctx, url, limit, json_output, pretty):
    """Crawl URL breadth-first and list the discovered pages."""
    cfg = ctx.obj['config']
    if limit is not None and limit < 1:
        print_error('--limit must be >= 1')
    try:
        report = run_operation(cfg, lambda proxy: proxy.map_website(url, max_pages=limit))
    except SiteLingoError as e:
        print_error(f'Crawl failed: {e}')

    if json_output:
        try:
            saved = render_json(report, json_output)
            click.echo(f'JSON report: {saved}')
        except OSError as e:
            print_error(f'Failed to save JSON: {e}')
        return

    click.echo(json.dumps(report.to_dict(), ensure_ascii=False, indent=2 if pretty else None))


@cli.command('fetch', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.argument('pages', nargs=-1, required=True)
@click.pass_context
def fetch_site(ctx, url, pages):
    """Store the fragments of the selected PAGES of URL."""
    cfg = ctx.obj['config']
    try:
        result = run_operation(cfg, lambda proxy: proxy.fetch_website(url, list(pages)))
    except SiteLingoError as e:
        print_error(f'Ingestion failed: {e}')
    click.echo(json.dumps(result.to_dict(), ensure_ascii=False))


@cli.command('translate', context_settings=CONTEXT_SETTINGS)
@click.argument('website_id', type=int)
@click.argument('language')
@click.pass_context
def translate_site(ctx, website_id, language):
    """Translate the stored fragments of WEBSITE_ID into LANGUAGE."""
    cfg = ctx.obj['config']
    try:
        result = run_operation(cfg, lambda proxy: proxy.translate_website(website_id, language))
    except SiteLingoError as e:
        print_error(f'Translation failed: {e}')
    click.echo(json.dumps(result.to_dict(), ensure_ascii=False))


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the active configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
