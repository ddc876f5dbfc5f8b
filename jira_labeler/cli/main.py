# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
jira-labeler CLI - Main entry point

Usage:
    jira-labeler sync        - Reconcile Jira ticket state onto open PR labels
    jira-labeler config      - Show the resolved configuration
"""

import logging
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from jira_labeler import __version__
from jira_labeler.classes import SyncSummary
from jira_labeler.constants import JIRA_SEARCH_APIS
from jira_labeler.errors import LabelerError
from jira_labeler.sync import LabelSync
from jira_labeler.utils.config import LabelerConfig
from jira_labeler.utils.logging import PACKAGE_LOGGER, setup_logging

console = Console()
logger = logging.getLogger(PACKAGE_LOGGER)


def config_options(func):
    """Options shared by every command that needs a LabelerConfig. Unset options fall back to the environment."""
    options = [
        click.option('--github-token', default=None, help='GitHub token used to list PRs and set labels'),
        click.option('--repository', default=None, help="Repository as 'owner/repo' (default: $GITHUB_REPOSITORY)"),
        click.option('--jira-host', default=None, help='Jira host name, e.g. example.atlassian.net'),
        click.option('--jira-protocol', default=None, help='http or https (default: https)'),
        click.option('--jira-username', default=None, help='Jira user for basic auth'),
        click.option('--jira-password', default=None, help='Jira password or API token'),
        click.option('--jira-api-version', default=None, help='Jira REST API version (default: 2)'),
        click.option(
            '--jira-strict-ssl', type=click.BOOL, default=None, help='Verify the Jira TLS certificate (true/false)'
        ),
        click.option(
            '--jira-search-api',
            type=click.Choice(JIRA_SEARCH_APIS),
            default=None,
            help="Jira search endpoint: 'jql' (Cloud), 'legacy' (Server/Data Center) or 'auto' (by host)",
        ),
        click.option('--ticket-regex', default=None, help='Pattern that finds the ticket key in a PR title/body'),
        click.option('--ticket-prefix', default=None, help='Label namespace (default: jira)'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def load_config(**options) -> LabelerConfig:
    try:
        return LabelerConfig.from_env(**options)
    except LabelerError as e:
        raise click.ClickException(str(e))


def print_summary(summary: SyncSummary):
    title = 'Labeler summary (dry run)' if summary.dry_run else 'Labeler summary'
    table = Table(title=title, show_header=True)
    table.add_column('Metric', style='cyan')
    table.add_column('Count', style='green', justify='right')

    table.add_row('Open PRs', str(summary.pulls_listed))
    table.add_row('PRs with ticket', str(summary.pulls_with_ticket))
    table.add_row('Tickets resolved', str(summary.tickets_resolved))
    table.add_row('PRs needing changes', str(summary.pulls_changed))
    table.add_row('PRs updated', str(summary.pulls_updated))
    if summary.pulls_failed:
        table.add_row('PRs failed', f'[red]{summary.pulls_failed}[/red]')

    console.print(table)


@click.group()
@click.version_option(version=__version__, prog_name='jira-labeler')
def cli():
    """jira-labeler - Mirror Jira ticket status and labels onto GitHub PR labels"""
    pass


@cli.command('sync')
@config_options
@click.option('--dry-run', is_flag=True, default=False, help='Compute label changes without writing them')
@click.option('--verbose', '-v', is_flag=True, default=False, help='Enable debug logging')
def sync_command(verbose: bool, **options):
    """Reconcile Jira ticket state onto the labels of every open PR.

    \b
    Every option can also be given as an action input (INPUT_<NAME>) or an
    environment variable, e.g. JIRA_HOST or TICKET_REGEX.

    \b
    Examples:
        jira-labeler sync --repository owner/repo --ticket-regex 'ABC-[0-9]+'
        jira-labeler sync --dry-run -v
    """
    setup_logging(logging.DEBUG if verbose else logging.INFO)
    # an unset flag must not override DRY_RUN from the environment
    options['dry_run'] = options['dry_run'] or None
    config = load_config(**options)

    try:
        summary = LabelSync(config).run()
    except LabelerError as e:
        logger.error(str(e))
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        sys.exit(1)

    print_summary(summary)


@cli.command('config')
@config_options
def config_command(**options):
    """Show the resolved configuration with secrets masked."""
    config = load_config(**options)

    table = Table(show_header=True)
    table.add_column('Setting', style='cyan')
    table.add_column('Value', style='green')

    for key, value in config.masked().items():
        str_val = str(value)
        if len(str_val) > 40:
            str_val = str_val[:20] + '...' + str_val[-17:]
        table.add_row(key, escape(str_val))

    console.print('\n[bold]jira-labeler configuration[/bold]\n')
    console.print(table)

    try:
        config.validate()
    except LabelerError as e:
        console.print(f'\n[yellow]{escape(str(e))}[/yellow]')


def main():
    """Main entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
