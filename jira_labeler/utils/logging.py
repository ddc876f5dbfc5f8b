import logging
import os
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = 'jira_labeler'

# log level -> GitHub Actions workflow command
WORKFLOW_COMMANDS = {
    logging.WARNING: 'warning',
    logging.ERROR: 'error',
    logging.CRITICAL: 'error',
}


def running_in_github_actions() -> bool:
    return os.environ.get('GITHUB_ACTIONS', '').lower() == 'true'


def escape_workflow_data(message: str) -> str:
    return message.replace('%', '%25').replace('\r', '%0D').replace('\n', '%0A')


class ConsoleOnlyBelowWarning(logging.Filter):
    """Keep warnings and errors off the console when the workflow-command handler reports them."""

    def filter(self, record):
        return record.levelno < logging.WARNING


class GitHubActionsHandler(logging.Handler):
    """Emit warnings and errors as `::warning::` / `::error::` workflow commands."""

    def __init__(self, stream=None):
        super().__init__(level=logging.WARNING)
        self.stream = stream

    def emit(self, record):
        try:
            command = WORKFLOW_COMMANDS.get(record.levelno, 'warning')
            stream = self.stream or sys.stdout
            stream.write(f"::{command}::{escape_workflow_data(self.format(record))}\n")
            stream.flush()
        except Exception:
            self.handleError(record)


def setup_logging(level: int = logging.INFO, github_actions: Optional[bool] = None) -> logging.Logger:
    """Configure the package logger; safe to call more than once."""
    if github_actions is None:
        github_actions = running_in_github_actions()

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    rich_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    rich_handler.setFormatter(logging.Formatter('%(message)s', datefmt='%Y-%m-%d %H:%M:%S'))
    rich_handler.setLevel(level)
    logger.addHandler(rich_handler)

    if github_actions:
        rich_handler.addFilter(ConsoleOnlyBelowWarning())
        actions_handler = GitHubActionsHandler()
        actions_handler.setFormatter(logging.Formatter('%(message)s'))
        logger.addHandler(actions_handler)

    return logger
