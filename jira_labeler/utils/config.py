import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from jira_labeler.constants import (
    DEFAULT_JIRA_API_VERSION,
    DEFAULT_JIRA_PROTOCOL,
    DEFAULT_TICKET_PREFIX,
    JIRA_SEARCH_API_AUTO,
    JIRA_SEARCH_APIS,
)
from jira_labeler.errors import ConfigError
from jira_labeler.labels import compile_ticket_pattern, resolve_prefix
from jira_labeler.utils.utils import mask_secret

TRUE_VALUES = ('true', '1', 'yes', 'on')
FALSE_VALUES = ('false', '0', 'no', 'off')

SECRET_FIELDS = ('github_token', 'jira_password')

# config field -> input name, as declared for the action
INPUT_NAMES = {
    'github_token': 'github-token',
    'repository': 'repository',
    'jira_host': 'jira-host',
    'jira_protocol': 'jira-protocol',
    'jira_username': 'jira-username',
    'jira_password': 'jira-password',
    'jira_api_version': 'jira-apiVersion',
    'jira_strict_ssl': 'jira-strictSSL',
    'jira_search_api': 'jira-searchApi',
    'ticket_regex': 'ticket-regex',
    'ticket_prefix': 'ticket-prefix',
    'dry_run': 'dry-run',
}

REQUIRED_FIELDS = ('github_token', 'repository', 'jira_host', 'ticket_regex')


def get_input(name: str) -> str:
    """Read an input the way GitHub Actions passes it (INPUT_<NAME>), else a plain env var.

    `jira-host` is looked up as `INPUT_JIRA-HOST`, then `JIRA_HOST`.
    """
    action_var = f"INPUT_{name.replace(' ', '_').upper()}"
    value = os.environ.get(action_var)
    if value is None:
        value = os.environ.get(name.replace('-', '_').upper(), '')
    return value.strip()


def parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None or not value.strip():
        return default
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ConfigError(f"Expected a boolean value, got {value!r}")


@dataclass
class LabelerConfig:
    """Everything a labeler run needs, resolved once at startup and passed down explicitly."""

    github_token: str = ''
    repository: str = ''
    jira_host: str = ''
    jira_protocol: str = DEFAULT_JIRA_PROTOCOL
    jira_username: str = ''
    jira_password: str = ''
    jira_api_version: str = DEFAULT_JIRA_API_VERSION
    jira_strict_ssl: bool = True
    jira_search_api: str = JIRA_SEARCH_API_AUTO
    ticket_regex: str = ''
    ticket_prefix: str = DEFAULT_TICKET_PREFIX
    dry_run: bool = False

    def __post_init__(self):
        self.ticket_prefix = resolve_prefix(self.ticket_prefix)
        self.jira_protocol = self.jira_protocol or DEFAULT_JIRA_PROTOCOL
        self.jira_api_version = self.jira_api_version or DEFAULT_JIRA_API_VERSION
        self.jira_search_api = (self.jira_search_api or JIRA_SEARCH_API_AUTO).lower()

    @classmethod
    def from_env(cls, **overrides: Any) -> 'LabelerConfig':
        """Build a config from action inputs / environment, then apply explicit overrides.

        Overrides set to None are ignored so unset CLI options fall through to
        the environment.
        """
        load_dotenv()

        values: Dict[str, Any] = {}
        for field_name, input_name in INPUT_NAMES.items():
            raw = get_input(input_name)
            if field_name in ('jira_strict_ssl', 'dry_run'):
                values[field_name] = parse_bool(raw, default=field_name == 'jira_strict_ssl')
            elif raw:
                values[field_name] = raw

        if 'repository' not in values and os.environ.get('GITHUB_REPOSITORY'):
            values['repository'] = os.environ['GITHUB_REPOSITORY'].strip()

        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    def validate(self) -> None:
        """Raise ConfigError listing every missing required input, then check the ticket regex."""
        missing = [INPUT_NAMES[name] for name in REQUIRED_FIELDS if not getattr(self, name)]
        if missing:
            raise ConfigError(f"Missing required configuration: {', '.join(missing)}")

        if self.repository.count('/') != 1 or not all(self.repository.split('/')):
            raise ConfigError(f"Invalid repository format {self.repository!r}, expected 'owner/repo'")

        if self.jira_search_api not in JIRA_SEARCH_APIS:
            choices = ', '.join(JIRA_SEARCH_APIS)
            raise ConfigError(f"Invalid jira-searchApi {self.jira_search_api!r}, expected one of {choices}")

        compile_ticket_pattern(self.ticket_regex)

    def masked(self) -> Dict[str, Any]:
        """Config as a plain dict keyed by input name with secrets masked, for display."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in SECRET_FIELDS and value:
                value = mask_secret(value)
            result[INPUT_NAMES[f.name]] = value
        return result
