import logging
import re
from typing import Dict, Iterable, List, Optional

import requests

from jira_labeler.classes import TicketRecord
from jira_labeler.constants import (
    JIRA_CLOUD_HOST_SUFFIX,
    JIRA_REQUEST_TIMEOUT,
    JIRA_SEARCH_API_AUTO,
    JIRA_SEARCH_API_JQL,
    JIRA_SEARCH_API_LEGACY,
    JIRA_SEARCH_FIELDS,
    JIRA_SEARCH_MAX_RESULTS,
)
from jira_labeler.errors import TicketQueryError, UnknownTicketKeysError
from jira_labeler.utils.config import LabelerConfig

logger = logging.getLogger(__name__)

# "An issue with key 'ABC-404' does not exist for field 'key'."
UNKNOWN_KEY_PATTERN = re.compile(r"key '([^']+)' does not exist")


def unique_keys(keys: Iterable[str]) -> List[str]:
    """Deduplicate ticket keys, keeping first-seen order."""
    return list(dict.fromkeys(key for key in keys if key))


def quote_jql(value: str) -> str:
    """Quote a value as a JQL string literal."""
    escaped = value.replace('\\', '\\\\').replace('"', '\\"')
    return f'"{escaped}"'


def build_jql(keys: Iterable[str]) -> str:
    """Build the single JQL query that resolves every ticket key at once.

    >>> build_jql(['ABC-1', 'ABC-2', 'ABC-1'])
    'key in ("ABC-1","ABC-2")'
    """
    return f"key in ({','.join(quote_jql(key) for key in unique_keys(keys))})"


def unknown_keys_from_error(response: requests.Response) -> List[str]:
    """Keys named as nonexistent in a 400 search response, empty if the error is something else."""
    try:
        messages = response.json().get('errorMessages') or []
    except (ValueError, AttributeError):
        return []
    return [match.group(1) for message in messages for match in UNKNOWN_KEY_PATTERN.finditer(str(message))]


def resolve_search_api(search_api: str, host: str) -> str:
    """Pick the search endpoint: Atlassian Cloud hosts only serve the enhanced `/search/jql`."""
    if search_api != JIRA_SEARCH_API_AUTO:
        return search_api
    hostname = host.split('/')[0].split(':')[0].lower()
    return JIRA_SEARCH_API_JQL if hostname.endswith(JIRA_CLOUD_HOST_SUFFIX) else JIRA_SEARCH_API_LEGACY


class JiraClient:
    """Minimal Jira REST client: basic auth over a shared requests session."""

    def __init__(self, config: LabelerConfig, session: Optional[requests.Session] = None):
        self.base_url = f"{config.jira_protocol}://{config.jira_host.rstrip('/')}/rest/api/{config.jira_api_version}"
        self.search_api = resolve_search_api(config.jira_search_api, config.jira_host)
        self.session = session or requests.Session()
        if config.jira_username or config.jira_password:
            self.session.auth = (config.jira_username, config.jira_password)
        self.session.verify = config.jira_strict_ssl
        self.session.headers.update({'Accept': 'application/json'})
        self.max_results = JIRA_SEARCH_MAX_RESULTS

    @property
    def search_url(self) -> str:
        if self.search_api == JIRA_SEARCH_API_JQL:
            return f'{self.base_url}/search/jql'
        return f'{self.base_url}/search'

    def search(self, jql: str, start_at: int = 0, next_page_token: Optional[str] = None) -> Dict:
        """Run one page of a JQL search.

        The legacy endpoint pages with `startAt` and is asked to only warn
        about unknown keys, which it otherwise rejects with a 400. The
        enhanced endpoint pages with `nextPageToken`.

        Raises:
            TicketQueryError: on transport errors or non-2xx responses
        """
        params = {
            'jql': jql,
            'fields': JIRA_SEARCH_FIELDS,
            'maxResults': self.max_results,
        }
        if self.search_api == JIRA_SEARCH_API_JQL:
            if next_page_token:
                params['nextPageToken'] = next_page_token
        else:
            params['startAt'] = start_at
            params['validateQuery'] = 'warn'

        try:
            response = self.session.get(self.search_url, params=params, timeout=JIRA_REQUEST_TIMEOUT)
        except requests.exceptions.RequestException as e:
            raise TicketQueryError(f"Jira search failed: {e}") from e

        if response.status_code == 400:
            unknown = unknown_keys_from_error(response)
            if unknown:
                raise UnknownTicketKeysError(f"Jira rejected unknown ticket keys: {', '.join(unknown)}", unknown)

        if not response.ok:
            raise TicketQueryError(f"Jira search failed with status {response.status_code}: {response.text}")

        try:
            data = response.json()
        except ValueError as e:
            raise TicketQueryError(f"Jira search returned invalid JSON: {e}") from e

        for message in data.get('warningMessages') or []:
            logger.warning(f"Jira: {message}")
        return data

    def search_tickets(self, keys: Iterable[str]) -> Dict[str, TicketRecord]:
        """
        Resolve status and labels for every ticket key with one batched query.

        Tickets Jira does not return (deleted, no permission) are simply absent
        from the result. Further pages are only requested when Jira reports
        more matches than fit in one page.

        Args:
            keys (Iterable[str]): Ticket keys extracted from PRs, duplicates allowed

        Returns:
            Dict[str, TicketRecord]: ticket key -> resolved ticket
        """
        keys = unique_keys(keys)
        if not keys:
            return {}

        try:
            tickets = self._search_all(keys)
        except UnknownTicketKeysError as e:
            # the whole query is rejected; ask again once without the keys Jira named
            logger.warning(str(e))
            keys = [key for key in keys if key not in e.keys]
            tickets = self._search_all(keys) if keys else {}

        missing = [key for key in keys if key not in tickets]
        if missing:
            logger.info(f"Tickets not returned by Jira: {', '.join(missing)}")
        return tickets

    def _search_all(self, keys: List[str]) -> Dict[str, TicketRecord]:
        jql = build_jql(keys)
        logger.info(f"jql: {jql}")

        tickets: Dict[str, TicketRecord] = {}
        start_at = 0
        next_page_token = None
        while True:
            data = self.search(jql, start_at=start_at, next_page_token=next_page_token)
            issues = data.get('issues') or []
            for issue in issues:
                ticket = TicketRecord.from_jira_response(issue)
                tickets[ticket.key] = ticket

            if not issues:
                break
            if self.search_api == JIRA_SEARCH_API_JQL:
                next_page_token = data.get('nextPageToken')
                if data.get('isLast') or not next_page_token:
                    break
            else:
                start_at += len(issues)
                if start_at >= int(data.get('total', 0)):
                    break
        return tickets
