# Entrius 2025
import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import requests

from jira_labeler.classes import PullRequest
from jira_labeler.constants import (
    BASE_GITHUB_API_URL,
    GITHUB_PULLS_PER_PAGE,
    GITHUB_REQUEST_TIMEOUT,
    RATE_LIMIT_MIN_REMAINING,
)

logger = logging.getLogger(__name__)


@dataclass
class RateLimitInfo:
    """Represents GitHub API rate limit information extracted from response headers."""

    limit: int  # Maximum requests allowed per hour
    remaining: int  # Requests remaining in current window
    reset_timestamp: int  # Unix timestamp when the rate limit resets

    @property
    def seconds_until_reset(self) -> int:
        """Calculate seconds until rate limit resets."""
        current_time = int(time.time())
        return max(0, self.reset_timestamp - current_time)


def parse_rate_limit_headers(response: requests.Response) -> Optional[RateLimitInfo]:
    """
    Parse GitHub API rate limit information from response headers.

    Args:
        response: The HTTP response from GitHub API

    Returns:
        RateLimitInfo object if headers are present, None otherwise
    """
    headers = response.headers

    try:
        limit = int(headers.get('X-RateLimit-Limit', 0))
        remaining = int(headers.get('X-RateLimit-Remaining', 0))
        reset_timestamp = int(headers.get('X-RateLimit-Reset', 0))

        if limit == 0 and reset_timestamp == 0:
            return None

        return RateLimitInfo(limit=limit, remaining=remaining, reset_timestamp=reset_timestamp)
    except (ValueError, TypeError) as e:
        logger.debug(f"Could not parse rate limit headers: {e}")
        return None


def check_preemptive_rate_limit(response: requests.Response) -> None:
    """
    Log a warning when the GitHub API budget is nearly spent. Requests are
    never delayed or retried here; the run simply reports the situation.

    Args:
        response: The HTTP response from GitHub API
    """
    rate_limit_info = parse_rate_limit_headers(response)

    if rate_limit_info and rate_limit_info.remaining <= RATE_LIMIT_MIN_REMAINING:
        logger.warning(
            f"Approaching GitHub API rate limit: {rate_limit_info.remaining} requests remaining, "
            f"resets in {rate_limit_info.seconds_until_reset}s"
        )


def make_headers(token: str) -> Dict[str, str]:
    """Build standard GitHub HTTP headers for a token.

    Args:
        token (str): GitHub token (PAT or the workflow GITHUB_TOKEN)
    Returns:
        Dict[str, str]: Mapping of HTTP header names to values.
    """
    return {
        "Authorization": f"token {token}",
        "Accept": "application/vnd.github.v3+json",
    }


def list_open_pull_requests(
    repository: str, token: str, per_page: int = GITHUB_PULLS_PER_PAGE
) -> Optional[List[PullRequest]]:
    """
    List every open pull request of a repository, following pagination.

    A non-200 response on the first page is not fatal: it is logged and None
    is returned so the caller can end the run quietly. Transport errors
    (connection refused, DNS, timeout) propagate.

    Args:
        repository (str): Repository in format 'owner/repo'
        token (str): GitHub token
        per_page (int): Page size, GitHub caps this at 100

    Returns:
        Optional[List[PullRequest]]: Open PRs in listing order, or None if the listing failed
    """
    headers = make_headers(token)
    pulls: List[PullRequest] = []
    page = 1

    while True:
        response = requests.get(
            f'{BASE_GITHUB_API_URL}/repos/{repository}/pulls',
            headers=headers,
            params={'state': 'open', 'per_page': per_page, 'page': page},
            timeout=GITHUB_REQUEST_TIMEOUT,
        )

        if response.status_code != 200:
            if page == 1:
                logger.info(f"Could not retrieve PR details for {repository}: status {response.status_code}")
                return None
            logger.warning(
                f"Failed to list page {page} of open PRs for {repository}: status {response.status_code}, "
                f"continuing with {len(pulls)} PRs"
            )
            break

        check_preemptive_rate_limit(response)
        pulls_raw = response.json()
        pulls.extend(PullRequest.from_github_response(pr_raw) for pr_raw in pulls_raw)

        if len(pulls_raw) < per_page:
            break
        page += 1

    logger.debug(f"Listed {len(pulls)} open PRs in {repository}")
    return pulls


def set_issue_labels(repository: str, pr_number: int, labels: Sequence[str], token: str) -> bool:
    """
    Replace the full label set of a pull request.

    Failures are logged and reported through the return value so one PR
    cannot stop the rest of the batch.

    Args:
        repository (str): Repository in format 'owner/repo'
        pr_number (int): PR number (issues and PRs share numbering)
        labels (Sequence[str]): Complete label set to apply
        token (str): GitHub token

    Returns:
        bool: True if GitHub accepted the new labels
    """
    try:
        response = requests.put(
            f'{BASE_GITHUB_API_URL}/repos/{repository}/issues/{pr_number}/labels',
            headers=make_headers(token),
            json={'labels': list(labels)},
            timeout=GITHUB_REQUEST_TIMEOUT,
        )
    except requests.exceptions.RequestException as e:
        logger.warning(f"Error setting labels on PR #{pr_number}: {e}")
        return False

    if response.status_code == 200:
        check_preemptive_rate_limit(response)
        return True

    logger.warning(f"Error setting labels on PR #{pr_number}: status {response.status_code} - {response.text}")
    return False
