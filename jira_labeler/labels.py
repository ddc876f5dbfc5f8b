"""
Ticket key extraction and label reconciliation.

Everything here is a pure function of its inputs: no network access and no
configuration lookups, so the reconciliation rules can be tested directly.

Label scheme for a prefix of ``jira``:
    jira:in_progress        status label, exactly one per PR
    jira::label:urgent      mirror of a label set on the Jira ticket
"""

import re
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple

from jira_labeler.constants import DEFAULT_TICKET_PREFIX, MIRROR_LABEL_MARKER, TITLE_BODY_SEPARATOR
from jira_labeler.errors import ConfigError

_WHITESPACE_RUN = re.compile(r'\s+')


def resolve_prefix(prefix: Optional[str]) -> str:
    """Return the label namespace, falling back to ``jira`` when unset or blank."""
    if not prefix or not prefix.strip():
        return DEFAULT_TICKET_PREFIX
    return prefix.strip()


def compile_ticket_pattern(pattern: str) -> Pattern[str]:
    """Compile the configured ticket regex.

    Raises:
        ConfigError: if the pattern is empty or not a valid regular expression.
    """
    if not pattern:
        raise ConfigError("ticket-regex is required")
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigError(f"Invalid ticket-regex {pattern!r}: {e}") from e


def extract_ticket_key(title: Optional[str], body: Optional[str], pattern: Pattern[str]) -> Optional[str]:
    """Find the ticket key referenced by a PR.

    Title and body are joined with a newline so a match can never span the
    boundary between them. Only the first match is used. When the pattern
    has capture groups the first group that took part in the match is the
    key, otherwise the whole match is.

    Args:
        title (Optional[str]): PR title
        body (Optional[str]): PR body, ``None`` is treated as empty
        pattern (Pattern[str]): compiled ticket regex

    Returns:
        Optional[str]: the ticket key, or None when the PR references no ticket
    """
    text = f"{title or ''}{TITLE_BODY_SEPARATOR}{body or ''}"
    match = pattern.search(text)
    if match is None:
        return None

    for group in match.groups():
        if group:
            return group
    return match.group(0) or None


def normalize_status(status: Optional[str]) -> Optional[str]:
    """Turn a Jira status name into a label token ("In Progress" -> "in_progress")."""
    if status is None or not status.strip():
        return None
    return _WHITESPACE_RUN.sub('_', status.strip().lower())


def status_label(prefix: str, token: str) -> str:
    return f"{prefix}:{token}"


def mirror_label(prefix: str, label: str) -> str:
    return f"{prefix}:{MIRROR_LABEL_MARKER}{label}"


def is_mirror_label(label: str, prefix: str) -> bool:
    return label.startswith(f"{prefix}:{MIRROR_LABEL_MARKER}")


def is_status_label(label: str, prefix: str) -> bool:
    return label.startswith(f"{prefix}:") and not is_mirror_label(label, prefix)


def _dedupe(labels: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(labels))


def reconcile_labels(
    current: Sequence[str],
    status: Optional[str],
    ticket_labels: Optional[Iterable[str]],
    prefix: str = DEFAULT_TICKET_PREFIX,
) -> Tuple[List[str], bool]:
    """Compute the label set a PR should carry for its Jira ticket.

    Labels outside the prefix namespace are always kept in their original
    order. A missing status leaves existing status labels alone rather than
    replacing them with a placeholder; missing ticket labels (``None``, as
    opposed to an empty list) likewise leave existing mirrors alone.

    Args:
        current (Sequence[str]): labels currently on the PR
        status (Optional[str]): Jira status name, None when the ticket did not resolve
        ticket_labels (Optional[Iterable[str]]): labels on the Jira ticket, None when unknown
        prefix (str): label namespace

    Returns:
        Tuple[List[str], bool]: (new_labels, changed) where changed ignores ordering
    """
    prefix = resolve_prefix(prefix)
    token = normalize_status(status)
    mirrors = None if ticket_labels is None else [label for label in ticket_labels if label]

    new_labels = list(current)

    if token is not None:
        new_labels = [label for label in new_labels if not is_status_label(label, prefix)]
        new_labels.append(status_label(prefix, token))

    if mirrors is not None:
        new_labels = [label for label in new_labels if not is_mirror_label(label, prefix)]
        new_labels.extend(mirror_label(prefix, label) for label in mirrors)

    new_labels = _dedupe(new_labels)
    changed = set(new_labels) != set(current)
    return new_labels, changed
