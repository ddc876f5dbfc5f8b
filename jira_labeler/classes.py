from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class PullRequest:
    """An open pull request as returned by the GitHub REST pulls listing"""

    number: int
    title: str
    body: Optional[str] = None
    labels: List[str] = field(default_factory=list)  # insertion order kept for stable output

    @classmethod
    def from_github_response(cls, pr_raw: Dict[str, Any]) -> 'PullRequest':
        """Create PullRequest from GitHub API response"""
        return cls(
            number=pr_raw['number'],
            title=pr_raw.get('title') or '',
            body=pr_raw.get('body'),
            labels=[label['name'] for label in pr_raw.get('labels') or []],
        )

    def __str__(self) -> str:
        return f"PR #{self.number}"


@dataclass
class TicketRecord:
    """A Jira ticket resolved by the batched search"""

    key: str
    status: Optional[str] = None
    labels: List[str] = field(default_factory=list)

    @classmethod
    def from_jira_response(cls, issue: Dict[str, Any]) -> 'TicketRecord':
        """Create TicketRecord from a Jira search `issues[]` item"""
        fields = issue.get('fields') or {}
        status = fields.get('status') or {}
        return cls(
            key=issue['key'],
            status=status.get('name'),
            labels=list(fields.get('labels') or []),
        )


@dataclass
class ReconciliationResult:
    """Computed label set for one PR compared with the labels it currently has"""

    pr_number: int
    ticket_key: str
    new_labels: List[str]
    old_labels: List[str]
    changed: bool


@dataclass
class SyncSummary:
    """Counters for a single labeler run"""

    pulls_listed: int = 0
    pulls_with_ticket: int = 0
    tickets_resolved: int = 0
    pulls_changed: int = 0
    pulls_updated: int = 0
    pulls_failed: int = 0
    dry_run: bool = False

    def __str__(self) -> str:
        return (
            f"SyncSummary(listed={self.pulls_listed}, with_ticket={self.pulls_with_ticket}, "
            f"resolved={self.tickets_resolved}, changed={self.pulls_changed}, "
            f"updated={self.pulls_updated}, failed={self.pulls_failed})"
        )
