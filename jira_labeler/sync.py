"""
Single-pass reconciliation of Jira ticket state onto GitHub PR labels.

    fetch -> extract -> resolve -> reconcile -> write

Each phase runs to completion before the next one starts. Only a failed
label write is tolerated per PR; listing (transport) errors and Jira
query errors abort the run.
"""

import json
import logging
from dataclasses import asdict
from typing import Dict, List, Optional, Tuple

from jira_labeler.classes import PullRequest, ReconciliationResult, SyncSummary, TicketRecord
from jira_labeler.labels import compile_ticket_pattern, extract_ticket_key, reconcile_labels
from jira_labeler.utils.config import LabelerConfig
from jira_labeler.utils.github_api_tools import list_open_pull_requests, set_issue_labels
from jira_labeler.utils.jira_api_tools import JiraClient

logger = logging.getLogger(__name__)


class LabelSync:
    """Runs one labeler pass for a repository."""

    def __init__(self, config: LabelerConfig, jira_client: Optional[JiraClient] = None):
        config.validate()
        self.config = config
        self.pattern = compile_ticket_pattern(config.ticket_regex)
        self.jira_client = jira_client or JiraClient(config)

    def fetch_pull_requests(self) -> Optional[List[PullRequest]]:
        return list_open_pull_requests(self.config.repository, self.config.github_token)

    def extract_tickets(self, pulls: List[PullRequest]) -> List[Tuple[PullRequest, str]]:
        """Pair each PR with the ticket key it references; PRs without one are dropped."""
        pulls_with_ticket = []
        for pull in pulls:
            ticket_key = extract_ticket_key(pull.title, pull.body, self.pattern)
            if ticket_key is None:
                logger.debug(f"No ticket found in {pull}, skipping")
                continue
            pulls_with_ticket.append((pull, ticket_key))

        tickets = [{"pull": pull.number, "pullLabels": pull.labels, "ticket": key} for pull, key in pulls_with_ticket]
        logger.info(f"tickets: {json.dumps(tickets)}")
        return pulls_with_ticket

    def resolve_tickets(self, keys: List[str]) -> Dict[str, TicketRecord]:
        tickets = self.jira_client.search_tickets(keys)
        logger.debug(f"ticketStatuses: {json.dumps([asdict(ticket) for ticket in tickets.values()])}")
        return tickets

    def reconcile(
        self, pulls_with_ticket: List[Tuple[PullRequest, str]], tickets: Dict[str, TicketRecord]
    ) -> List[ReconciliationResult]:
        results = []
        for pull, ticket_key in pulls_with_ticket:
            ticket = tickets.get(ticket_key)
            if ticket is None:
                logger.info(f"Ticket {ticket_key} for {pull} was not returned by Jira, leaving labels untouched")

            new_labels, changed = reconcile_labels(
                pull.labels,
                ticket.status if ticket else None,
                ticket.labels if ticket else None,
                self.config.ticket_prefix,
            )
            results.append(
                ReconciliationResult(
                    pr_number=pull.number,
                    ticket_key=ticket_key,
                    new_labels=new_labels,
                    old_labels=list(pull.labels),
                    changed=changed,
                )
            )

        logger.debug(f"labelsToAdd: {json.dumps([asdict(result) for result in results])}")
        return results

    def write_labels(self, results: List[ReconciliationResult]) -> Tuple[int, int]:
        """Apply every changed label set in listing order.

        Returns:
            Tuple[int, int]: (updated, failed)
        """
        updated = failed = 0
        for result in results:
            if not result.changed:
                continue

            action = 'Would set' if self.config.dry_run else 'Adding'
            logger.info(f"{action} labels to PR {result.pr_number} ({result.ticket_key})")
            logger.info(f"New labels: {','.join(result.new_labels)}")
            logger.info(f"Old labels: {','.join(result.old_labels)}")

            if self.config.dry_run:
                continue

            if set_issue_labels(self.config.repository, result.pr_number, result.new_labels, self.config.github_token):
                updated += 1
            else:
                failed += 1

        return updated, failed

    def run(self) -> SyncSummary:
        summary = SyncSummary(dry_run=self.config.dry_run)

        pulls = self.fetch_pull_requests()
        if pulls is None:
            logger.info('Could not retrieve PR details')
            return summary
        summary.pulls_listed = len(pulls)

        pulls_with_ticket = self.extract_tickets(pulls)
        summary.pulls_with_ticket = len(pulls_with_ticket)
        if not pulls_with_ticket:
            logger.info('No tickets found in PRs, skipping jql')
            return summary

        tickets = self.resolve_tickets([key for _, key in pulls_with_ticket])
        summary.tickets_resolved = len(tickets)

        results = self.reconcile(pulls_with_ticket, tickets)
        summary.pulls_changed = sum(1 for result in results if result.changed)

        summary.pulls_updated, summary.pulls_failed = self.write_labels(results)
        logger.info(f"Labeler run complete: {summary}")
        return summary
