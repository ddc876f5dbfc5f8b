#!/usr/bin/env python3
# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Unit tests for ticket extraction and label reconciliation.

Run with: python run_tests.py tests/test_labels.py
"""

import re

import pytest

from jira_labeler.errors import ConfigError
from jira_labeler.labels import (
    compile_ticket_pattern,
    extract_ticket_key,
    is_mirror_label,
    is_status_label,
    mirror_label,
    normalize_status,
    reconcile_labels,
    resolve_prefix,
    status_label,
)

TICKET = re.compile(r'ABC-\d+')


# ============================================================================
# extract_ticket_key
# ============================================================================


class TestExtractTicketKey:
    def test_key_in_title(self):
        assert extract_ticket_key('ABC-12 fix login', 'details', TICKET) == 'ABC-12'

    def test_key_in_body(self):
        assert extract_ticket_key('fix login', 'Closes ABC-7', TICKET) == 'ABC-7'

    def test_first_match_wins(self):
        assert extract_ticket_key('ABC-1 and ABC-2', 'ABC-3', TICKET) == 'ABC-1'

    def test_title_checked_before_body(self):
        assert extract_ticket_key('ABC-9', 'ABC-1', TICKET) == 'ABC-9'

    def test_no_match_returns_none(self):
        assert extract_ticket_key('chore: bump deps', 'nothing here', TICKET) is None

    def test_none_body_treated_as_empty(self):
        assert extract_ticket_key('ABC-5 thing', None, TICKET) == 'ABC-5'
        assert extract_ticket_key('thing', None, TICKET) is None

    def test_no_match_across_title_body_boundary(self):
        # "ABC-" at the end of the title must not join with "42" at the start of the body
        assert extract_ticket_key('Work on ABC-', '42 is the answer', TICKET) is None

    def test_capture_group_is_used_when_present(self):
        pattern = re.compile(r'\[(ABC-\d+)\]')
        assert extract_ticket_key('[ABC-33] Add feature', '', pattern) == 'ABC-33'

    def test_first_participating_group(self):
        pattern = re.compile(r'(?:fixes (ABC-\d+))|(?:refs (ABC-\d+))')
        assert extract_ticket_key('refs ABC-8', '', pattern) == 'ABC-8'


class TestCompileTicketPattern:
    def test_valid_pattern(self):
        assert compile_ticket_pattern(r'[A-Z]+-\d+').search('XY-1').group(0) == 'XY-1'

    def test_empty_pattern_raises(self):
        with pytest.raises(ConfigError, match='ticket-regex is required'):
            compile_ticket_pattern('')

    def test_invalid_pattern_raises(self):
        with pytest.raises(ConfigError, match='Invalid ticket-regex'):
            compile_ticket_pattern('ABC-(')


# ============================================================================
# Status normalization and label helpers
# ============================================================================


class TestNormalizeStatus:
    def test_lowercase_and_underscores(self):
        assert normalize_status('In Progress') == 'in_progress'

    def test_whitespace_runs_collapse(self):
        assert normalize_status('Ready  for\tReview') == 'ready_for_review'

    def test_single_word(self):
        assert normalize_status('Done') == 'done'

    def test_none_and_blank(self):
        assert normalize_status(None) is None
        assert normalize_status('   ') is None


class TestLabelHelpers:
    def test_status_label(self):
        assert status_label('jira', 'done') == 'jira:done'

    def test_mirror_label(self):
        assert mirror_label('jira', 'urgent') == 'jira::label:urgent'

    def test_classification(self):
        assert is_status_label('jira:todo', 'jira')
        assert not is_status_label('jira::label:urgent', 'jira')
        assert is_mirror_label('jira::label:urgent', 'jira')
        assert not is_mirror_label('jira:todo', 'jira')
        assert not is_status_label('jiraish:todo', 'jira')
        assert not is_status_label('bug', 'jira')

    def test_resolve_prefix_defaults(self):
        assert resolve_prefix(None) == 'jira'
        assert resolve_prefix('') == 'jira'
        assert resolve_prefix('   ') == 'jira'
        assert resolve_prefix(' ticket ') == 'ticket'


# ============================================================================
# reconcile_labels
# ============================================================================


class TestReconcileLabels:
    def test_replaces_status_and_adds_mirror(self):
        new_labels, changed = reconcile_labels(['bug', 'jira:todo'], 'In Progress', ['urgent'], 'jira')

        assert new_labels == ['bug', 'jira:in_progress', 'jira::label:urgent']
        assert changed is True

    def test_exactly_one_status_label(self):
        new_labels, _ = reconcile_labels(['jira:todo', 'jira:in_review', 'bug'], 'Done', [], 'jira')

        assert [label for label in new_labels if is_status_label(label, 'jira')] == ['jira:done']

    def test_empty_pr_labels(self):
        new_labels, changed = reconcile_labels([], 'To Do', [], 'jira')

        assert new_labels == ['jira:to_do']
        assert changed is True

    def test_already_in_sync(self):
        current = ['bug', 'jira:done', 'jira::label:backend']
        new_labels, changed = reconcile_labels(current, 'Done', ['backend'], 'jira')

        assert new_labels == current
        assert changed is False

    def test_ordering_alone_is_not_a_change(self):
        current = ['jira::label:backend', 'jira:done', 'bug']
        new_labels, changed = reconcile_labels(current, 'Done', ['backend'], 'jira')

        assert changed is False
        assert set(new_labels) == set(current)

    def test_stale_mirrors_are_cleared(self):
        new_labels, changed = reconcile_labels(
            ['jira:done', 'jira::label:old', 'jira::label:keep'], 'Done', ['keep'], 'jira'
        )

        assert new_labels == ['jira:done', 'jira::label:keep']
        assert changed is True

    def test_all_mirrors_cleared_when_ticket_has_no_labels(self):
        new_labels, changed = reconcile_labels(['jira:done', 'jira::label:old'], 'Done', [], 'jira')

        assert new_labels == ['jira:done']
        assert changed is True

    def test_unresolved_ticket_leaves_labels_untouched(self):
        current = ['bug', 'jira:todo', 'jira::label:urgent']
        new_labels, changed = reconcile_labels(current, None, None, 'jira')

        assert new_labels == current
        assert changed is False

    def test_missing_status_adds_no_status_label(self):
        new_labels, changed = reconcile_labels(['bug'], None, ['urgent'], 'jira')

        assert new_labels == ['bug', 'jira::label:urgent']
        assert not any(is_status_label(label, 'jira') for label in new_labels)
        assert changed is True

    def test_non_prefix_labels_keep_order(self):
        new_labels, _ = reconcile_labels(['zeta', 'jira:todo', 'alpha'], 'Done', [], 'jira')

        assert new_labels == ['zeta', 'alpha', 'jira:done']

    def test_custom_prefix(self):
        new_labels, _ = reconcile_labels(['jira:todo', 'ticket:todo'], 'Done', ['x'], 'ticket')

        assert new_labels == ['jira:todo', 'ticket:done', 'ticket::label:x']

    def test_blank_prefix_falls_back_to_jira(self):
        new_labels, _ = reconcile_labels([], 'Done', [], '  ')

        assert new_labels == ['jira:done']

    def test_duplicate_ticket_labels_collapse(self):
        new_labels, _ = reconcile_labels([], 'Done', ['a', 'a'], 'jira')

        assert new_labels == ['jira:done', 'jira::label:a']

    def test_idempotent(self):
        first, changed_first = reconcile_labels(['bug', 'jira:todo'], 'In Progress', ['urgent', 'api'], 'jira')
        second, changed_second = reconcile_labels(first, 'In Progress', ['urgent', 'api'], 'jira')

        assert changed_first is True
        assert changed_second is False
        assert second == first
