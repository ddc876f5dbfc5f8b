#!/usr/bin/env python3
# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Shared fixtures for jira-labeler tests.
"""

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every labeler input from the environment and skip loading a local .env file."""
    from jira_labeler.utils.config import INPUT_NAMES

    for input_name in INPUT_NAMES.values():
        monkeypatch.delenv(f"INPUT_{input_name.upper()}", raising=False)
        monkeypatch.delenv(input_name.replace('-', '_').upper(), raising=False)
    monkeypatch.delenv('GITHUB_REPOSITORY', raising=False)
    monkeypatch.setattr('jira_labeler.utils.config.load_dotenv', lambda *args, **kwargs: False)
    yield monkeypatch


@pytest.fixture
def labeler_config():
    from jira_labeler.utils.config import LabelerConfig

    return LabelerConfig(
        github_token='gh-token',
        repository='owner/repo',
        jira_host='example.atlassian.net',
        jira_username='bot@example.com',
        jira_password='api-token',
        ticket_regex=r'ABC-\d+',
    )
