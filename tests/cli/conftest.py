# The MIT License (MIT)
# Copyright © 2025 Entrius

"""Shared fixtures for CLI tests."""

import pytest
from click.testing import CliRunner


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def cli_env(clean_env):
    """Complete configuration supplied through action inputs."""
    clean_env.setenv('INPUT_GITHUB-TOKEN', 'gh-token')
    clean_env.setenv('INPUT_JIRA-HOST', 'example.atlassian.net')
    clean_env.setenv('INPUT_JIRA-USERNAME', 'bot@example.com')
    clean_env.setenv('INPUT_JIRA-PASSWORD', 'jira-secret')
    clean_env.setenv('INPUT_TICKET-REGEX', r'ABC-\d+')
    clean_env.setenv('GITHUB_REPOSITORY', 'owner/repo')
    clean_env.setenv('GITHUB_ACTIONS', 'false')
    return clean_env
