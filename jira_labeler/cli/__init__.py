# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
jira-labeler command line interface.

Usage:
    jira-labeler sync --ticket-regex 'ABC-[0-9]+'
"""
