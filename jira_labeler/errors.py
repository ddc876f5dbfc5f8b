class LabelerError(Exception):
    """Base class for failures that abort a labeler run."""


class ConfigError(LabelerError):
    """Missing or invalid configuration (required input unset, bad ticket regex)."""


class TicketQueryError(LabelerError):
    """The batched Jira search failed (network, auth or non-2xx response)."""


class UnknownTicketKeysError(TicketQueryError):
    """Jira rejected the search because some keys do not exist (or are not visible)."""

    def __init__(self, message, keys):
        super().__init__(message)
        self.keys = keys
