# Entrius 2025
# =============================================================================
# GitHub API
# =============================================================================
BASE_GITHUB_API_URL = "https://api.github.com"
GITHUB_PULLS_PER_PAGE = 100
GITHUB_REQUEST_TIMEOUT = 30  # seconds

# =============================================================================
# Rate Limit Monitoring
# =============================================================================
RATE_LIMIT_MIN_REMAINING = 10  # Remaining requests below which we warn

# =============================================================================
# Jira API
# =============================================================================
DEFAULT_JIRA_PROTOCOL = "https"
DEFAULT_JIRA_API_VERSION = "2"
JIRA_SEARCH_MAX_RESULTS = 100
JIRA_SEARCH_FIELDS = "status,labels"
JIRA_REQUEST_TIMEOUT = 30  # seconds
JIRA_CLOUD_HOST_SUFFIX = ".atlassian.net"

# search endpoints: "jql" is the Cloud enhanced search, "legacy" the Server/Data Center one
JIRA_SEARCH_API_AUTO = "auto"
JIRA_SEARCH_API_JQL = "jql"
JIRA_SEARCH_API_LEGACY = "legacy"
JIRA_SEARCH_APIS = (JIRA_SEARCH_API_AUTO, JIRA_SEARCH_API_JQL, JIRA_SEARCH_API_LEGACY)

# =============================================================================
# Labels
# =============================================================================
DEFAULT_TICKET_PREFIX = "jira"
MIRROR_LABEL_MARKER = ":label:"  # <prefix>:<marker><label> -> jira::label:urgent
TITLE_BODY_SEPARATOR = "\n"
