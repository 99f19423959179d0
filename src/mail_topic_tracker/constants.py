"""Constants for Mail Topic Tracker."""

from pathlib import Path

# --- Config paths ---
CONFIG_DIR = Path.home() / ".mail-topic-tracker"
CREDENTIALS_PATH = CONFIG_DIR / "credentials.json"
TOKEN_PATH = CONFIG_DIR / "token.json"
ENV_FILE_PATH = CONFIG_DIR / ".env"

# --- Output layout (relative to the output root) ---
DEFAULT_OUTPUT_ROOT = Path.home() / "MailTracker"
WORKBOOK_NAME = "MailTracker.xlsx"
ATTACHMENTS_DIR_NAME = "Attachments"
STATE_FILE_NAME = "state.json"

# --- Gmail API ---
SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]
BATCH_SIZE = 50  # messages per BatchHttpRequest
PAGE_SIZE = 100  # messages per list page

# --- Report layout ---
OVERVIEW_SHEET = "Overview"
MAX_SHEET_NAME_LENGTH = 31  # hard limit of the xlsx format
TOPIC_HEADERS = [
    "Date/Time (Local)",
    "From (Name)",
    "From (Address)",
    "Customer Company",
    "Customer Window",
    "Subject",
    "Is Read",
    "Has Attachments",
    "Attachment Count",
    "Attachment Paths",
    "Message Id",
]
OVERVIEW_HEADERS = [
    "Topic",
    "Topic Type",
    "Total Emails",
    "Unread Emails",
    "With Attachments",
    "Last 7 Days",
    "Latest Mail Date",
    "Latest Sender",
    "Latest Subject",
    "Topic Folder",
]
TOPIC_TYPE = "Project"
DATE_FORMAT = "%Y-%m-%d %H:%M"
FOLDER_DATE_FORMAT = "%Y-%m-%d"
ATTACHMENT_PATH_SEPARATOR = ";"
RECENT_DAYS = 7

# --- Fallback labels ---
UNCATEGORIZED = "Uncategorized"
FALLBACK_FILE_NAME = "file"
FALLBACK_ATTACHMENT_NAME = "attachment"
FALLBACK_SHEET_NAME = "Sheet"

# --- Exit codes ---
EXIT_CONFIG_ERROR = 1
EXIT_FAILURE = 2
