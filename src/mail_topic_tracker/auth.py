"""Authentication helpers for Gmail API."""

from pathlib import Path

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build, Resource

from mail_topic_tracker.config import ConfigError
from mail_topic_tracker.constants import CREDENTIALS_PATH, SCOPES, TOKEN_PATH
from mail_topic_tracker.display import console


def get_gmail_service(
    credentials_path: Path = CREDENTIALS_PATH,
    token_path: Path = TOKEN_PATH,
) -> Resource:
    """Return an authenticated, read-only Gmail API service object.

    Loads the cached token from token_path if available.  When the token
    is expired it is silently refreshed.  If no token exists, an OAuth
    browser flow is launched (requires the client secrets file at
    credentials_path).
    """
    token_path.parent.mkdir(parents=True, exist_ok=True)

    creds: Credentials | None = None

    if token_path.exists():
        creds = Credentials.from_authorized_user_file(str(token_path), SCOPES)

    if creds and creds.expired and creds.refresh_token:
        creds.refresh(Request())
    elif not creds or not creds.valid:
        if not credentials_path.exists():
            raise ConfigError(
                f"Credentials file not found at {credentials_path}.\n"
                "Download your OAuth client credentials from the Google Cloud Console "
                "and save them as:\n"
                f"  {credentials_path}"
            )
        flow = InstalledAppFlow.from_client_secrets_file(str(credentials_path), SCOPES)
        creds = flow.run_local_server(port=0)

    token_path.write_text(creds.to_json())

    return build("gmail", "v1", credentials=creds, cache_discovery=False)


def check_auth(credentials_path: Path = CREDENTIALS_PATH, token_path: Path = TOKEN_PATH) -> bool:
    """Test whether Gmail authentication is working.

    Returns True when the service can reach the Gmail API, False otherwise.
    Prints human-readable status messages.
    """
    try:
        service = get_gmail_service(credentials_path, token_path)
        profile = service.users().getProfile(userId="me").execute()
        console.print(f"Authenticated as [bold]{profile['emailAddress']}[/bold]")
        return True
    except Exception as exc:  # noqa: BLE001
        console.print(f"[red]Authentication failed:[/red] {exc}")
        return False
