"""Authentication utilities for Google Photos API."""

import logging
import os
from typing import Any, cast

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from google_photos_downloader.models import AuthenticationError

logger = logging.getLogger(__name__)

# If modifying these scopes, delete the file token.json.
SCOPES = ['https://www.googleapis.com/auth/photoslibrary.readonly']

def get_credentials(token_path: str, credentials_path: str,
                    cache_token: bool = True) -> Credentials:
    """Get valid user credentials from storage.

    If there are no (valid) credentials available, let the user log in.

    Args:
        token_path: Path to token.json file
        credentials_path: Path to client secret file
        cache_token: Whether to read and write the token file

    Returns:
        Valid credentials object

    Raises:
        FileNotFoundError: If the client secret file is not found
    """
    creds = None
    if cache_token and os.path.exists(token_path):
        creds = Credentials.from_authorized_user_file(token_path, SCOPES)

    if not creds or not creds.valid:
        if creds and creds.expired and creds.refresh_token:
            logger.debug("Refreshing expired token from %s", token_path)
            creds.refresh(Request())
        else:
            if not os.path.exists(credentials_path):
                raise FileNotFoundError(
                    f"Missing credentials file at {credentials_path}"
                )

            flow = InstalledAppFlow.from_client_secrets_file(
                credentials_path,
                SCOPES
            )
            creds = flow.run_local_server(port=0)

        if cache_token:
            # Save the credentials for the next run
            with open(token_path, 'w', encoding='utf-8') as token:
                token.write(creds.to_json())

    return cast(Credentials, creds)

def authenticate_google_photos(token_path: str = 'token.json',
                               credentials_path: str = 'client_secret.json',
                               cache_token: bool = True) -> Any:
    """Authenticate with Google Photos API and build the service.

    Args:
        token_path: Path to token.json file
        credentials_path: Path to client secret file
        cache_token: Whether to cache the token on disk

    Returns:
        Google Photos API service object

    Raises:
        AuthenticationError: If authentication fails
    """
    try:
        creds = get_credentials(token_path, credentials_path, cache_token)
        return build('photoslibrary', 'v1', credentials=creds, static_discovery=False)
    except Exception as e:
        raise AuthenticationError(f"Error authenticating with Google Photos: {e}") from e
