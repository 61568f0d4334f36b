from __future__ import annotations

import time
from typing import Dict, Optional
from urllib.parse import urlsplit

import requests

from order_portal.config import get_config
from order_portal.errors import SharePointAuthError
from order_portal.logging import get_logger

ACS_TOKEN_URL = "https://accounts.accesscontrol.windows.net/{realm}/tokens/OAuth/2"
SHAREPOINT_PRINCIPAL = "00000003-0000-0ff1-ce00-000000000000"
# Refresh a little before the token really expires.
EXPIRY_MARGIN_SECONDS = 60


class SharePointAuthentication:
    """Handles SharePoint bearer-token acquisition using the AppConfig singleton."""
    def __init__(self, session: Optional[requests.Session] = None) -> None:
        """Initializes the authentication handler using the singleton AppConfig."""
        self.config = get_config()
        self.logger = get_logger(__name__)
        self.session = session or requests.Session()
        self._token: Optional[str] = None
        self._expires_at: float = 0.0

    def get_access_token(self) -> str:
        """Returns a bearer token for the configured site.

        App-only credentials (client id + secret + realm) take precedence and are
        exchanged at the ACS token endpoint; otherwise a manually configured token
        is used as-is.

        Returns:
            str: The access token.
        Raises:
            SharePointAuthError: If required configuration is missing or the token request fails.
        """
        if self.config.sharepoint_client_id and self.config.sharepoint_client_secret and self.config.sharepoint_realm:
            if self._token and time.time() < self._expires_at:
                return self._token
            self.logger.info("Fetching SharePoint app-only token from ACS")
            return self._fetch_app_only_token()
        elif self.config.sharepoint_access_token:
            self.logger.debug("Using manually configured SharePoint access token")
            return self.config.sharepoint_access_token
        else:
            self.logger.error("Missing SharePoint authentication configuration values.")
            raise SharePointAuthError("Missing SharePoint authentication configuration values.")

    def _fetch_app_only_token(self) -> str:
        if not self.config.sharepoint_site_url:
            raise SharePointAuthError("sharepoint_site_url is required to request an app-only token.")
        realm = self.config.sharepoint_realm
        host = urlsplit(self.config.sharepoint_site_url).netloc
        data = {
            "grant_type": "client_credentials",
            "client_id": f"{self.config.sharepoint_client_id}@{realm}",
            "client_secret": self.config.sharepoint_client_secret,
            "resource": f"{SHAREPOINT_PRINCIPAL}/{host}@{realm}",
        }
        try:
            response = self.session.post(
                ACS_TOKEN_URL.format(realm=realm),
                data=data,
                timeout=self.config.request_timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            self.logger.error(f"SharePoint token request failed: {e}")
            raise SharePointAuthError(f"SharePoint token request failed: {e}") from e

        token = payload.get("access_token")
        if not token:
            raise SharePointAuthError("Token endpoint returned no access_token.")
        expires_in = int(payload.get("expires_in", 3600))
        self._token = token
        self._expires_at = time.time() + max(expires_in - EXPIRY_MARGIN_SECONDS, 0)
        return token

    def get_auth_headers(self) -> Dict[str, str]:
        """Authorization header for SharePoint REST calls."""
        return {"Authorization": f"Bearer {self.get_access_token()}"}

def get_sharepoint_auth() -> SharePointAuthentication:
    """Returns a new SharePointAuthentication instance using the latest config."""
    return SharePointAuthentication()
