"""
Service-account credentials from Google Secret Manager.

When GCP_CREDENTIALS_SECRET is unset the Google clients fall back to
Application Default Credentials, which is what Cloud Run provides.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from google.cloud import secretmanager
from google.oauth2 import service_account

from .config import get_config

log = logging.getLogger(__name__)


def access_secret_json(secret_name: str, client: Any = None) -> dict:
    """Read the secret version and decode its payload as JSON."""
    client = client or secretmanager.SecretManagerServiceClient()
    response = client.access_secret_version(request={"name": secret_name})
    return json.loads(response.payload.data.decode("utf-8"))


def load_service_account_credentials(
    secret_name: Optional[str] = None,
    client: Any = None,
) -> Optional[service_account.Credentials]:
    secret_name = secret_name or get_config().GCP_CREDENTIALS_SECRET
    if not secret_name:
        log.info("GCP_CREDENTIALS | using application default credentials")
        return None

    info = access_secret_json(secret_name, client)
    credentials = service_account.Credentials.from_service_account_info(info)
    # Only the identity is logged, never key material
    log.info(f"GCP_CREDENTIALS | loaded from secret | account={info.get('client_email', '?')}")
    return credentials
