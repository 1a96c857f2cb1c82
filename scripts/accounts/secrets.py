"""Secret resolution for relay and key-file settings.

Values of the form ``gcp-secret://...`` are fetched from GCP Secret
Manager; anything else is used verbatim, which keeps plain env vars and
``.env`` files working for local development.
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger("accounts.secrets")

_GCP_PREFIX = "gcp-secret://"


def resolve_secret(value: str) -> str:
    """Resolve a secret reference to its plaintext value.

    Supported formats:
      - "gcp-secret://projects/P/secrets/NAME/versions/V" -> full resource name
      - "gcp-secret://NAME"                                -> latest version in the current project
      - anything else                                      -> returned as-is
    """
    if value.startswith(_GCP_PREFIX):
        return _resolve_gcp_secret(value[len(_GCP_PREFIX):])
    return value


def _resolve_gcp_secret(ref: str) -> str:
    from google.cloud import secretmanager

    client = secretmanager.SecretManagerServiceClient()

    if ref.startswith("projects/"):
        name = ref
    else:
        project = os.environ.get("FIREBASE_PROJECT_ID") or os.environ.get("GCP_PROJECT_ID", "")
        if not project:
            project = _gcp_project_from_metadata()
        name = f"projects/{project}/secrets/{ref}/versions/latest"

    logger.debug("Fetching secret %s", name)
    response = client.access_secret_version(request={"name": name})
    return response.payload.data.decode("UTF-8")


def _gcp_project_from_metadata() -> str:
    """Fetch the project ID from the metadata server (Cloud Functions / Cloud Run)."""
    import requests
    try:
        resp = requests.get(
            "http://metadata.google.internal/computeMetadata/v1/project/project-id",
            headers={"Metadata-Flavor": "Google"},
            timeout=2,
        )
        resp.raise_for_status()
        return resp.text
    except requests.RequestException as exc:
        raise RuntimeError(
            "Cannot determine GCP project ID. Set FIREBASE_PROJECT_ID env var."
        ) from exc
