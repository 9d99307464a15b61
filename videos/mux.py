import logging
from dataclasses import dataclass
from typing import BinaryIO, List, Optional

import requests
from django.conf import settings

from .exceptions import (
    CredentialsMissingError,
    UploadInitError,
    UploadTransferError,
    VideoHostError,
)

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class UploadTarget:
    """One-time destination issued by Mux for a single direct upload."""

    url: str
    upload_id: str


class MuxClient:
    """
    Thin wrapper over the Mux Video REST API for direct uploads.

    Authenticated calls use HTTP basic auth with the access token pair.
    The upload PUT goes to a pre-signed URL and carries no credentials.
    """

    def __init__(
        self,
        token_id: Optional[str],
        token_secret: Optional[str],
        *,
        base_url: str = "https://api.mux.com",
        playback_policy: str = "public",
        cors_origin: str = "*",
        session: Optional[requests.Session] = None,
    ):
        self.token_id = token_id
        self.token_secret = token_secret
        self.base_url = base_url.rstrip("/")
        self.playback_policy = playback_policy
        self.cors_origin = cors_origin
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, session: Optional[requests.Session] = None) -> "MuxClient":
        return cls(
            settings.MUX_TOKEN_ID,
            settings.MUX_TOKEN_SECRET,
            base_url=settings.MUX_API_BASE_URL,
            playback_policy=settings.MUX_PLAYBACK_POLICY,
            cors_origin=settings.MUX_CORS_ORIGIN,
            session=session,
        )

    def _auth(self) -> tuple:
        if not self.token_id or not self.token_secret:
            raise CredentialsMissingError("MUX_TOKEN_ID / MUX_TOKEN_SECRET are not set")
        return (self.token_id, self.token_secret)

    def _get_data(self, path: str) -> dict:
        """GET an API path and return its ``data`` object or raise VideoHostError."""
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.get(url, auth=self._auth())
        except requests.RequestException as e:
            raise VideoHostError(f"GET {path} failed: {e}") from e

        if not resp.ok:
            raise VideoHostError(f"GET {path} returned {resp.status_code}")
        try:
            data = resp.json()["data"]
        except (ValueError, KeyError, TypeError) as e:
            raise VideoHostError(f"GET {path} returned an unexpected body") from e
        if not isinstance(data, dict):
            raise VideoHostError(f"GET {path} returned an unexpected body")
        return data

    def create_upload_target(self) -> UploadTarget:
        """Ask Mux for a direct-upload URL whose asset gets the configured playback policy."""
        auth = self._auth()
        body = {
            "new_asset_settings": {"playback_policy": [self.playback_policy]},
            "cors_origin": self.cors_origin,
        }
        try:
            resp = self.session.post(f"{self.base_url}/video/v1/uploads", json=body, auth=auth)
        except requests.RequestException as e:
            raise UploadInitError(f"Mux upload init failed: {e}") from e

        if not resp.ok:
            raise UploadInitError(f"Mux upload init failed: {resp.status_code} {resp.text[:500]}")
        try:
            data = resp.json()["data"]
            target = UploadTarget(url=data["url"], upload_id=data["id"])
        except (ValueError, KeyError, TypeError) as e:
            raise UploadInitError("Mux upload init returned an unexpected body") from e

        logger.info("Created Mux upload %s", target.upload_id)
        return target

    def transfer(self, url: str, stream: BinaryIO, content_type: Optional[str] = None) -> None:
        """Stream ``stream`` to the upload URL in a single PUT."""
        headers = {"Content-Type": content_type or DEFAULT_CONTENT_TYPE}
        try:
            resp = self.session.put(url, data=stream, headers=headers)
        except requests.RequestException as e:
            raise UploadTransferError(f"Mux file upload failed: {e}") from e

        if not resp.ok:
            raise UploadTransferError(f"Mux file upload failed: {resp.status_code} {resp.text[:500]}")

    def get_upload_status(self, upload_id: str) -> Optional[str]:
        """Return the asset id Mux created for this upload, or None if not yet."""
        data = self._get_data(f"/video/v1/uploads/{upload_id}")
        return data.get("asset_id") or None

    def get_asset_status(self, asset_id: str) -> List[str]:
        """Return the asset's playback ids (possibly empty)."""
        data = self._get_data(f"/video/v1/assets/{asset_id}")
        playback_ids = data.get("playback_ids") or []
        if not isinstance(playback_ids, list) or not all(isinstance(p, dict) for p in playback_ids):
            raise VideoHostError(f"Asset {asset_id} has malformed playback_ids")
        return [p["id"] for p in playback_ids if p.get("id")]

    def close(self) -> None:
        self.session.close()
