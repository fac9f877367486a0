"""
core.api.avatar_client

Thin wrapper around the streaming-avatar vendor's token endpoint.

The token is opaque to the runtime: it is minted on session creation and
handed straight back to the browser, which uses it to open the avatar
stream. It is never stored on the session.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from configs.settings import DEFAULT_AVATAR_API_URL
from exceptions.exceptions import UpstreamFailureError


logger = logging.getLogger(__name__)

TOKEN_PATH = "/v1/streaming.create_token"


class AvatarTokenClient:
    """Issues streaming access tokens.

    Parameters
    ----------
    api_key:
        Vendor API key sent as `x-api-key`. If missing, every call fails
        with UpstreamFailureError instead of reaching the network.
    base_url:
        Vendor API root, e.g. "https://api.heygen.com".
    timeout:
        Request timeout in seconds.
    transport:
        Optional httpx transport (tests pass an httpx.MockTransport).
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_AVATAR_API_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def token_url(self) -> str:
        return f"{self.base_url}{TOKEN_PATH}"

    async def issue_access_token(self) -> str:
        """Request a new access token.

        Raises
        ------
        UpstreamFailureError
            If no API key is configured, the request fails, the vendor
            answers with an error status, or the body has no token.
        """
        if not self.api_key:
            raise UpstreamFailureError(
                "Avatar API key is not configured. Set INTERVIEW_AVATAR_API_KEY "
                "in your environment or in a .env file."
            )

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.token_url,
                    headers={
                        "x-api-key": self.api_key,
                        "Content-Type": "application/json",
                    },
                )
        except httpx.HTTPError as e:
            logger.warning("[TOKEN] request to %s failed: %s", self.token_url, e)
            raise UpstreamFailureError(f"Failed to create access token: {e}")

        if response.is_error:
            logger.warning(
                "[TOKEN] vendor answered HTTP %s %s",
                response.status_code,
                response.reason_phrase,
            )
            raise UpstreamFailureError(
                f"Failed to create access token: HTTP {response.status_code}: "
                f"{response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            token = response.json()["data"]["token"]
        except (ValueError, KeyError, TypeError):
            raise UpstreamFailureError("Malformed token response from avatar API")

        if not isinstance(token, str) or not token:
            raise UpstreamFailureError("Avatar API returned an empty token")

        logger.debug("[TOKEN] access token issued")
        return token
