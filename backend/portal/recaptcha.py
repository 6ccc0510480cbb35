"""Server-side verification of reCAPTCHA tokens."""
from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx

logger = logging.getLogger(__name__)


class CaptchaVerifier(Protocol):
    async def verify(self, token: Optional[str], remote_ip: Optional[str] = None) -> bool:
        ...


class RecaptchaVerifier:
    """Check tokens against Google's ``siteverify`` endpoint.

    Transport or decoding failures count as a failed verification; no retry is
    attempted.
    """

    def __init__(
        self,
        secret_key: str,
        *,
        verify_url: str = "https://www.google.com/recaptcha/api/siteverify",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._secret_key = secret_key
        self._verify_url = verify_url
        self._timeout = timeout
        self._transport = transport

    async def verify(self, token: Optional[str], remote_ip: Optional[str] = None) -> bool:
        if not token:
            return False

        form = {"secret": self._secret_key, "response": token}
        if remote_ip:
            form["remoteip"] = remote_ip

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._verify_url, data=form)
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("reCAPTCHA verification failed: %s", exc)
            return False

        if not payload.get("success"):
            logger.info("reCAPTCHA rejected token: %s", payload.get("error-codes"))
            return False
        return True


__all__ = ["CaptchaVerifier", "RecaptchaVerifier"]
