"""Tests for the reCAPTCHA verifier using a mocked transport."""
import httpx
import pytest

from portal.recaptcha import RecaptchaVerifier


def _verifier(handler) -> RecaptchaVerifier:
    return RecaptchaVerifier(
        "test-secret",
        verify_url="https://captcha.test/siteverify",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_successful_verification_posts_secret_and_token() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True})

    assert await _verifier(handler).verify("token-123", "10.1.2.3")

    body = seen[0].content.decode()
    assert "secret=test-secret" in body
    assert "response=token-123" in body
    assert "remoteip=10.1.2.3" in body


@pytest.mark.asyncio
async def test_rejected_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": False, "error-codes": ["invalid-input-response"]})

    assert not await _verifier(handler).verify("bad")


@pytest.mark.asyncio
async def test_missing_token_skips_network() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not be called
        raise AssertionError("no request expected")

    assert not await _verifier(handler).verify("")
    assert not await _verifier(handler).verify(None)


@pytest.mark.asyncio
async def test_transport_failure_counts_as_rejection() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    assert not await _verifier(handler).verify("token")


@pytest.mark.asyncio
async def test_server_error_counts_as_rejection() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    assert not await _verifier(handler).verify("token")
