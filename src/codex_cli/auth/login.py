"""
Browser sign-in flow and credit redemption.

The flow is a PKCE authorization-code exchange: a local aiohttp server
receives the redirect, the code is swapped for OAuth tokens, and the id token
is exchanged for an API key. The result is written to ``auth.json``.
"""

import asyncio
import base64
import hashlib
import logging
import secrets
import webbrowser
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

import aiohttp
from aiohttp import web

from ..exceptions import LoginError
from .credentials import CredentialRecord, save_credentials

__all__ = [
    "CLIENT_ID",
    "ISSUER",
    "LoginFlow",
    "redeem_credits",
    "refresh_tokens",
]

logger = logging.getLogger(__name__)

ISSUER = "https://auth.openai.com"
CLIENT_ID = "app_EMoamEEZ73f0CkXaXp7hrann"
REDIRECT_PORT = 1455
REDEEM_URL = "https://api.openai.com/v1/billing/redeem_credits"
_SCOPE = "openid profile email offline_access"
_SUCCESS_PAGE = (
    "<html><body><h2>Signed in.</h2>"
    "<p>You can close this tab and return to your terminal.</p></body></html>"
)


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def make_pkce_pair() -> tuple[str, str]:
    """Return ``(code_verifier, code_challenge)`` for S256."""
    verifier = _b64url(secrets.token_bytes(64))
    challenge = _b64url(hashlib.sha256(verifier.encode("ascii")).digest())
    return verifier, challenge


class LoginFlow:
    """Interactive sign-in that yields an API key."""

    def __init__(
        self,
        auth_file: Path,
        issuer: str = ISSUER,
        client_id: str = CLIENT_ID,
        port: int = REDIRECT_PORT,
        open_browser: Callable[[str], Any] = webbrowser.open,
        echo: Callable[[str], Any] = print,
        timeout_seconds: float = 600.0,
    ):
        self.auth_file = auth_file
        self.issuer = issuer.rstrip("/")
        self.client_id = client_id
        self.port = port
        self.open_browser = open_browser
        self.echo = echo
        self.timeout_seconds = timeout_seconds
        self.redirect_uri = f"http://localhost:{port}/auth/callback"
        self._state = secrets.token_hex(32)
        self._verifier, self._challenge = make_pkce_pair()
        self._code: Optional[asyncio.Future] = None

    def authorize_url(self) -> str:
        query = urlencode(
            {
                "response_type": "code",
                "client_id": self.client_id,
                "redirect_uri": self.redirect_uri,
                "scope": _SCOPE,
                "code_challenge": self._challenge,
                "code_challenge_method": "S256",
                "id_token_add_organizations": "true",
                "state": self._state,
            }
        )
        return f"{self.issuer}/oauth/authorize?{query}"

    async def _handle_callback(self, request: web.Request) -> web.Response:
        if self._code is None:
            raise LoginError("sign-in callback received before the flow started")
        if request.query.get("state") != self._state:
            if not self._code.done():
                self._code.set_exception(LoginError("state mismatch in sign-in callback"))
            return web.Response(status=400, text="State mismatch")
        code = request.query.get("code")
        if not code:
            if not self._code.done():
                self._code.set_exception(LoginError("sign-in callback carried no code"))
            return web.Response(status=400, text="Missing authorization code")
        if not self._code.done():
            self._code.set_result(code)
        return web.Response(text=_SUCCESS_PAGE, content_type="text/html")

    async def _wait_for_code(self) -> str:
        self._code = asyncio.get_running_loop().create_future()
        app = web.Application()
        app.router.add_get("/auth/callback", self._handle_callback)
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, "127.0.0.1", self.port)
        try:
            await site.start()
        except OSError as exc:
            await runner.cleanup()
            raise LoginError(f"cannot listen on port {self.port}: {exc}")
        url = self.authorize_url()
        self.echo(f"Sign in to continue. If your browser did not open, visit:\n{url}")
        try:
            self.open_browser(url)
        except Exception as exc:  # browser launch is best-effort
            logger.debug("could not open browser: %s", exc)
        try:
            return await asyncio.wait_for(self._code, timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            raise LoginError("timed out waiting for browser sign-in")
        finally:
            await runner.cleanup()

    async def _post_form(
        self, session: aiohttp.ClientSession, data: Dict[str, str]
    ) -> Dict[str, Any]:
        async with session.post(f"{self.issuer}/oauth/token", data=data) as resp:
            if resp.status != 200:
                body = await resp.text()
                raise LoginError(f"token endpoint returned {resp.status}: {body[:200]}")
            return await resp.json()

    async def run(self) -> str:
        """Run the full flow and return the new API key."""
        code = await self._wait_for_code()
        try:
            async with aiohttp.ClientSession() as session:
                tokens = await self._post_form(
                    session,
                    {
                        "grant_type": "authorization_code",
                        "code": code,
                        "redirect_uri": self.redirect_uri,
                        "client_id": self.client_id,
                        "code_verifier": self._verifier,
                    },
                )
                exchanged = await self._post_form(
                    session,
                    {
                        "grant_type": "urn:ietf:params:oauth:grant-type:token-exchange",
                        "client_id": self.client_id,
                        "requested_token": "openai-api-key",
                        "subject_token": tokens.get("id_token", ""),
                        "subject_token_type": "urn:ietf:params:oauth:token-type:id_token",
                    },
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise LoginError(f"sign-in request failed: {exc}")
        api_key = str(exchanged.get("access_token") or "")
        if not api_key:
            raise LoginError("token exchange returned no API key")
        save_credentials(
            self.auth_file,
            CredentialRecord(
                api_key=api_key,
                refresh_token=str(tokens.get("refresh_token") or ""),
                id_token=tokens.get("id_token"),
                access_token=tokens.get("access_token"),
                last_refresh=datetime.now(timezone.utc),
            ),
        )
        logger.info("sign-in completed; credentials saved to %s", self.auth_file)
        return api_key


async def refresh_tokens(
    refresh_token: str, issuer: str = ISSUER, client_id: str = CLIENT_ID
) -> Dict[str, Any]:
    payload = {
        "client_id": client_id,
        "grant_type": "refresh_token",
        "refresh_token": refresh_token,
        "scope": "openid profile email",
    }
    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(f"{issuer}/oauth/token", json=payload) as resp:
                if resp.status != 200:
                    raise LoginError(f"Failed to refresh token: {resp.status}")
                return await resp.json()
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise LoginError(f"Failed to refresh token: {exc}")


async def redeem_credits(
    refresh_token: str,
    id_token: Optional[str] = None,
    issuer: str = ISSUER,
    client_id: str = CLIENT_ID,
) -> Dict[str, Any]:
    """Redeem complimentary API credits for the signed-in account."""
    refreshed = await refresh_tokens(refresh_token, issuer, client_id)
    token = refreshed.get("id_token") or id_token
    if not token:
        raise LoginError("no id token available to redeem credits")
    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(REDEEM_URL, json={"id_token": token}) as resp:
                data = await resp.json(content_type=None)
                if resp.status != 200:
                    raise LoginError(f"credit redemption failed: {resp.status}")
                return data or {}
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
        raise LoginError(f"credit redemption failed: {exc}")
