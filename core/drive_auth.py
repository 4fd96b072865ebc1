# core/drive_auth.py
import asyncio
import logging
from typing import Callable, List, Optional
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from core.circuit_breaker import CircuitBreaker
from repository.token_repository import TokenRepository

logger = logging.getLogger(__name__)

# Receives the authorization URL, returns the one-time code the operator pasted back.
CodePrompt = Callable[[str], str]


class DriveCredentialsMissing(RuntimeError):
    pass


class DriveAuthBootstrap:
    """
    One-time acquisition of Drive credentials.

    The web service only ever calls `load_credentials`, which never prompts.
    The interactive exchange lives behind `acquire`, run by the provisioning
    command. Only the token exchange goes through the breaker; time spent
    waiting for the operator is not subject to any deadline.
    """

    def __init__(
        self,
        tokens: TokenRepository,
        client_secrets_path: str,
        scopes: List[str],
        breaker: CircuitBreaker,
    ) -> None:
        self._tokens = tokens
        self._client_secrets_path = client_secrets_path
        self._scopes = list(scopes)
        self._breaker = breaker

    def load(self) -> Optional[Credentials]:
        info = self._tokens.load()
        if info is None:
            return None
        creds = Credentials.from_authorized_user_info(info, self._scopes)
        if creds.expired and creds.refresh_token:
            creds.refresh(Request())
            self._tokens.save(creds.to_json())
            logger.info("drive.auth.refreshed")
        return creds

    async def load_credentials(self) -> Credentials:
        creds = await self._breaker.fire(asyncio.to_thread, self.load)
        if creds is None:
            raise DriveCredentialsMissing(
                f"No Drive token at {self._tokens.path}; run `python authorize.py` first"
            )
        logger.info("drive.auth.loaded path=%s", self._tokens.path)
        return creds

    async def acquire(self, prompt: CodePrompt) -> Credentials:
        creds = await self._breaker.fire(asyncio.to_thread, self.load)
        if creds is not None:
            logger.info("drive.auth.cached path=%s", self._tokens.path)
            return creds

        logger.info("drive.auth.interactive.start")
        flow = Flow.from_client_secrets_file(self._client_secrets_path, scopes=self._scopes)
        flow.redirect_uri = flow.client_config["redirect_uris"][0]
        auth_url, _ = flow.authorization_url(access_type="offline", prompt="consent")

        code = (await asyncio.to_thread(prompt, auth_url)).strip()
        await self._breaker.fire(asyncio.to_thread, flow.fetch_token, code=code)

        creds = flow.credentials
        self._tokens.save(creds.to_json())
        logger.info("drive.auth.saved path=%s", self._tokens.path)
        return creds
