# service/identity_service.py
import httpx
import logging
from fastapi import status
from pydantic import ValidationError
from config.settings import settings
from model.identity import Identity
from util.enums import ErrorMessage
from util.errors import AppError

logger = logging.getLogger(__name__)


class IdentityService:
    """
    Resolves a bearer token to verified identity claims by asking the
    identity provider's userinfo endpoint. Token validation itself stays with
    the provider.
    """

    def __init__(
        self,
        userinfo_url: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url: str = userinfo_url or settings.keycloak_userinfo_url
        self._timeout = httpx.Timeout(
            timeout_seconds or settings.KEYCLOAK_TIMEOUT_SECONDS, connect=3.0
        )
        self._transport = transport

    async def verify(self, token: str) -> Identity:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                res = await client.get(
                    self._url,
                    headers={
                        "Authorization": f"Bearer {token}",
                        "Accept": "application/json",
                    },
                )
        except httpx.RequestError as e:
            logger.error("identity.request_error err=%s", type(e).__name__)
            raise AppError.of(ErrorMessage.IDENTITY_UNAVAILABLE)

        if res.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
            logger.info("identity.rejected status=%d", res.status_code)
            raise AppError.of(ErrorMessage.UNAUTHORIZED)

        if res.status_code // 100 != 2:
            logger.error("identity.unexpected status=%d", res.status_code)
            raise AppError.of(ErrorMessage.IDENTITY_UNAVAILABLE)

        try:
            identity = Identity.model_validate(res.json())
        except (ValueError, ValidationError):
            logger.warning("identity.claims.incomplete")
            raise AppError.of(ErrorMessage.UNAUTHORIZED)

        logger.debug("identity.ok user=%s", identity.preferred_username)
        return identity
