"""Remote session lifecycle: authenticate, acknowledge, validate, renew, revoke.

A freshly issued token pair must be acknowledged for a device before the
service accepts it anywhere else. Renewal issues a new pair that needs its
own acknowledgment; revocation ends the session for good. The service
enforces all of this. The client only reports its answers as typed errors
and does not order concurrent calls itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar
from urllib.parse import quote

from pydantic import BaseModel, SecretStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .core.payloads import (
    acknowledge_payload,
    magic_code_payload,
    password_payload,
    social_payload,
    token_payload,
)
from .errors import InvalidRequestError
from .models import (
    AccessTokenClaims,
    MagicCodeCredential,
    PasswordCredential,
    SocialCredential,
    TokenPair,
)
from .providers import SocialProvider
from .telemetry import get_logger, trace_operation

if TYPE_CHECKING:
    from .core.http_executor import AsyncHTTPExecutor
    from .models import Credential


class Endpoints:
    """Paths of the session endpoints, relative to the service base URL."""

    AUTHENTICATE = "authentication/authenticate"
    MAGIC_AUTHENTICATE = "passwordless/magic/authenticate"
    MAGIC_REQUEST = "passwordless/magic/request/{email}"
    SOCIAL_AUTHENTICATE = "passwordless/social/authenticate"
    ACKNOWLEDGE = "authentication/acknowledge"
    VALIDATE = "authentication/accesstoken/validate"
    RENEW = "authentication/renew"
    REVOKE = "authentication/revoke"


_TOKEN_PAIR = TypeAdapter(TokenPair)
_CLAIMS = TypeAdapter(AccessTokenClaims)

CredentialT = TypeVar("CredentialT", bound=BaseModel)


def build_credential(model: type[CredentialT], **fields: Any) -> CredentialT:
    """Validate caller input into a credential model.

    The error names the offending fields only; credential values never
    reach the message or the exception chain.

    Raises:
        InvalidRequestError: If any field fails validation.
    """
    try:
        return model(**fields)
    except PydanticValidationError as e:
        names = sorted({".".join(str(part) for part in err["loc"]) for err in e.errors()})
        msg = f"Invalid {model.__name__}: {', '.join(names)}"
        raise InvalidRequestError(msg, fields=names) from None


class SessionProtocol:
    """Client side of the authentication service's session state machine."""

    def __init__(self, executor: AsyncHTTPExecutor) -> None:
        """Initialize session protocol.

        Args:
            executor: HTTP executor bound to the service base URL.
        """
        self._executor = executor
        self._logger = get_logger()

    async def authenticate(self, credential: Credential) -> TokenPair:
        """Exchange a credential for a token pair.

        The endpoint is chosen by the credential type.

        Raises:
            AuthRejectedError: If the service rejects the credential.
            ProtocolError: On transport failure or a malformed/empty body.
        """
        if isinstance(credential, PasswordCredential):
            path, payload = Endpoints.AUTHENTICATE, password_payload(credential)
        elif isinstance(credential, MagicCodeCredential):
            path, payload = Endpoints.MAGIC_AUTHENTICATE, magic_code_payload(credential)
        elif isinstance(credential, SocialCredential):
            path, payload = Endpoints.SOCIAL_AUTHENTICATE, social_payload(credential)
        else:
            msg = f"Unsupported credential type: {type(credential).__name__}"
            raise TypeError(msg)

        with trace_operation(
            "session.authenticate",
            attributes={"auth.method": credential.method.value},
        ):
            pair = await self._executor.send_for_model(
                "POST", path, _TOKEN_PAIR, json=payload
            )

        self._logger.info("Authenticated", method=credential.method.value)
        return pair

    async def authenticate_password(self, email: str, password: str) -> TokenPair:
        """Authenticate with email and password.

        Raises:
            InvalidRequestError: If the email is empty.
        """
        return await self.authenticate(
            build_credential(
                PasswordCredential, email=email, password=SecretStr(password)
            )
        )

    async def authenticate_magic_code(self, email: str, code: str) -> TokenPair:
        """Authenticate with a one-time code from a magic link.

        Raises:
            InvalidRequestError: If the email is empty.
        """
        return await self.authenticate(
            build_credential(MagicCodeCredential, email=email, code=SecretStr(code))
        )

    async def authenticate_social(
        self,
        provider: SocialProvider | str,
        social_token: str,
    ) -> TokenPair:
        """Authenticate with a token from a federated provider.

        ``provider`` may be a member or its name in any casing.

        Raises:
            InvalidRequestError: If ``provider`` names no supported provider.
        """
        try:
            social_provider = SocialProvider(provider)
        except ValueError:
            msg = f"Unsupported social provider: {provider}"
            raise InvalidRequestError(msg, fields=["provider"]) from None

        return await self.authenticate(
            build_credential(
                SocialCredential,
                provider=social_provider,
                social_token=SecretStr(social_token),
            )
        )

    async def request_magic_link(self, email: str) -> None:
        """Ask the service to email a one-time login code."""
        path = Endpoints.MAGIC_REQUEST.format(email=quote(email, safe=""))
        with trace_operation("session.request_magic_link"):
            await self._executor.send("GET", path)

    async def acknowledge(
        self,
        access_token: str,
        refresh_token: str,
        email: str,
        device_id: str,
    ) -> None:
        """Bind a newly issued token pair to a device.

        Must succeed before the pair is validated or trusted locally.

        Raises:
            AuthRejectedError: If the service refuses the acknowledgment.
            ProtocolError: On transport failure.
        """
        with trace_operation("session.acknowledge"):
            await self._executor.send(
                "POST",
                Endpoints.ACKNOWLEDGE,
                json=acknowledge_payload(access_token, refresh_token, email, device_id),
            )
        self._logger.info("Token pair acknowledged")

    async def validate_remote(
        self,
        email: str,
        access_token: str,
        device_id: str,
    ) -> AccessTokenClaims:
        """Ask the service whether the access token is currently valid.

        This is the only check that sees revocation, acknowledgment and
        device binding.

        Raises:
            AuthRejectedError: If the token is unacknowledged, revoked,
                expired, or bound to a different device.
            ProtocolError: On transport failure or a malformed/empty body.
        """
        with trace_operation("session.validate_remote"):
            return await self._executor.send_for_model(
                "POST",
                Endpoints.VALIDATE,
                _CLAIMS,
                json=token_payload(access_token, email, device_id),
            )

    async def renew(
        self,
        refresh_token: str,
        email: str,
        device_id: str,
    ) -> TokenPair:
        """Exchange a refresh token for a new token pair.

        The previous access token stops validating. The new pair must be
        acknowledged before use.

        Raises:
            AuthRejectedError: If the refresh token is not accepted.
            ProtocolError: On transport failure or a malformed/empty body.
        """
        with trace_operation("session.renew"):
            pair = await self._executor.send_for_model(
                "POST",
                Endpoints.RENEW,
                _TOKEN_PAIR,
                json=token_payload(refresh_token, email, device_id),
            )
        self._logger.info("Token pair renewed")
        return pair

    async def revoke(
        self,
        access_token: str,
        email: str,
        device_id: str,
    ) -> None:
        """End the session the access token belongs to.

        Raises:
            AuthRejectedError: If the service refuses the revocation.
            ProtocolError: On transport failure.
        """
        with trace_operation("session.revoke"):
            await self._executor.send(
                "POST",
                Endpoints.REVOKE,
                json=token_payload(access_token, email, device_id),
            )
        self._logger.info("Session revoked")
