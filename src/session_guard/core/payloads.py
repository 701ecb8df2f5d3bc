"""Request bodies for the session endpoints.

Field names are the service's camelCase JSON names.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..models import MagicCodeCredential, PasswordCredential, SocialCredential


def password_payload(credential: PasswordCredential) -> dict[str, Any]:
    return {
        "email": credential.email,
        "password": credential.password.get_secret_value(),
    }


def magic_code_payload(credential: MagicCodeCredential) -> dict[str, Any]:
    return {
        "email": credential.email,
        "code": credential.code.get_secret_value(),
    }


def social_payload(credential: SocialCredential) -> dict[str, Any]:
    return {
        "provider": credential.provider.wire_name,
        "socialToken": credential.social_token.get_secret_value(),
    }


def acknowledge_payload(
    access_token: str,
    refresh_token: str,
    email: str,
    device_id: str,
) -> dict[str, Any]:
    return {
        "email": email,
        "deviceId": device_id,
        "accessToken": access_token,
        "refreshToken": refresh_token,
    }


def token_payload(token: str, email: str, device_id: str) -> dict[str, Any]:
    """Body shared by validate, renew and revoke."""
    return {
        "email": email,
        "deviceId": device_id,
        "token": token,
    }
