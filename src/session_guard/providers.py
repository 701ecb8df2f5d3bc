"""Federated identity providers accepted by the social authentication endpoint."""

from __future__ import annotations

from enum import StrEnum


class SocialProvider(StrEnum):
    """Supported federated providers.

    The member value is the name sent on the wire, so a new provider is a
    single new member here.
    """

    GOOGLE = "google"
    MICROSOFT = "microsoft"
    GITHUB = "github"

    @classmethod
    def _missing_(cls, value: object) -> SocialProvider | None:
        # Display-cased names ("Google", "GitHub") map to the wire value.
        if isinstance(value, str):
            folded = value.strip().lower()
            for member in cls:
                if member.value == folded:
                    return member
        return None

    @property
    def wire_name(self) -> str:
        """Name sent in the ``provider`` request field."""
        return self.value
