# Identity provider endpoints.
# Created: 2026-10-19
#
# Extensible to other providers by adding to the PROVIDERS dict.

from __future__ import annotations

PROVIDERS: dict[str, dict[str, str]] = {
    "google": {
        "auth_url": "https://accounts.google.com/o/oauth2/v2/auth",
        "token_url": "https://oauth2.googleapis.com/token",
        "userinfo_url": "https://www.googleapis.com/oauth2/v2/userinfo",
    },
}

# Extra authorization parameters a provider needs to hand out refresh tokens.
EXTRA_AUTH_PARAMS: dict[str, dict[str, str]] = {
    "google": {"access_type": "offline"},
}


def get_provider(name: str) -> dict[str, str]:
    config = PROVIDERS.get(name)
    if not config:
        raise ValueError(f"Unknown OAuth provider: {name}")
    return config
