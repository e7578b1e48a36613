"""authrelay: OAuth2 PKCE session-relay broker for sandboxed plugin hosts."""
