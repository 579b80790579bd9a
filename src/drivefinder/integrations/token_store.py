# Token Store: Graph tokens on disk, one owner-only JSON file per service and tenant.
# Created: 2026-10-19

from __future__ import annotations

import json
import logging
import os
import re
import stat
import time
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

from drivefinder.config import get_config_dir

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


@dataclass
class OAuthTokens:
    """Tokens issued by the identity platform for one service in one tenant."""

    service: str
    access_token: str
    refresh_token: str | None = None
    token_type: str = "Bearer"
    expires_at: float | None = None  # Unix timestamp
    scopes: list[str] = field(default_factory=list)
    tenant: str = "common"

    def expires_within(self, seconds: float) -> bool:
        """True when the access token is unusable ``seconds`` from now.

        Tokens without a known expiry are treated as expired.
        """
        return self.expires_at is None or self.expires_at <= time.time() + seconds


class TokenStore:
    """Keeps tokens under ``<config dir>/oauth`` as ``{service}.{tenant}.json``.

    Signing in to ``common`` and to a named tenant yields separate files, so
    switching ``graph_tenant`` never reuses another tenant's refresh token.
    Files are chmod 0600.
    """

    def __init__(self, directory: Path | None = None):
        self.directory = directory or get_config_dir() / "oauth"

    def path_for(self, service: str, tenant: str = "common") -> Path:
        return self.directory / f"{service}.{_UNSAFE_CHARS.sub('_', tenant)}.json"

    def save(self, tokens: OAuthTokens) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(tokens.service, tokens.tenant)
        path.write_text(json.dumps(asdict(tokens), indent=2))
        os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)
        logger.info("Saved tokens for %s (tenant %s)", tokens.service, tokens.tenant)

    def load(self, service: str, tenant: str = "common") -> OAuthTokens | None:
        """Load tokens. Returns None if missing or unreadable."""
        path = self.path_for(service, tenant)
        if not path.exists():
            return None

        try:
            data = json.loads(path.read_text())
            known = {f.name for f in fields(OAuthTokens)}
            return OAuthTokens(**{k: v for k, v in data.items() if k in known})
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Failed to load tokens from %s: %s", path, e)
            return None

    def delete(self, service: str, tenant: str = "common") -> bool:
        """Delete stored tokens. Returns True if a file was removed."""
        path = self.path_for(service, tenant)
        if not path.exists():
            return False
        path.unlink()
        logger.info("Deleted tokens for %s (tenant %s)", service, tenant)
        return True
