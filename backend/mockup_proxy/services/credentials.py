"""
Mockup Approval Proxy - DocuSign Credential Resolver
======================================================

What:  Turns settings into an immutable DocuSignCredentials value.
Why:   The auth and submit components receive credentials explicitly instead
       of reading process-wide settings at call time.
How:   `resolve_credentials()` runs once at startup; `require()` is called
       by the token provider before the first network call.

Key normalization:
    Hosting dashboards store multi-line PEM keys on one line with literal
    backslash-n sequences. Those are converted back to newlines so the
    key parses; keys that already contain real newlines pass unchanged.
"""

from dataclasses import dataclass
from typing import List

from mockup_proxy.config import Settings, settings as default_settings
from mockup_proxy.exceptions import ConfigurationError


def normalize_private_key(raw: str) -> str:
    """Replace escaped `\\n` sequences with newlines and trim surrounding whitespace."""
    if not raw:
        return ""
    return raw.replace("\\r\\n", "\n").replace("\\n", "\n").strip()


@dataclass(frozen=True)
class DocuSignCredentials:
    """
    Integration secrets for the JWT-bearer grant and the REST API.

    Immutable for the process lifetime. Missing fields are tolerated here
    and reported by `require()` on first use.
    """

    integration_key: str
    user_id: str
    private_key: str
    account_id: str
    base_path: str
    oauth_host: str

    def missing_fields(self) -> List[str]:
        required = {
            "integration_key": self.integration_key,
            "user_id": self.user_id,
            "private_key": self.private_key,
            "account_id": self.account_id,
            "base_path": self.base_path,
        }
        return [name for name, value in required.items() if not value]

    def require(self) -> "DocuSignCredentials":
        """Raise ConfigurationError naming every absent field, else return self."""
        missing = self.missing_fields()
        if missing:
            raise ConfigurationError(
                message=f"DocuSign credentials not configured: missing {', '.join(missing)}",
                missing=missing,
            )
        return self

    def __repr__(self) -> str:
        # Keeps the private key out of logs and tracebacks
        return (
            f"DocuSignCredentials(integration_key='{self.integration_key}', "
            f"user_id='{self.user_id}', account_id='{self.account_id}', "
            f"base_path='{self.base_path}', oauth_host='{self.oauth_host}', "
            f"private_key=<{'set' if self.private_key else 'missing'}>)"
        )


def resolve_credentials(config: Settings = default_settings) -> DocuSignCredentials:
    """Build credentials from settings, normalizing the private key."""
    oauth_host = config.docusign_oauth_host.strip()
    for prefix in ("https://", "http://"):
        if oauth_host.startswith(prefix):
            oauth_host = oauth_host[len(prefix):]
    return DocuSignCredentials(
        integration_key=config.docusign_integration_key.strip(),
        user_id=config.docusign_user_id.strip(),
        private_key=normalize_private_key(config.docusign_private_key),
        account_id=config.docusign_account_id.strip(),
        base_path=config.docusign_base_path.strip().rstrip("/"),
        oauth_host=oauth_host.rstrip("/"),
    )
