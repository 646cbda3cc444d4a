"""Configuration models for Google Drive OAuth credentials.

Credentials are read once from the environment at startup and passed
explicitly to whatever builds the Drive client.
"""

import os
from collections.abc import Mapping

from pydantic import BaseModel, Field, SecretStr

CLIENT_ID_ENV = "GOOGLE_CLIENT_ID"
CLIENT_SECRET_ENV = "GOOGLE_CLIENT_SECRET"  # nosec B105 - env var name, not a secret
REFRESH_TOKEN_ENV = "GOOGLE_REFRESH_TOKEN"  # nosec B105 - env var name, not a secret

CREDENTIAL_ENV_VARS = (CLIENT_ID_ENV, CLIENT_SECRET_ENV, REFRESH_TOKEN_ENV)


class DriveCredentials(BaseModel):
    """OAuth client and refresh token used to reach the Drive API.

    Immutable once built. Secret values are wrapped in SecretStr so they
    never appear in reprs or log lines.

    Attributes:
        client_id: OAuth client ID.
        client_secret: OAuth client secret.
        refresh_token: Long-lived refresh token obtained via ``gdrive-mcp setup``.
    """

    client_id: str = Field(default="", description="OAuth client ID")
    client_secret: SecretStr = Field(default=SecretStr(""), description="OAuth client secret")
    refresh_token: SecretStr = Field(default=SecretStr(""), description="OAuth refresh token")

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "DriveCredentials":
        """Build credentials from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            DriveCredentials, possibly incomplete.
        """
        env = os.environ if environ is None else environ
        return cls(
            client_id=env.get(CLIENT_ID_ENV, "").strip(),
            client_secret=SecretStr(env.get(CLIENT_SECRET_ENV, "").strip()),
            refresh_token=SecretStr(env.get(REFRESH_TOKEN_ENV, "").strip()),
        )

    @property
    def is_complete(self) -> bool:
        """True when client id, client secret and refresh token are all set."""
        return bool(
            self.client_id
            and self.client_secret.get_secret_value()
            and self.refresh_token.get_secret_value()
        )

    def missing_fields(self) -> list[str]:
        """Names of the environment variables whose values are empty."""
        values = {
            CLIENT_ID_ENV: self.client_id,
            CLIENT_SECRET_ENV: self.client_secret.get_secret_value(),
            REFRESH_TOKEN_ENV: self.refresh_token.get_secret_value(),
        }
        return [name for name, value in values.items() if not value]
