"""Configuration management for NocoDB MCP Server.

Loads settings from environment variables or .env file.
All sensitive values come from env vars, never hardcoded.
"""

from dataclasses import dataclass

from pydantic_settings import BaseSettings


@dataclass
class ConnectionConfig:
    """Connection config for one NocoDB instance.

    Passed explicitly into NocoDBClient so no tool depends on process-wide
    settings.
    """

    base_url: str
    api_token: str = ""
    auth_token: str = ""
    default_base: str = ""
    verify_ssl: bool = True
    timeout: int = 60

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_token or self.auth_token)


class Settings(BaseSettings):
    """NocoDB MCP Server settings.

    Values are loaded from environment variables.
    When running via Claude Desktop/Code, env vars are set in the MCP config JSON.
    For local development, use a .env file.
    """

    # NocoDB connection
    nocodb_base_url: str = "http://localhost:8080"
    nocodb_api_token: str = ""
    nocodb_auth_token: str = ""
    nocodb_default_base: str = ""

    # HTTP configuration
    nocodb_verify_ssl: bool = True
    nocodb_timeout: int = 60

    # Logging
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def has_credentials(self) -> bool:
        """True when an API token (xc-token) or session token (xc-auth) is set."""
        return bool(self.nocodb_api_token or self.nocodb_auth_token)

    def connection(self) -> ConnectionConfig:
        """Build the ConnectionConfig handed to NocoDBClient."""
        return ConnectionConfig(
            base_url=self.nocodb_base_url.rstrip("/"),
            api_token=self.nocodb_api_token,
            auth_token=self.nocodb_auth_token,
            default_base=self.nocodb_default_base,
            verify_ssl=self.nocodb_verify_ssl,
            timeout=self.nocodb_timeout,
        )


# Singleton settings instance
settings = Settings()
