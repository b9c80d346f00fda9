"""Application settings management using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Dict
from dotenv import load_dotenv

from . import connection
from .connection import Credentials

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from OCTANE_* environment variables."""

    # Octane Configuration
    url: str = ''
    shared_space_id: str = ''
    workspace_id: str = ''
    username: str = ''
    password: str = ''

    # Proxy Configuration (picked by the scheme of the Octane URL)
    http_proxy_host: Optional[str] = None
    http_proxy_port: Optional[str] = None
    http_proxy_username: Optional[str] = None
    http_proxy_password: Optional[str] = None
    https_proxy_host: Optional[str] = None
    https_proxy_port: Optional[str] = None
    https_proxy_username: Optional[str] = None
    https_proxy_password: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="OCTANE_",
        extra="ignore"
    )

    def to_config_map(self) -> Dict[str, str]:
        """Render the settings as a host configuration map.

        Unset values are left out so the connection factories see them as
        missing.
        """
        values = {
            connection.URL: self.url,
            connection.SHARED_SPACE_ID: self.shared_space_id,
            connection.WORKSPACE_ID: self.workspace_id,
            connection.HTTP_PROXY_HOST: self.http_proxy_host,
            connection.HTTP_PROXY_PORT: self.http_proxy_port,
            connection.HTTP_PROXY_USERNAME: self.http_proxy_username,
            connection.HTTP_PROXY_PASSWORD: self.http_proxy_password,
            connection.HTTPS_PROXY_HOST: self.https_proxy_host,
            connection.HTTPS_PROXY_PORT: self.https_proxy_port,
            connection.HTTPS_PROXY_USERNAME: self.https_proxy_username,
            connection.HTTPS_PROXY_PASSWORD: self.https_proxy_password,
        }
        return {key: value for key, value in values.items() if value}

    def credentials(self) -> Credentials:
        """Get the Octane credentials from settings."""
        return Credentials(username=self.username, password=self.password)


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()
