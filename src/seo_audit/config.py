from dotenv import load_dotenv
from dataclasses import dataclass, field
from typing import List, Optional
from pathlib import Path
import json
import os

from seo_audit.constants import (
    DEFAULT_ATTEMPT_TIMEOUT_SECONDS,
    MIN_PAYLOAD_LENGTH,
)
from seo_audit.fetcher import Relay, DEFAULT_RELAYS

load_dotenv()  # Loads variables from .env file


class Settings:
    """
    Manages application settings loaded from environment variables.
    """
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///seo_audit.db")  # Default to SQLite
    DB_BACKEND = os.getenv("DB_BACKEND", "local")

    # Every site record belongs to one organization
    ORGANIZATION_ID = os.getenv("ORGANIZATION_ID", "default")

    # Recipient of sprint request notifications
    NOTIFY_EMAIL = os.getenv("NOTIFY_EMAIL", "info@example.com")

    # Report branding
    COMPANY_NAME = os.getenv("COMPANY_NAME", "Ourgorithm")
    PRIMARY_COLOR = os.getenv("PRIMARY_COLOR", "#2d3748")
    LOGO_URL = os.getenv("LOGO_URL", "")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()


def _relays_from_json(entries: list) -> List[Relay]:
    return [Relay(name=e["name"], url_template=e["url_template"]) for e in entries]


@dataclass
class AuditConfig:
    """Configuration for the retrieval pipeline."""
    relays: List[Relay] = field(default_factory=lambda: list(DEFAULT_RELAYS))
    timeout: float = DEFAULT_ATTEMPT_TIMEOUT_SECONDS
    min_payload_length: int = MIN_PAYLOAD_LENGTH
    accept_header: str = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
    user_agent: Optional[str] = None

    @classmethod
    def from_env(cls) -> "AuditConfig":
        """Load configuration from environment variables.

        SEO_AUDIT_RELAYS holds a JSON list of {"name", "url_template"}
        objects replacing the default relay chain.

        Returns:
            AuditConfig: Configuration instance with values from environment
        """
        config = cls(
            timeout=float(os.getenv("SEO_AUDIT_TIMEOUT", str(DEFAULT_ATTEMPT_TIMEOUT_SECONDS))),
            min_payload_length=int(os.getenv("SEO_AUDIT_MIN_PAYLOAD", str(MIN_PAYLOAD_LENGTH))),
            user_agent=os.getenv("SEO_AUDIT_USER_AGENT"),
        )

        relays_json = os.getenv("SEO_AUDIT_RELAYS")
        if relays_json:
            config.relays = _relays_from_json(json.loads(relays_json))

        return config

    @classmethod
    def from_file(cls, path: str) -> "AuditConfig":
        """Load configuration from a JSON file.

        Args:
            path: Path to JSON configuration file

        Returns:
            AuditConfig with values from file (defaults if the file is missing)
        """
        config = cls()
        file_path = Path(path)

        if not file_path.exists():
            return config

        with open(file_path, 'r') as f:
            data = json.load(f)

        if 'relays' in data:
            config.relays = _relays_from_json(data['relays'])
        for name in ('timeout', 'min_payload_length', 'accept_header', 'user_agent'):
            if name in data:
                setattr(config, name, data[name])

        return config

    def to_dict(self) -> dict:
        """Convert configuration to a JSON-serializable dictionary."""
        return {
            'relays': [
                {'name': r.name, 'url_template': r.url_template} for r in self.relays
            ],
            'timeout': self.timeout,
            'min_payload_length': self.min_payload_length,
            'accept_header': self.accept_header,
            'user_agent': self.user_agent,
        }

    def save_to_file(self, path: str) -> None:
        """Save the configuration to a JSON file.

        Args:
            path: Path to save configuration
        """
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
