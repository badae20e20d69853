"""
DocPilot Configuration

Environment-variable settings, read once at startup into an immutable
Settings value.

Variables:
    DP_TEMPLATES_DIR   Extra directory of template packs (overrides built-ins by type)
    DP_STORE_DIR       Directory for the file document store (in-memory when unset)
    DP_LOG_LEVEL       Logging level for the "docpilot" logger (default INFO)
    DP_APP_NAME        Default app name for generated documents
    DP_COMPANY_NAME    Default company name
    DP_CONTACT_EMAIL   Default contact email
    DP_DOCS_ENABLED    Serve OpenAPI docs from the host service (default true)
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional


DEFAULT_APP_NAME = "Cal AI"
DEFAULT_COMPANY_NAME = "Cal AI Inc."
DEFAULT_CONTACT_EMAIL = "privacy@calai.app"


@dataclass(frozen=True)
class Settings:
    templates_dir: Optional[Path] = None
    store_dir: Optional[Path] = None
    log_level: str = "INFO"
    app_name: str = DEFAULT_APP_NAME
    company_name: str = DEFAULT_COMPANY_NAME
    contact_email: str = DEFAULT_CONTACT_EMAIL
    docs_enabled: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        """Build settings from environment variables (os.environ by default)."""
        env = os.environ if environ is None else environ
        templates_dir = env.get("DP_TEMPLATES_DIR")
        store_dir = env.get("DP_STORE_DIR")
        return cls(
            templates_dir=Path(templates_dir) if templates_dir else None,
            store_dir=Path(store_dir) if store_dir else None,
            log_level=env.get("DP_LOG_LEVEL", "INFO").upper(),
            app_name=env.get("DP_APP_NAME", DEFAULT_APP_NAME),
            company_name=env.get("DP_COMPANY_NAME", DEFAULT_COMPANY_NAME),
            contact_email=env.get("DP_CONTACT_EMAIL", DEFAULT_CONTACT_EMAIL),
            docs_enabled=env.get("DP_DOCS_ENABLED", "true").lower() == "true",
        )

    def identity_defaults(self) -> dict[str, str]:
        """Host identity in the shape the schema builder expects."""
        return {
            "app_name": self.app_name,
            "company_name": self.company_name,
            "contact_email": self.contact_email,
        }
