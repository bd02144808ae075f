import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent


def _load_env_files() -> None:
    # Same lookup order as the Django settings: repo root first, then backend/.
    root_env = BASE_DIR.parent / ".env"
    local_env = BASE_DIR / ".env"
    if root_env.exists():
        load_dotenv(root_env)
    elif local_env.exists():
        load_dotenv(local_env)


@dataclass(frozen=True)
class StorefrontConfig:
    api_url: str = "http://localhost:8000"
    timeout: float = 10.0
    checkout_cleanup_delay: float = 5.0
    storage_path: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StorefrontConfig":
        """Build the client configuration from ``STOREFRONT_*`` variables."""
        if environ is None:
            _load_env_files()
            environ = os.environ
        return cls(
            api_url=environ.get("STOREFRONT_API_URL", cls.api_url).rstrip("/"),
            timeout=float(environ.get("STOREFRONT_TIMEOUT", cls.timeout)),
            checkout_cleanup_delay=float(
                environ.get("STOREFRONT_CHECKOUT_CLEANUP_DELAY", cls.checkout_cleanup_delay)
            ),
            storage_path=environ.get("STOREFRONT_STORAGE_PATH") or None,
        )
