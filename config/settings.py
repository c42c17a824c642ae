"""
Configuration settings loader with secure API key management.
Loads environment variables from .env file and provides masked logging.

Missing keys are not an error at import time; the service factory calls
`require_keys()` so that a misconfigured deployment fails at startup.
"""

import os
from pathlib import Path
from typing import Iterable, Optional
from dotenv import load_dotenv
from .api_key_manager import APIKeyManager
from . import constants

# Load environment variables from .env
project_root = Path(__file__).parent.parent
env_path = project_root / '.env'
load_dotenv(dotenv_path=env_path)


class ConfigurationError(ValueError):
    """Raised when a required provider is not configured."""


# Provider id -> environment variable holding its key(s)
PROVIDER_KEY_ENV = {
    'ALPHAVANTAGE': 'ALPHAVANTAGE_API_KEY',
    'FINNHUB': 'FINNHUB_API_KEY',
    'COINGECKO': 'COINGECKO_API_KEY',
}

# Providers without which equity lookups cannot run
REQUIRED_PROVIDERS = ('ALPHAVANTAGE', 'FINNHUB')


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


class Settings:
    """Application settings with secure API key handling."""

    def __init__(self):
        self.manager = APIKeyManager()

        for provider, env_name in PROVIDER_KEY_ENV.items():
            self.manager.register(provider, os.getenv(env_name))

        # Alpha Vantage also accepts the spelling used by most dashboards
        if not self.manager.has_key('ALPHAVANTAGE'):
            self.manager.register('ALPHAVANTAGE', os.getenv('ALPHA_VANTAGE_API_KEY'))

    # --- Keys ---

    @property
    def ALPHAVANTAGE_API_KEY(self) -> Optional[str]:
        return self.manager.get('ALPHAVANTAGE')

    @property
    def FINNHUB_API_KEY(self) -> Optional[str]:
        return self.manager.get('FINNHUB')

    @property
    def COINGECKO_API_KEY(self) -> Optional[str]:
        return self.manager.get('COINGECKO')

    def require_keys(self, providers: Iterable[str] = REQUIRED_PROVIDERS) -> None:
        """
        Fail fast if any required provider has no key.

        Raises:
            ConfigurationError: listing every missing environment variable
        """
        missing = self.manager.missing(providers)
        if missing:
            env_names = ', '.join(PROVIDER_KEY_ENV.get(p, p) for p in missing)
            raise ConfigurationError(
                f"Missing API key(s): {env_names}. "
                f"Add them to the environment or to {env_path}"
            )

    # --- Endpoints & limits (env overridable) ---

    @property
    def ALPHAVANTAGE_BASE_URL(self) -> str:
        return os.getenv('ALPHAVANTAGE_BASE_URL', constants.ALPHAVANTAGE_BASE_URL)

    @property
    def FINNHUB_BASE_URL(self) -> str:
        return os.getenv('FINNHUB_BASE_URL', constants.FINNHUB_BASE_URL)

    @property
    def COINGECKO_BASE_URL(self) -> str:
        return os.getenv('COINGECKO_BASE_URL', constants.COINGECKO_BASE_URL)

    @property
    def ALPHAVANTAGE_MIN_INTERVAL(self) -> float:
        return _env_float('ALPHAVANTAGE_MIN_INTERVAL', constants.ALPHAVANTAGE_MIN_REQUEST_INTERVAL)

    @property
    def FINNHUB_MIN_INTERVAL(self) -> float:
        return _env_float('FINNHUB_MIN_INTERVAL', constants.FINNHUB_MIN_REQUEST_INTERVAL)

    @property
    def COINGECKO_MIN_INTERVAL(self) -> float:
        return _env_float('COINGECKO_MIN_INTERVAL', constants.COINGECKO_MIN_REQUEST_INTERVAL)

    @property
    def INTELLIGENCE_DEADLINE_SECONDS(self) -> float:
        return _env_float('INTELLIGENCE_DEADLINE_SECONDS', constants.DEFAULT_INTELLIGENCE_DEADLINE_SECONDS)

    # --- Helpers ---

    @staticmethod
    def mask_api_key(api_key: str) -> str:
        """
        Mask API key for secure logging.
        Shows only first 4 and last 4 characters.

        Args:
            api_key: The API key to mask

        Returns:
            Masked API key (e.g., 'ltwM...I4ha')
        """
        if not api_key or len(api_key) < 8:
            return "****"
        return f"{api_key[:4]}...{api_key[-4:]}"


# Global settings instance (composition roots may build their own)
settings = Settings()
