"""
Engine configuration.

Policy switches for the transaction state machine, read from the environment
with the PAYMENT_ENGINE_ prefix (e.g. PAYMENT_ENGINE_REJECT_LOCKED_ACCOUNTS=true).
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Payment engine configuration"""

    model_config = SettingsConfigDict(env_prefix="PAYMENT_ENGINE_", case_sensitive=False)

    # Locked accounts keep accepting actions unless this is set
    reject_locked_accounts: bool = False

    # dispute/resolve must name a tx owned by the acting client.
    # chargeback always requires the match.
    dispute_requires_matching_account: bool = True

    # Decimal places kept on incoming amounts (truncated, never rounded up)
    amount_precision: int = Field(default=4, ge=0, le=12)

    log_rejections: bool = True


_settings = None


def get_settings() -> EngineSettings:
    """Get the shared settings instance"""
    global _settings
    if _settings is None:
        _settings = EngineSettings()
    return _settings


def reload_settings() -> EngineSettings:
    """Re-read settings from the environment"""
    global _settings
    _settings = EngineSettings()
    return _settings
