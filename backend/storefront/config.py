from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite+aiosqlite:///./storefront.db"
    REDIS_URL: str = "redis://localhost:6379/0"

    # Bearer tokens are issued by the external auth provider (Supabase JWT secret)
    JWT_SECRET: str = "dev-secret-change-me-dev-secret-change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"
    ADMIN_ROLE: str = "admin"

    CORS_ORIGINS: List[str] = ["*"]

    # monero-wallet-rpc
    MONERO_RPC_URL: str = ""
    MONERO_RPC_USERNAME: str = ""
    MONERO_RPC_PASSWORD: str = ""
    MONERO_RPC_TIMEOUT: float = 30.0
    MONERO_RPC_WALLET_FILE: str = ""  # shared platform wallet; empty = one wallet per user
    MONERO_RPC_WALLET_PASSWORD: str = ""
    MONERO_ADDRESS_MODE: str = "rpc"  # "rpc" or "simulated"
    MONERO_TRANSFER_PRIORITY: int = 0
    MONERO_RING_SIZE: int = 16

    # Fernet key for user_addresses.private_key_encrypted
    WALLET_ENCRYPTION_KEY: str = ""

    COINGECKO_BASE_URL: str = "https://api.coingecko.com/api/v3"
    PRICE_CACHE_SECONDS: int = 60

    @field_validator('DATABASE_URL', mode='before')
    @classmethod
    def convert_database_url(cls, v):
        """Convert postgresql:// to postgresql+asyncpg:// for async support"""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator('MONERO_ADDRESS_MODE')
    @classmethod
    def validate_address_mode(cls, v):
        if v not in ("rpc", "simulated"):
            raise ValueError("MONERO_ADDRESS_MODE must be 'rpc' or 'simulated'")
        return v

    @property
    def monero_rpc_enabled(self) -> bool:
        return bool(self.MONERO_RPC_URL)

settings = Settings()
