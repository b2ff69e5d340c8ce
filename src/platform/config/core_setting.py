from pathlib import Path
from typing import Annotated, List

import orjson
from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Ticket Issuance & Redemption'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # Security
    SECRET_KEY: SecretStr = SecretStr('test_secret_key_change_in_production')
    ALGORITHM: str = 'HS256'
    AUTH_COOKIE_NAME: str = 'ticket_core_auth'
    QR_SECRET: SecretStr = SecretStr('default_secret_change_in_production')

    # CORS (comma separated or a JSON list)
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and v.strip().startswith('['):
            return [str(i).strip() for i in orjson.loads(v)]
        if isinstance(v, str):
            return [i.strip() for i in v.split(',') if i.strip()]
        elif isinstance(v, list):
            return v
        return []

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'ticket_core'

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:'
            f'{self.POSTGRES_PASSWORD.get_secret_value()}@'
            f'{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    # asyncpg pool (all store access goes through it)
    ASYNCPG_POOL_MIN_SIZE: int = 5
    ASYNCPG_POOL_MAX_SIZE: int = 20
    ASYNCPG_POOL_COMMAND_TIMEOUT: float = 5.0  # Per-statement timeout (seconds)
    ASYNCPG_POOL_TIMEOUT: float = 5.0  # Connection acquire timeout (seconds)
    ASYNCPG_POOL_MAX_INACTIVE_LIFETIME: float = 300.0
    ASYNCPG_POOL_MAX_QUERIES: int = 50000

    # Kvrocks Configuration (Redis protocol + Kvrocks storage)
    KVROCKS_HOST: str = 'localhost'
    KVROCKS_PORT: int = 6666
    KVROCKS_DB: int = 0
    KVROCKS_PASSWORD: str = ''
    KVROCKS_KEY_PREFIX: str = ''
    REDIS_DECODE_RESPONSES: bool = True

    # Kvrocks Connection Pool Configuration
    KVROCKS_POOL_MAX_CONNECTIONS: int = 50
    KVROCKS_POOL_SOCKET_TIMEOUT: int = 2  # Socket read/write timeout (seconds)
    KVROCKS_POOL_SOCKET_CONNECT_TIMEOUT: int = 2  # Connection timeout (seconds)
    KVROCKS_POOL_SOCKET_KEEPALIVE: bool = True
    KVROCKS_POOL_HEALTH_CHECK_INTERVAL: int = 30

    # Stripe
    STRIPE_SECRET_KEY: SecretStr = SecretStr('sk_test_change_me')
    STRIPE_MAX_NETWORK_RETRIES: int = 2
    PAYMENT_GATEWAY_TIMEOUT_SECONDS: float = 10.0
    PAYMENT_CURRENCY: str = 'gbp'

    # Transient failure retry (store + gateway)
    TRANSIENT_RETRY_MAX_ATTEMPTS: int = 3
    TRANSIENT_RETRY_BASE_DELAY: float = 0.05  # seconds
    TRANSIENT_RETRY_MAX_DELAY: float = 1.0  # seconds

    # Rate limits: token bucket capacity per window
    RATE_LIMIT_TICKET_SCAN_CAPACITY: int = 30
    RATE_LIMIT_TICKET_SCAN_WINDOW_SECONDS: int = 60
    RATE_LIMIT_PAYMENT_CAPACITY: int = 5
    RATE_LIMIT_PAYMENT_WINDOW_SECONDS: int = 60

    # Scan history
    SCAN_HISTORY_DEFAULT_LIMIT: int = 50
    SCAN_HISTORY_MAX_LIMIT: int = 200


settings = Settings()  # type: ignore
