from pydantic_settings import BaseSettings
import os


class ServerConfig(BaseSettings):
    HOST: str = os.getenv('HOST', '0.0.0.0')
    PORT: int = int(os.getenv('PORT', 3000))
    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')
    CORS_ORIGINS: str = os.getenv('CORS_ORIGINS', '*')
    MAX_BODY_BYTES: int = int(os.getenv('MAX_BODY_BYTES', 1024 * 1024))

    @property
    def cors_origins_list(self):
        return [o.strip() for o in self.CORS_ORIGINS.split(',') if o.strip()]

server = ServerConfig()


class DatabaseConfig(BaseSettings):
    DATABASE_URL: str = os.getenv('DATABASE_URL', 'memory://')
    POOL_MIN_SIZE: int = int(os.getenv('POOL_MIN_SIZE', 5))
    POOL_MAX_SIZE: int = int(os.getenv('POOL_MAX_SIZE', 20))
    COMMAND_TIMEOUT: float = float(os.getenv('COMMAND_TIMEOUT', 10))
    MAX_RETRIES: int = int(os.getenv('MAX_RETRIES', 3))
    RETRY_DELAY: float = float(os.getenv('RETRY_DELAY', 0.5))
    MAX_CONCURRENT_OPERATIONS: int = int(os.getenv('MAX_CONCURRENT_OPERATIONS', 50))

database = DatabaseConfig()


class RankingConfig(BaseSettings):
    DEFAULT_LIMIT: int = 20
    MAX_LIMIT: int = 50
    TOP_TIER_SIZE: int = 20
    MAX_USERNAME_LENGTH: int = 50
    MIN_LEVEL: int = 1
    MAX_LEVEL: int = 1000
    DEFAULT_AVATAR: str = os.getenv(
        'DEFAULT_AVATAR',
        'https://images.unsplash.com/photo-1494790108755-2616b612b1c5?w=150&h=150&fit=crop&crop=face'
    )

ranking = RankingConfig()
