"""Configuration read from environment variables."""

import os
import secrets
from dataclasses import dataclass, field


def _env_flag(name: str, default: bool = False) -> bool:
    """Only the string "true" (any case) switches a flag on."""
    return os.getenv(name, str(default)).strip().lower() == "true"


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _parse_cors_origins() -> list[str]:
    """CORS_ORIGINS is a comma-separated list; blanks are skipped."""
    origins = os.getenv("CORS_ORIGINS", "http://localhost:8000")
    return [o.strip() for o in origins.split(",") if o.strip()]


@dataclass(frozen=True)
class GameConfig:
    """Computer opponent pacing, in seconds."""

    computer_draw_delay: float = field(default_factory=lambda: _env_float("COMPUTER_DRAW_DELAY", 0.75))
    computer_play_delay: float = field(default_factory=lambda: _env_float("COMPUTER_PLAY_DELAY", 1.5))

    def __post_init__(self) -> None:
        if self.computer_draw_delay < 0 or self.computer_play_delay < 0:
            raise ValueError("Computer delays must not be negative")


@dataclass(frozen=True)
class CORSConfig:
    allowed_origins: list[str] = field(default_factory=_parse_cors_origins)
    allow_credentials: bool = True
    allow_methods: list[str] = field(default_factory=lambda: ["GET", "POST", "DELETE"])
    allow_headers: list[str] = field(default_factory=lambda: ["Content-Type", "X-Session-ID"])


@dataclass(frozen=True)
class RateLimitConfig:
    enabled: bool = field(default_factory=lambda: _env_flag("RATE_LIMIT_ENABLED", True))
    requests_per_minute: int = field(default_factory=lambda: _env_int("RATE_LIMIT_RPM", 120))


@dataclass(frozen=True)
class SecurityConfig:
    """Signing key for session tokens. A random key means tokens die with the process."""

    secret_key: str = field(
        default_factory=lambda: os.getenv("SECRET_KEY") or secrets.token_urlsafe(32)
    )


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    debug: bool = field(default_factory=lambda: _env_flag("DEBUG"))
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("PORT", 8000))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    session_ttl: int = field(default_factory=lambda: _env_int("SESSION_TTL", 3600))

    game: GameConfig = field(default_factory=GameConfig)
    cors: CORSConfig = field(default_factory=CORSConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)


config = AppConfig()
