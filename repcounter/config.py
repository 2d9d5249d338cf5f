"""Application configuration."""

from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Rep Counter"
    debug: bool = False
    api_prefix: str = "/api"
    cors_origins: List[str] = []  # Browser origins allowed to call the API

    # Session registry
    max_sessions: int = 100  # Least recently used session is evicted past this
    session_idle_timeout_s: float = 1800.0  # Sessions untouched this long are evicted

    # Landmark smoothing
    landmark_buffer_size: int = 20
    landmark_weighting: str = "exponential"  # "exponential" or "linear"
    landmark_weight_base: float = 1.5  # Only used for exponential weighting

    # Angle smoothing
    angle_buffer_size: int = 5
    max_angle_change_degrees: float = 15.0  # Larger jumps are treated as outliers
    max_outlier_frames: Optional[int] = 3  # Jumps lasting longer are real motion (None = always reject)

    # Visibility
    min_landmark_confidence: float = 0.65

    # Rep detection
    rep_cooldown_ms: float = 1500.0
    phase_log_size: int = 5
    reset_count_on_switch: bool = False  # Zero the counter when the exercise changes

    # Vital signs (pause thresholds)
    min_heart_rate: int = 60
    max_heart_rate: int = 100
    min_spo2: int = 95
    min_breathing_rate: int = 8
    max_breathing_rate: int = 30

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
