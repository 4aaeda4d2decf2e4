from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )
    
    # Database
    database_url: str = "sqlite+aiosqlite:///./jobboard.db"
    
    # Document store
    app_id: str = "axtargetbotwebsite"
    snapshot_refresh_seconds: float = 0  # 0 disables the background refresher
    
    # Anonymous sessions
    session_cookie_name: str = "auth_token"
    session_cookie_max_age_days: int = 30
    session_cookie_secure: bool = False
    
    # Contact handoff
    phone_country_code: str = "+994"
    
    # App
    debug: bool = False
    allowed_origins: str = ""
    
    def collection_path(self) -> str:
        """Path of the listings collection for this app id."""
        return f"artifacts/{self.app_id}/public/data/job_ads"


settings = Settings()
