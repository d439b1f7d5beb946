from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App settings
    app_name: str = "ESPN NFL Scrape"
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./espn_scrape.db"

    # ESPN endpoints (public, no auth)
    espn_core_api_url: str = "https://sports.core.api.espn.com/v2/sports/football/leagues/nfl"
    espn_site_api_url: str = "https://site.api.espn.com/apis/site/v2/sports/football/nfl"

    # HTTP
    http_timeout_espn: float = 30.0
    http_user_agent: str = "espn-scrape/0.1"

    # Pacing (seconds between calls)
    espn_item_interval: float = 0.1
    espn_page_interval: float = 0.1
    store_write_interval: float = 0.05
    week_interval: float = 0.5
    team_interval: float = 1.0
    roster_player_interval: float = 0.1
    headshot_interval: float = 0.2

    # Headshots / blob storage
    headshot_refresh_days: int = 7
    storage_bucket: str = "images"
    storage_root: str = "./storage"
    storage_public_base_url: str = "http://localhost:8000/storage"

    # Scheduler (crontab expressions)
    scheduler_enabled: bool = True
    scheduler_timezone: str = "America/New_York"
    stats_cron: str = "0 6 * * 2"         # Tuesday morning after MNF
    schedule_cron: str = "0 5 * * *"      # Daily
    player_sync_cron: str = "0 4 * * 3"   # Wednesday
    headshot_cron: str = "0 3 * * 0"      # Sunday

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_retention_days: int = 14

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
