from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    reddit_url: str = "https://www.reddit.com"
    reddit_api_url: str = "https://www.reddit.com"
    reddit_oauth_url: str = "https://oauth.reddit.com"
    reddit_token_url: str = "https://www.reddit.com/api/v1/access_token"
    reddit_username: str = ""
    reddit_password: str = ""
    oauth_client_id: str = ""
    oauth_client_secret: str = ""
    user_agent: str = "reddit-rss 1.0"
    home_redirect_url: str = "https://github.com/trashhalo/reddit-rss/blob/main/README.md"
    batch_capacity: int = 10
    fetch_timeout: float = 15.0
    enrichment_timeout: float = 60.0
    readability_fallback: bool = False
    cache_max_age: int = 1800
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080

    model_config = {"env_file": ".env"}


settings = Settings()


def get_settings() -> Settings:
    return settings
