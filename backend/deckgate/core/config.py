from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "DeckGate API"
    env: str = "dev"
    api_prefix: str = "/v1"
    log_level: str = "INFO"

    database_dsn: str = "sqlite:///./deckgate.db"

    llm_provider: str = "openai"
    llm_api_key: str = ""
    llm_model: str = "gpt-4o-mini"
    llm_base_url: str = "https://api.openai.com/v1"
    anthropic_base_url: str = "https://api.anthropic.com"
    anthropic_auth_token: str = ""
    anthropic_version: str = "2023-06-01"
    llm_timeout_seconds: int = 60
    llm_temperature: float = 0.1

    http_timeout_seconds: int = 30
    http_user_agent: str = "DeckGate/0.1 (+deck validation)"
    figma_api_token: str = ""
    max_discovered_links: int = 5

    max_upload_mb: int = 200

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
