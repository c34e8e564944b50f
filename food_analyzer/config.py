from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///food_analyzer.db"
    log_level: str = "INFO"

    # API keys (keys saved through the CLI take precedence)
    anthropic_api_key: str = ""
    serpapi_api_key: str = ""

    analysis_model: str = "claude-sonnet-4-5-20250929"

    # Anthropic API timeout settings (seconds)
    anthropic_timeout: int = 120
    anthropic_connect_timeout: int = 10

    # Output token limits per request
    identify_max_tokens: int = 500
    ingredients_max_tokens: int = 1000
    health_analysis_max_tokens: int = 1500

    # Web enrichment
    serpapi_url: str = "https://serpapi.com/search.json"
    search_result_count: int = 10
    results_per_condition: int = 3
    search_timeout: int = 20
    page_fetch_timeout: int = 15

    class Config:
        env_file = ".env"


settings = Settings()
