from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_title: str = "novelgloss"
    data_dir: Path = Path(__file__).resolve().parent.parent / "data"
    db_path: Path = Path(__file__).resolve().parent.parent / "data" / "novelgloss.db"

    llm_provider: str = "gemini"  # "gemini", "openai", "deepseek", or "ollama"
    llm_api_key: str = ""
    llm_base_url: str = ""  # Only needed for OpenAI-compatible providers
    llm_model: str = "gemini-2.0-flash"
    llm_max_tokens: int = 8192
    llm_temperature: float = 0.3

    # Key under which a user-supplied API key is cached in the kv store
    credential_key: str = "api_key"

    # Chapter sessions kept in memory for curation; oldest are evicted first
    max_sessions: int = 100

    source_language: str = "Chinese"
    target_language: str = "English"

    class Config:
        env_file = ".env"
        env_prefix = "NG_"


settings = Settings()
settings.data_dir.mkdir(parents=True, exist_ok=True)
