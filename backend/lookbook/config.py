"""
Configuration management for the lookbook backend
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

"""Application settings and configuration"""
class Settings:

    # Database Configuration (product catalog)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./lookbook.db")

    # Runtime environment / CORS
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "production")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "")

    # Outfit generation
    OUTFIT_BATCH_SIZE: int = int(os.getenv("OUTFIT_BATCH_SIZE", "9"))
    CANDIDATE_POOL_SIZE: int = int(os.getenv("CANDIDATE_POOL_SIZE", "15"))
    MIN_CATEGORY_INVENTORY: int = int(os.getenv("MIN_CATEGORY_INVENTORY", "9"))
    FEEDBACK_HISTORY_LIMIT: int = int(os.getenv("FEEDBACK_HISTORY_LIMIT", "10"))

    # Budget envelope used when the profile doesn't carry one
    DEFAULT_PRICE_MIN: float = float(os.getenv("DEFAULT_PRICE_MIN", "50"))
    DEFAULT_PRICE_MAX: float = float(os.getenv("DEFAULT_PRICE_MAX", "200"))
    UNLIMITED_PRICE_CAP: float = float(os.getenv("UNLIMITED_PRICE_CAP", "99999"))

    # Generative completion service
    LLM_PROVIDER: str = os.getenv("LLM_PROVIDER", "openai").lower()
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o")
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.8"))
    LLM_MAX_TOKENS: int = int(os.getenv("LLM_MAX_TOKENS", "4000"))
    LLM_TIMEOUT: float = float(os.getenv("LLM_TIMEOUT", "90"))

    # Completion cache (owned by the app, passed into the pipeline)
    COMPLETION_CACHE_SIZE: int = int(os.getenv("COMPLETION_CACHE_SIZE", "64"))
    COMPLETION_CACHE_TTL: int = int(os.getenv("COMPLETION_CACHE_TTL", "300"))

    @property
    def is_dev(self) -> bool:
        return self.ENVIRONMENT.lower() in ("development", "dev", "local")

    """Check if the selected completion provider has credentials"""
    @property
    def llm_configured(self) -> bool:
        if self.LLM_PROVIDER == "gemini":
            return bool(self.GEMINI_API_KEY)
        return bool(self.OPENAI_API_KEY)

settings = Settings()
