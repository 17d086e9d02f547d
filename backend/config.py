"""
Runtime configuration.

Values come from environment variables, optionally loaded from backend/.env.
OPENAI_API_KEY is read by LangChain directly and isn't repeated here.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

BACKEND_DIR = Path(__file__).parent


@dataclass(frozen=True)
class Settings:
    """Application settings."""
    data_dir: Path
    export_dir: Path
    openai_model: str
    llm_max_tokens: int
    llm_temperature: float
    log_level: str

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            data_dir=Path(os.getenv("KNOWLEDGE_DATA_DIR", str(BACKEND_DIR / "data"))),
            export_dir=Path(os.getenv("EXPORT_DIR", "exports")),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            llm_max_tokens=int(os.getenv("LLM_MAX_TOKENS", "2048")),
            llm_temperature=float(os.getenv("LLM_TEMPERATURE", "0.7")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load .env once and return the settings for this process."""
    load_dotenv(dotenv_path=BACKEND_DIR / ".env")
    return Settings.from_env()
