"""Application configuration via Pydantic BaseSettings."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from src.studio.errors import ConfigurationError

# Value shipped in the sample .env; treated as "not configured".
SAMPLE_API_KEY = "SUA_CHAVE_API_AQUI"

DEFAULT_HEADER_TEMPLATE = (
    "# ATA <num_ata> DE REUNIÃO DO COMITÊ EXECUTIVO\n\n"
    "Às 10:30h do dia <dia_reunião> de <mês_reunião_por_extenso> de <ano_reunião> "
    "reuniram-se remotamente os representantes dos Partícipes da Rede Blockchain "
    "Brasil – RBB, conforme lista de presença ao final, para tratar dos assuntos "
    "constantes da Ordem do Dia abaixo, com apresentação de apoio para a reunião "
    "contida no Anexo 1.\n\n"
    "## Ordem do Dia\n"
    "Observadas as cláusulas do Acordo de Cooperação n° D-121.2.0014.22, celebrado "
    "entre os Partícipes para a criação e manutenção da RBB, e sem prejuízo do que "
    "vier a dispor o Regulamento da RBB:"
)


class Environment(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Environment
    ENVIRONMENT: Environment = Environment.development

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ALLOWED_ORIGINS: str = "*"

    # Generation (LiteLLM model identifiers per tier)
    GEMINI_API_KEY: str = ""
    CAPABLE_MODEL: str = "gemini/gemini-2.5-pro"
    FAST_MODEL: str = "gemini/gemini-2.0-flash"
    LLM_TIMEOUT: int = 600  # video-grounded calls are slow
    LLM_MAX_RETRIES: int = 1

    # Minutes workflow
    DEFAULT_VIDEO_URL: str = ""
    VIDEO_FPS: float = 0.25
    HEADER_TEMPLATE: str = DEFAULT_HEADER_TEMPLATE
    OUTPUT_DIR: str = "result"
    ARCHIVE_DIRNAME: str = "ant"

    # Monitoring
    SENTRY_DSN: str = ""

    # Langfuse (LLM observability)
    LANGFUSE_PUBLIC_KEY: str = ""
    LANGFUSE_SECRET_KEY: str = ""
    LANGFUSE_HOST: str = "https://cloud.langfuse.com"

    def require_generation_config(self) -> None:
        """Fail fast when the settings cannot drive a generation round.

        Raises:
            ConfigurationError: If the API key is missing or still the sample
                value, or the header template is empty.
        """
        if not self.GEMINI_API_KEY or self.GEMINI_API_KEY == SAMPLE_API_KEY:
            raise ConfigurationError("GEMINI_API_KEY is not configured (set it in .env)")
        if not self.HEADER_TEMPLATE.strip():
            raise ConfigurationError("HEADER_TEMPLATE must not be empty")


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()
