"""AI Compare configuration — loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {
        "env_prefix": "AICOMPARE_",
        "env_file": ".env",
        "extra": "ignore",
        "populate_by_name": True,
    }

    # Provider credentials keep their conventional names (no prefix)
    openai_api_key: str = Field(default="", validation_alias="OPENAI_API_KEY")
    anthropic_api_key: str = Field(default="", validation_alias="ANTHROPIC_API_KEY")
    google_api_key: str = Field(default="", validation_alias="GOOGLE_API_KEY")
    xai_api_key: str = Field(default="", validation_alias="XAI_API_KEY")
    perplexity_api_key: str = Field(default="", validation_alias="PERPLEXITY_API_KEY")

    # Outbound calls
    request_timeout: float = 120.0
    summary_provider: str = "claude"

    # Server
    cors_origins: list[str] = ["http://localhost:5173"]
    host: str = "0.0.0.0"
    port: int = 8000

    def credential(self, name: str) -> str:
        """Return the credential stored under an environment variable name."""
        return getattr(self, name.lower(), "") or ""

    def credentials(self) -> dict[str, str]:
        names = (
            "OPENAI_API_KEY",
            "ANTHROPIC_API_KEY",
            "GOOGLE_API_KEY",
            "XAI_API_KEY",
            "PERPLEXITY_API_KEY",
        )
        return {name: self.credential(name) for name in names}


settings = Settings()
