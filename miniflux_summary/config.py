"""
Process-wide settings for the summary relay.

Settings are read once at startup (from the environment, after loading a .env file) into an immutable Settings object,
which is then handed to each component explicitly. Nothing else in the package reads the environment.
"""

import os
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from miniflux_summary.core.eligibility import SiteWhitelist
from miniflux_summary.core.exceptions import ConfigurationError
from miniflux_summary.core.formatting import DEFAULT_SUMMARY_HEADING

DEFAULT_SUMMARY_PROMPT = (
    "Please summarize the content of the article in no more than {max_words} words in {language}. "
    "Do not add any additional characters or markdown to the result text."
)

REQUIRED_VARS = (
    "MINIFLUX_URL",
    "MINIFLUX_WEBHOOK_SECRET",
    "OPENAI_URL",
    "OPENAI_TOKEN",
    "OPENAI_MODEL",
)

TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Miniflux
    miniflux_url: str
    miniflux_username: Optional[str] = None
    miniflux_password: Optional[str] = None
    miniflux_api_token: Optional[str] = None
    webhook_secret: str = Field(..., min_length=1)

    # Text generation (OpenAI compatible)
    openai_url: str
    openai_token: str
    openai_model: str

    whitelist: SiteWhitelist = Field(default_factory=SiteWhitelist)

    http_timeout: float = Field(30.0, gt=0)
    max_concurrency: int = Field(5, ge=1)
    max_input_chars: int = Field(6000, ge=100)
    summary_max_words: int = Field(150, ge=1)
    summary_language: str = "English"
    summary_prompt: str = DEFAULT_SUMMARY_PROMPT
    summary_heading: str = DEFAULT_SUMMARY_HEADING
    webhook_background: bool = False
    sync_limit: int = Field(100, ge=1)

    @model_validator(mode="after")
    def check_credentials_and_prompt(self) -> "Settings":
        if not self.miniflux_api_token and not (self.miniflux_username and self.miniflux_password):
            raise ValueError("Miniflux needs an API token or a username and password")
        self.render_summary_prompt()
        return self

    @property
    def uses_api_token(self) -> bool:
        return bool(self.miniflux_api_token)

    def render_summary_prompt(self) -> str:
        try:
            return self.summary_prompt.format(max_words=self.summary_max_words, language=self.summary_language)
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(
                f"SUMMARY_PROMPT may only use the {{max_words}} and {{language}} placeholders "
                f"(escape literal braces as {{{{ and }}}}): {e!r}"
            ) from e


def settings_from_env(env: Mapping[str, str]) -> Settings:
    """Build Settings from an environment mapping, reporting every missing variable at once."""
    missing = [name for name in REQUIRED_VARS if not env.get(name)]
    if not env.get("MINIFLUX_API_TOKEN") and not (env.get("MINIFLUX_USERNAME") and env.get("MINIFLUX_PASSWORD")):
        missing.append("MINIFLUX_API_TOKEN or MINIFLUX_USERNAME/MINIFLUX_PASSWORD")
    if missing:
        raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")

    values = {
        "miniflux_url": env["MINIFLUX_URL"].rstrip("/"),
        "miniflux_username": env.get("MINIFLUX_USERNAME") or None,
        "miniflux_password": env.get("MINIFLUX_PASSWORD") or None,
        "miniflux_api_token": env.get("MINIFLUX_API_TOKEN") or None,
        "webhook_secret": env["MINIFLUX_WEBHOOK_SECRET"],
        "openai_url": env["OPENAI_URL"].rstrip("/"),
        "openai_token": env["OPENAI_TOKEN"],
        "openai_model": env["OPENAI_MODEL"],
        "webhook_background": env.get("WEBHOOK_BACKGROUND", "").strip().lower() in TRUE_VALUES,
    }
    optional = {
        "HTTP_TIMEOUT": "http_timeout",
        "MAX_CONCURRENCY": "max_concurrency",
        "MAX_INPUT_CHARS": "max_input_chars",
        "SUMMARY_MAX_WORDS": "summary_max_words",
        "SUMMARY_LANGUAGE": "summary_language",
        "SUMMARY_PROMPT": "summary_prompt",
        "SUMMARY_HEADING": "summary_heading",
        "SYNC_LIMIT": "sync_limit",
    }
    for var, field in optional.items():
        if env.get(var):
            values[field] = env[var]

    try:
        values["whitelist"] = SiteWhitelist.parse(env.get("WHITELIST_URL"))
        return Settings(**values)
    except (ValidationError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def load_settings() -> Settings:
    load_dotenv()
    return settings_from_env(os.environ)
