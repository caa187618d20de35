"""Configuration for commitpost.

Settings are resolved once per invocation from the process environment
(optionally seeded from a .env file) layered over the repository's
.commitpost/config.yaml and the defaults below.
"""

from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from commitpost.errors import ConfigError


class Backend(Enum):
    """Supported social networks."""

    BLUESKY = "bluesky"
    TWITTER = "twitter"


class TriggerGate(Enum):
    """Which commit message signals are required before posting."""

    KEYWORD_AND_VERSION = "keyword_and_version"
    VERSION = "version"
    KEYWORD_OR_VERSION = "keyword_or_version"
    KEYWORD = "keyword"


class LLMProvider(Enum):
    """Supported summarization providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"


# ============================================================
# DEFAULT VALUES
# ============================================================

DEFAULT_BACKEND = Backend.BLUESKY
DEFAULT_GATE = TriggerGate.KEYWORD_OR_VERSION
DEFAULT_BLUESKY_SERVICE = "https://bsky.social"
DEFAULT_TWITTER_ENDPOINT = "https://api.twitter.com/1.1/statuses/update.json"
DEFAULT_GITHUB_API = "https://api.github.com"
DEFAULT_DEDUPE_DB_URL = "sqlite:///commitpost.db"
DEFAULT_PROVIDER = LLMProvider.OPENAI
DEFAULT_MAX_TOKENS = 100
DEFAULT_TEMPERATURE = 0.3

HTTP_TIMEOUT_SECONDS = 10.0
LLM_TIMEOUT_SECONDS = 20.0

CHARACTER_LIMITS = {
    Backend.BLUESKY: 300,
    Backend.TWITTER: 280,
}

DEFAULT_MODELS = {
    LLMProvider.OPENAI: "gpt-4o-mini",
    LLMProvider.ANTHROPIC: "claude-3-5-haiku-latest",
}

API_KEY_ENV_VARS = {
    LLMProvider.OPENAI: "OPENAI_API_KEY",
    LLMProvider.ANTHROPIC: "ANTHROPIC_API_KEY",
}

# ============================================================
# ENVIRONMENT VARIABLE NAMES (first non-empty wins)
# ============================================================

ENV_ALIASES = {
    "backend": ["COMMITPOST_BACKEND"],
    "bluesky_identifier": ["BSKY_HANDLE", "BSKY_IDENTIFIER", "BLUESKY_HANDLE", "BLUESKY_IDENTIFIER"],
    "bluesky_password": ["BSKY_APP_PASSWORD", "BLUESKY_APP_PASSWORD"],
    "bluesky_service": ["BLUESKY_SERVICE"],
    "twitter_api_key": ["X_API_KEY"],
    "twitter_api_secret": ["X_API_SECRET"],
    "twitter_access_token": ["X_ACCESS_TOKEN"],
    "twitter_access_token_secret": ["X_ACCESS_TOKEN_SECRET"],
    "twitter_endpoint": ["X_STATUS_ENDPOINT"],
    "dry_run": ["BLUESKY_DRYRUN", "COMMITPOST_DRYRUN"],
    "force": ["BLUESKY_FORCE", "COMMITPOST_FORCE"],
    "ai_summary": ["AI_SUMMARY"],
    "ai_provider": ["AI_PROVIDER"],
    "ai_model": ["AI_MODEL"],
    "webhook_secret": ["GITHUB_WEBHOOK_SECRET"],
    "branch_only": ["BRANCH_ONLY"],
    "repo_allowlist": ["REPO_ALLOWLIST"],
    "gate": ["TRIGGER_GATE"],
    "enrichment": ["REPO_ENRICHMENT"],
    "github_token": ["GITHUB_TOKEN"],
    "dedupe_db_url": ["DEDUPE_DB_URL"],
}

# Keys that may come from .commitpost/config.yaml. Secrets are env-only.
FILE_CONFIG_KEYS = {
    "backend",
    "bluesky_service",
    "dry_run",
    "ai_summary",
    "ai_provider",
    "ai_model",
    "branch_only",
    "repo_allowlist",
    "gate",
    "enrichment",
    "dedupe_db_url",
}


def first_env(env: Mapping[str, str], keys: list[str], fallback: str = "") -> str:
    """Return the first non-empty value among ``keys``.

    Args:
        env: Environment mapping (usually os.environ).
        keys: Candidate variable names, in priority order.
        fallback: Value returned when none are set.
    """
    for key in keys:
        value = env.get(key)
        if value:
            return value
    return fallback


def parse_toggle(value: Any, default: bool = False) -> bool:
    """Interpret on/off style values from env or YAML."""
    if isinstance(value, bool):
        return value
    if value is None or value == "":
        return default
    return str(value).strip().lower() in ("on", "1", "true", "yes")


def parse_allowlist(value: Any) -> tuple[str, ...]:
    """Split a comma-separated allowlist (or a YAML list) into patterns.

    Raises:
        ConfigError: If the value is neither a string nor a list.
    """
    if not value:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(item) for item in value]
    else:
        raise ConfigError(f"Invalid repo allowlist: {value!r}. Expected a list or comma-separated string")
    return tuple(item.strip() for item in items if item and item.strip())


class Settings(BaseModel):
    """Immutable snapshot of all recognized options."""

    model_config = ConfigDict(frozen=True)

    backend: Backend = DEFAULT_BACKEND
    gate: TriggerGate = DEFAULT_GATE

    bluesky_identifier: str = ""
    bluesky_password: str = ""
    bluesky_service: str = DEFAULT_BLUESKY_SERVICE

    twitter_api_key: str = ""
    twitter_api_secret: str = ""
    twitter_access_token: str = ""
    twitter_access_token_secret: str = ""
    twitter_endpoint: str = DEFAULT_TWITTER_ENDPOINT

    dry_run: bool = False
    force: bool = False

    ai_summary: bool = True
    ai_provider: LLMProvider = DEFAULT_PROVIDER
    ai_model: Optional[str] = None
    ai_api_key: str = ""

    webhook_secret: str = ""
    branch_only: str = ""
    repo_allowlist: tuple[str, ...] = Field(default_factory=tuple)

    enrichment: bool = True
    github_token: str = ""
    dedupe_db_url: str = DEFAULT_DEDUPE_DB_URL

    @property
    def char_limit(self) -> int:
        return CHARACTER_LIMITS[self.backend]

    @property
    def summarizer_enabled(self) -> bool:
        """AI condensation runs only with a key and when not switched off."""
        return bool(self.ai_api_key) and self.ai_summary

    @property
    def identity(self) -> str:
        """Human-readable account identity for log lines."""
        if self.backend == Backend.BLUESKY:
            return self.bluesky_identifier
        return self.twitter_access_token.split("-", 1)[0] or "(unknown)"

    def require_credentials(self) -> None:
        """Fail fast when the selected backend's credentials are incomplete.

        Raises:
            ConfigError: If any required credential field is empty.
        """
        if self.backend == Backend.BLUESKY:
            if not self.bluesky_identifier or not self.bluesky_password:
                raise ConfigError(
                    "Missing BSKY_HANDLE/BSKY_IDENTIFIER (or BLUESKY_*) and "
                    "BSKY_APP_PASSWORD (or BLUESKY_APP_PASSWORD) env."
                )
        else:
            missing = [
                name
                for name, value in (
                    ("X_API_KEY", self.twitter_api_key),
                    ("X_API_SECRET", self.twitter_api_secret),
                    ("X_ACCESS_TOKEN", self.twitter_access_token),
                    ("X_ACCESS_TOKEN_SECRET", self.twitter_access_token_secret),
                )
                if not value
            ]
            if missing:
                raise ConfigError(f"Missing Twitter/X credentials: {', '.join(missing)}")


def _parse_enum(enum_cls, raw: str, setting: str):
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        valid = ", ".join(member.value for member in enum_cls)
        raise ConfigError(f"Invalid {setting}: {raw!r}. Valid values: {valid}")


def load_settings(
    env: Mapping[str, str],
    file_config: Optional[Mapping[str, Any]] = None,
    require_credentials: bool = True,
) -> Settings:
    """Resolve Settings from the environment layered over a file config.

    Args:
        env: Environment mapping (os.environ after load_dotenv).
        file_config: Values from .commitpost/config.yaml, if any.
        require_credentials: Whether to fail fast on missing credentials.

    Returns:
        A frozen Settings instance.

    Raises:
        ConfigError: If a value is invalid or credentials are missing.
    """
    file_config = {k: v for k, v in (file_config or {}).items() if k in FILE_CONFIG_KEYS}

    def value(name: str, fallback: Any = "") -> Any:
        from_env = first_env(env, ENV_ALIASES[name])
        if from_env:
            return from_env
        return file_config.get(name, fallback)

    backend = _parse_enum(Backend, str(value("backend", DEFAULT_BACKEND.value)), "backend")
    gate = _parse_enum(TriggerGate, str(value("gate", DEFAULT_GATE.value)), "trigger gate")
    provider = _parse_enum(LLMProvider, str(value("ai_provider", DEFAULT_PROVIDER.value)), "AI provider")

    try:
        settings = Settings(
            backend=backend,
            gate=gate,
            bluesky_identifier=value("bluesky_identifier"),
            bluesky_password=value("bluesky_password"),
            bluesky_service=str(value("bluesky_service", DEFAULT_BLUESKY_SERVICE)).rstrip("/"),
            twitter_api_key=value("twitter_api_key"),
            twitter_api_secret=value("twitter_api_secret"),
            twitter_access_token=value("twitter_access_token"),
            twitter_access_token_secret=value("twitter_access_token_secret"),
            twitter_endpoint=value("twitter_endpoint", DEFAULT_TWITTER_ENDPOINT),
            dry_run=parse_toggle(value("dry_run")),
            force=parse_toggle(value("force")),
            ai_summary=parse_toggle(value("ai_summary"), default=True),
            ai_provider=provider,
            ai_model=value("ai_model") or None,
            ai_api_key=first_env(env, [API_KEY_ENV_VARS[provider]]),
            webhook_secret=value("webhook_secret"),
            branch_only=str(value("branch_only") or ""),
            repo_allowlist=parse_allowlist(value("repo_allowlist")),
            enrichment=parse_toggle(value("enrichment"), default=True),
            github_token=value("github_token"),
            dedupe_db_url=value("dedupe_db_url", DEFAULT_DEDUPE_DB_URL),
        )
    except ValidationError as e:
        fields = ", ".join(str(error["loc"][0]) for error in e.errors() if error["loc"])
        raise ConfigError(f"Invalid configuration value for: {fields}") from e

    if require_credentials:
        settings.require_credentials()

    return settings
