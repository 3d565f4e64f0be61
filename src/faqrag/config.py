import logging
import os
import re
from pathlib import Path
from typing import Any, Literal, Optional

import toml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict

from faqrag.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "FAQRAG_CONFIG"

DEFAULT_QUERY_LOG_PATH = "outputs/sample_queries.json"
DEFAULT_EMBEDDING_BATCH_SIZE = 512
DEFAULT_LOG_LEVEL = "INFO"

# Used when no config.toml is found: every value comes straight from the environment.
DEFAULT_CONFIG_TEMPLATE = """
[document]
path = "${DOCUMENT_PATH}"

[storage]
vector_store_path = "${VECTOR_STORE_PATH}"
query_log_path = "${QUERY_LOG_PATH:-outputs/sample_queries.json}"

[embedding]
model = "${EMBEDDING_MODEL}"
batch_size = "${EMBEDDING_BATCH_SIZE:-512}"

[llm]
model = "${LLM_MODEL}"

[ingestion]
chunk_size = "${CHUNK_SIZE}"
chunk_overlap = "${CHUNK_OVERLAP}"

[retrieval]
k = "${RETRIEVAL_K}"
max_context_tokens = "${MAX_CONTEXT_TOKENS}"

[providers]
openai_api_key = "${OPENAI_API_KEY}"
openrouter_api_key = "${OPENROUTER_API_KEY}"

[logging]
level = "${LOG_LEVEL:-INFO}"
"""

# Config key -> environment variable reported in validation errors.
_REQUIRED_KEYS = {
    "document.path": "DOCUMENT_PATH",
    "storage.vector_store_path": "VECTOR_STORE_PATH",
    "embedding.model": "EMBEDDING_MODEL",
    "ingestion.chunk_size": "CHUNK_SIZE",
    "ingestion.chunk_overlap": "CHUNK_OVERLAP",
}
_REQUIRED_QUERY_KEYS = {
    "llm.model": "LLM_MODEL",
    "retrieval.k": "RETRIEVAL_K",
}


def resolve_path(path: str | Path, config_path: Optional[Path]) -> Path:
    """Resolve a path relative to the config file's parent directory.

    If the path is absolute, or there is no config file, return it as-is.

    Args:
        path: The path to resolve (absolute or relative).
        config_path: Path to the configuration file, if one was used.

    Returns:
        Resolved path.
    """
    path = Path(path)
    if path.is_absolute() or config_path is None:
        return path
    return (config_path.parent / path).resolve()


def find_config_path(explicit_path: Path | None = None) -> Path | None:
    """Centralized config path resolution.

    Returns None when no config file exists, in which case the built-in
    environment-only template applies.
    """
    if explicit_path:
        if not explicit_path.exists():
            raise ConfigError(f"Config file not found: {explicit_path}")
        return explicit_path
    candidates = []
    if os.environ.get(CONFIG_ENV_VAR):
        candidates.append(Path(os.environ[CONFIG_ENV_VAR]))
    candidates.append(Path("config.toml"))
    for path in candidates:
        if path.exists():
            return path
    return None


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML with environment variable substitution.

    Supports ${ENV_VAR} and ${ENV_VAR:-default} syntax. Without a config
    path the built-in template is used.

    Args:
        config_path: Path to the TOML configuration file.

    Returns:
        Dictionary with configuration values.
    """
    try:
        if config_path is None:
            config = toml.loads(DEFAULT_CONFIG_TEMPLATE)
        else:
            config = toml.load(config_path)
    except toml.TomlDecodeError as e:
        raise ConfigError(f"Invalid config file {config_path}: {e}") from e
    return _substitute_env_vars(config)


def _substitute_env_vars(value: Any) -> Any:
    """Recursively substitute environment variables in config values."""
    if isinstance(value, str):
        return _substitute_string(value)
    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]
    return value


def _substitute_string(value: str) -> str:
    """Substitute environment variables in a string.

    Supports ${VAR} and ${VAR:-default} syntax.
    """
    pattern = r"\$\{([^}:]+)(?::-([^}]*))?\}"

    def replacer(match):
        var_name = match.group(1)
        default = match.group(2) or ""
        return os.environ.get(var_name) or default

    return re.sub(pattern, replacer, value)


def get_config_value(config: dict, key_path: str, default: Any = None) -> Any:
    """Get a nested config value using dot notation.

    Args:
        config: Configuration dictionary.
        key_path: Dot-separated path (e.g., "embedding.model").
        default: Default value if key not found.

    Returns:
        The config value or default.
    """
    keys = key_path.split(".")
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_int(value: Any, name: str, minimum: int, requirement: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be {requirement}") from None
    if number < minimum:
        raise ConfigError(f"{name} must be {requirement}")
    return number


class Settings(BaseModel):
    """Validated runtime configuration, built once per process."""

    model_config = ConfigDict(frozen=True)

    document_path: Path
    vector_store_path: Path
    embedding_model: str
    llm_model: str = ""
    chunk_size: int
    chunk_overlap: int
    retrieval_k: int = 0
    openai_api_key: str = ""
    openrouter_api_key: str = ""
    query_log_path: Path = Path(DEFAULT_QUERY_LOG_PATH)
    embedding_batch_size: int = DEFAULT_EMBEDDING_BATCH_SIZE
    log_level: str = DEFAULT_LOG_LEVEL
    max_context_tokens: Optional[int] = None
    context_template: Optional[str] = None
    evaluation_template: Optional[str] = None

    @property
    def provider(self) -> Literal["openai", "openrouter"]:
        return "openrouter" if self.openrouter_api_key else "openai"

    @property
    def api_key(self) -> str:
        return self.openrouter_api_key or self.openai_api_key

    @property
    def chunk_info_path(self) -> Path:
        return self.vector_store_path.parent / "chunk-info.json"

    @classmethod
    def from_config(
        cls,
        config: dict[str, Any],
        config_path: Path | None = None,
        require_query: bool = True,
    ) -> "Settings":
        """Validate a loaded configuration dictionary.

        Raises:
            ConfigError: Naming the first violated variable.
        """
        required = dict(_REQUIRED_KEYS)
        if require_query:
            required.update(_REQUIRED_QUERY_KEYS)

        missing = [
            env_name
            for key_path, env_name in required.items()
            if _is_blank(get_config_value(config, key_path))
        ]
        if missing:
            raise ConfigError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        chunk_size = _parse_int(
            get_config_value(config, "ingestion.chunk_size"),
            "CHUNK_SIZE", 1, "a positive integer",
        )
        chunk_overlap = _parse_int(
            get_config_value(config, "ingestion.chunk_overlap"),
            "CHUNK_OVERLAP", 0, "a non-negative integer",
        )
        if chunk_overlap >= chunk_size:
            raise ConfigError("CHUNK_OVERLAP must be less than CHUNK_SIZE")

        retrieval_k = 0
        if require_query:
            retrieval_k = _parse_int(
                get_config_value(config, "retrieval.k"),
                "RETRIEVAL_K", 1, "a positive integer",
            )

        batch_size = _parse_int(
            get_config_value(
                config, "embedding.batch_size", DEFAULT_EMBEDDING_BATCH_SIZE
            ) or DEFAULT_EMBEDDING_BATCH_SIZE,
            "EMBEDDING_BATCH_SIZE", 1, "a positive integer",
        )

        max_context_tokens = None
        raw_max_tokens = get_config_value(config, "retrieval.max_context_tokens")
        if not _is_blank(raw_max_tokens):
            max_context_tokens = _parse_int(
                raw_max_tokens, "MAX_CONTEXT_TOKENS", 1, "a positive integer"
            )

        document_path = resolve_path(get_config_value(config, "document.path"), config_path)
        if not document_path.exists():
            raise ConfigError(f"DOCUMENT_PATH does not exist: {document_path}")

        openai_api_key = get_config_value(config, "providers.openai_api_key") or ""
        openrouter_api_key = get_config_value(config, "providers.openrouter_api_key") or ""
        if not openai_api_key and not openrouter_api_key:
            raise ConfigError("Either OPENROUTER_API_KEY or OPENAI_API_KEY must be set")

        query_log_path = (
            get_config_value(config, "storage.query_log_path") or DEFAULT_QUERY_LOG_PATH
        )

        return cls(
            document_path=document_path,
            vector_store_path=resolve_path(
                get_config_value(config, "storage.vector_store_path"), config_path
            ),
            embedding_model=get_config_value(config, "embedding.model"),
            llm_model=get_config_value(config, "llm.model") or "",
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            retrieval_k=retrieval_k,
            openai_api_key=openai_api_key,
            openrouter_api_key=openrouter_api_key,
            query_log_path=resolve_path(query_log_path, config_path),
            embedding_batch_size=batch_size,
            max_context_tokens=max_context_tokens,
            log_level=(get_config_value(config, "logging.level") or DEFAULT_LOG_LEVEL).upper(),
            context_template=get_config_value(config, "retrieval.context_template"),
            evaluation_template=get_config_value(config, "evaluation.template"),
        )


def load_settings(
    config_path: Path | None = None,
    require_query: bool = True,
    dotenv_path: str | Path | None = None,
) -> Settings:
    """Load .env, read the config file (or the built-in template) and validate it.

    Args:
        config_path: Explicit path to a TOML config file.
        require_query: Also require the LLM and retrieval settings.
        dotenv_path: Explicit .env file; defaults to searching from the cwd.

    Returns:
        Validated Settings.
    """
    load_dotenv(dotenv_path=dotenv_path or find_dotenv(usecwd=True), override=False)
    resolved = find_config_path(config_path)
    if resolved is not None:
        logger.info(f"Using config file {resolved}")
    config = load_config(resolved)
    return Settings.from_config(config, resolved, require_query=require_query)
