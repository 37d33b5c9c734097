"""Configuration loading and validation.

Usage:
    config = load("a11y-config.yaml")        # raises ConfigError on bad config
    config.api_key                           # OPENAI_API_KEY wins over the file
    generate_template("a11y-config.yaml")    # writes example file to disk
"""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_CONFIG_PATH = "a11y-config.yaml"
API_KEY_ENV = "OPENAI_API_KEY"

_DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"
_DEFAULT_MODEL = "gpt-3.5-turbo"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass
class Config:
    api_key: str = ""
    endpoint: str = _DEFAULT_ENDPOINT
    model: str = _DEFAULT_MODEL
    max_tokens: int = 500
    temperature: float = 0.2
    timeout: float | None = None
    eslint_command: tuple[str, ...] = ("npx", "eslint")
    patterns: tuple[str, ...] = ("**/*.jsx", "**/*.tsx")


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str = DEFAULT_CONFIG_PATH, required: bool = False) -> Config:
    """Load and validate configuration from a YAML file.

    A missing file yields the defaults unless *required* is set. The
    OPENAI_API_KEY environment variable overrides ``openai.api_key``. The key
    itself is not required here; the fix command checks for it when it runs.

    Raises:
        ConfigError: if the file is required but missing, malformed, or holds
                     values of the wrong type.
    """
    path = Path(config_path)
    raw: dict = {}

    if path.exists():
        try:
            with path.open(encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse '{config_path}': {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError(f"'{config_path}' must be a YAML mapping at the top level.")
    elif required:
        raise ConfigError(
            f"Config file not found: '{config_path}'\n"
            "Run `python -m react_a11y_ai init` to generate a template."
        )

    openai = _section(raw, "openai", config_path)
    eslint = _section(raw, "eslint", config_path)

    api_key = os.environ.get(API_KEY_ENV) or openai.get("api_key") or ""
    defaults = Config()

    try:
        config = Config(
            api_key=str(api_key).strip(),
            endpoint=str(openai.get("endpoint") or defaults.endpoint).strip(),
            model=str(openai.get("model") or defaults.model).strip(),
            max_tokens=int(openai.get("max_tokens", defaults.max_tokens)),
            temperature=float(openai.get("temperature", defaults.temperature)),
            timeout=_optional_float(openai.get("timeout")),
            eslint_command=_as_command(eslint.get("command", defaults.eslint_command)),
            patterns=_as_patterns(eslint.get("patterns") or defaults.patterns),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value in '{config_path}': {exc}") from exc

    _validate(config)
    return config


def _section(raw: dict, name: str, config_path: str) -> dict:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' in '{config_path}' must be a mapping.")
    return value


def _optional_float(value) -> float | None:
    return None if value is None else float(value)


def _as_command(value) -> tuple[str, ...]:
    if isinstance(value, str):
        return tuple(value.split())
    return tuple(str(part) for part in value)


def _as_patterns(value) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    return tuple(str(pattern) for pattern in value)


def _validate(config: Config) -> None:
    """Raise ConfigError if values are out of range."""
    errors: list[str] = []

    if not config.endpoint.startswith(("http://", "https://")):
        errors.append("  - 'openai.endpoint' must be an http(s) URL")
    if config.max_tokens <= 0:
        errors.append("  - 'openai.max_tokens' must be a positive integer")
    if not 0 <= config.temperature <= 2:
        errors.append("  - 'openai.temperature' must be between 0 and 2")
    if config.timeout is not None and config.timeout <= 0:
        errors.append("  - 'openai.timeout' must be positive when set")
    if not config.eslint_command:
        errors.append("  - 'eslint.command' is empty")
    if not config.patterns:
        errors.append("  - 'eslint.patterns' is empty")

    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = """\
openai:
  # Prefer the OPENAI_API_KEY environment variable over storing the key here
  # api_key: "sk-xxxxxxxxxxxx"
  endpoint: "https://api.openai.com/v1/chat/completions"
  model: "gpt-3.5-turbo"
  max_tokens: 500
  temperature: 0.2
  # timeout: 60                    # seconds; unset waits for the server

eslint:
  # Needs eslint and eslint-plugin-jsx-a11y installed in the workspace
  command: "npx eslint"
  patterns:
    - "**/*.jsx"
    - "**/*.tsx"
"""


def generate_template(output_path: str = DEFAULT_CONFIG_PATH) -> None:
    """Write a template a11y-config.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists (to avoid overwriting secrets).
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
