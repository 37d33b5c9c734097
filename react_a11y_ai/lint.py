"""ESLint runner with the jsx-a11y rule set.

Usage:
    results = run_a11y_checks("/path/to/workspace")
    # -> [{"filePath": "...", "messages": [{"line": 3, "column": 5, ...}]}, ...]

The result list is ESLint's own ``--format json`` output, returned unmodified.
"""

import json
import os
import subprocess
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from react_a11y_ai.config import ConfigError

DEFAULT_COMMAND = ("npx", "eslint")
DEFAULT_PATTERNS = ("**/*.jsx", "**/*.tsx")
RULE_SET = "plugin:jsx-a11y/recommended"

# ESLint exit codes: 0 = clean, 1 = lint problems found, 2 = fatal
_FATAL_EXIT = 2


class AnalysisError(Exception):
    """Raised when ESLint itself fails (bad config, no matching files, I/O)."""


@dataclass(frozen=True)
class LintSettings:
    command: tuple[str, ...] = DEFAULT_COMMAND
    patterns: tuple[str, ...] = DEFAULT_PATTERNS
    extends: tuple[str, ...] = (RULE_SET,)
    parser_options: dict[str, Any] = field(
        default_factory=lambda: {"ecmaVersion": 2020, "sourceType": "module"}
    )
    env: dict[str, bool] = field(
        default_factory=lambda: {"browser": True, "node": True, "es2020": True}
    )

    def override_config(self) -> dict[str, Any]:
        return {
            "root":          True,
            "extends":       list(self.extends),
            "parserOptions": dict(self.parser_options),
            "env":           dict(self.env),
        }


def run_a11y_checks(
    root: str | Path,
    settings: LintSettings | None = None,
    runner: Callable[..., subprocess.CompletedProcess] | None = None,
) -> list[dict[str, Any]]:
    """Lint every file under *root* matching the configured patterns.

    Raises:
        ConfigError:   *root* does not exist or is not a directory.
        AnalysisError: ESLint could not run or exited with a fatal status.
    """
    settings = settings or LintSettings()
    runner = runner or subprocess.run
    root_path = Path(root)
    if not root_path.is_dir():
        raise ConfigError(f"Workspace root not found: '{root}'")

    patterns = [f"{root_path.as_posix()}/{pattern}" for pattern in settings.patterns]

    with tempfile.TemporaryDirectory(prefix="react-a11y-ai-") as tmp:
        config_path = Path(tmp) / "eslintrc.json"
        config_path.write_text(json.dumps(settings.override_config()), encoding="utf-8")

        cmd = [
            *settings.command,
            "--no-eslintrc",
            "--config", str(config_path),
            "--format", "json",
            *patterns,
        ]
        env = os.environ.copy()
        env["ESLINT_USE_FLAT_CONFIG"] = "false"

        try:
            proc = runner(
                cmd,
                cwd=str(root_path),
                env=env,
                text=True,
                capture_output=True,
                check=False,
                stdin=subprocess.DEVNULL,
            )
        except OSError as exc:
            raise AnalysisError(f"Unable to run '{' '.join(settings.command)}': {exc}") from exc

    return _parse_output(proc)


def _parse_output(proc: subprocess.CompletedProcess) -> list[dict[str, Any]]:
    if proc.returncode >= _FATAL_EXIT:
        detail = (proc.stderr or proc.stdout or "").strip()
        raise AnalysisError(f"ESLint exited with status {proc.returncode}: {detail[:500]}")

    try:
        results = json.loads(proc.stdout or "[]")
    except ValueError as exc:
        raise AnalysisError(f"ESLint produced invalid JSON output: {exc}") from exc

    if not isinstance(results, list):
        raise AnalysisError("ESLint JSON output is not a list of file results.")
    return results
