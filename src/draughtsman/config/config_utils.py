import os
import re
from pathlib import Path

from loguru import logger

_SECRETS_LOADED = False

# Most systems cap environment values well above this
MAX_ENV_VAR_SIZE = 32768


def _load_secret_files_into_env() -> None:
    """Expose files from a mounted secrets directory as environment variables.

    Credentials such as the GitHub token are usually mounted from a
    Kubernetes secret. Each file named ``github-oauth-token`` becomes
    ``GITHUB_OAUTH_TOKEN`` unless that variable is already set.
    """
    global _SECRETS_LOADED
    if _SECRETS_LOADED:
        return

    custom_dir = os.getenv("DRAUGHTSMAN_SECRETS_DIR")
    directory = Path(custom_dir) if custom_dir else None
    if directory is None or not directory.is_dir():
        _SECRETS_LOADED = True
        return

    for file_path in directory.iterdir():
        if not file_path.is_file():
            continue

        env_name = file_path.stem.upper()
        env_name = "".join(c if c.isalnum() or c == "_" else "_" for c in env_name)
        if not env_name or env_name in os.environ:
            continue

        try:
            file_size = file_path.stat().st_size
            if file_size > MAX_ENV_VAR_SIZE:
                logger.warning(
                    f"Secret file {file_path.name} is too large ({file_size} bytes) to load as environment variable"
                )
                continue
            value = file_path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            logger.warning(f"Unable to read secret file {file_path}: {exc}")
            continue

        if not value:
            continue

        os.environ[env_name] = value
        logger.debug(f"Loaded secret {env_name} from {file_path.name}")

    _SECRETS_LOADED = True


_PLACEHOLDER = re.compile(r"\$\{(?P<name>[^}:]+)(?:(?P<op>:[-?])(?P<arg>[^}]*))?\}")


def substitute_env_vars(text: str) -> str:
    """Expand ``${VAR}`` placeholders from the environment.

    ``${VAR:-default}`` falls back to ``default`` and ``${VAR:?message}``
    fails with ``message`` when VAR is unset. A bare ``${VAR}`` must be set.

    Raises:
        ValueError: If a required variable is not set
    """
    _load_secret_files_into_env()

    def expand(match: re.Match[str]) -> str:
        name, op, arg = match.group("name", "op", "arg")
        value = os.environ.get(name)
        if value is not None:
            return value
        if op == ":-":
            return arg
        if op == ":?":
            raise ValueError(f"Required environment variable {name}: {arg}")
        raise ValueError(f"Required environment variable {name} not set")

    return _PLACEHOLDER.sub(expand, text)


def deep_merge(base: dict, overrides: dict) -> dict:
    """Merge ``overrides`` into a copy of ``base``, recursing into dicts."""
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged
