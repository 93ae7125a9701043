"""
SECURITY CONFIG
===============
Centralized redirect-error and nonce settings loaded from environment.
"""

# FLOW:
# - Read env vars once and expose REDIRECT_ERROR_SETTINGS.
# - ensure_nonce_secret() guarantees a signing secret for redirect nonces.
# WHY:
# - Centralizes query keys, nonce action and lifetime per environment.
# HOW:
# - Loads the active .env file with python-dotenv and stores values in a dict.

from __future__ import annotations

import os
import secrets
import logging
import dotenv


def get_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).lower() == "true"


def get_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def feature_enabled(feature: str, default: bool = True) -> bool:
    """Feature flags come from FEATURE_<NAME> env vars, e.g. FEATURE_SECRETS_REDACTION."""
    env_name = "FEATURE_" + feature.upper().replace("-", "_")
    return get_bool(env_name, default)


def _env_name() -> str:
    env = os.getenv("APP_ENV", "").strip().lower()
    if env in {"prod", "production"}:
        return ".env.production"
    if env in {"local", "localhost", "dev", "development"}:
        return ".env.localhost"

    # Auto-select based on ENV_ACTIVE flag if APP_ENV is not set
    root = os.path.dirname(os.path.dirname(__file__))
    prod_path = os.path.join(root, ".env.production")

    def _is_active(path: str) -> bool:
        if not os.path.exists(path):
            return False
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                if line.strip().startswith("ENV_ACTIVE="):
                    return line.split("=", 1)[1].strip().strip('"').lower() == "true"
        return False

    if _is_active(prod_path):
        return ".env.production"
    return ".env.localhost"


def _env_path() -> str:
    root = os.path.dirname(os.path.dirname(__file__))
    return os.path.join(root, _env_name())


dotenv.load_dotenv(_env_path())

# Optional startup log
if os.getenv("APP_ENV_LOG", "false").lower() == "true":
    logger = logging.getLogger("security.env")
    logger.info("Active env file: %s", _env_path())

DEFAULT_TEMPLATE = '<div class="alert alert-danger error-%1$s">%2$s</div>'

REDIRECT_ERROR_SETTINGS = {
    "ERROR_KEY": os.getenv("REDIRECT_ERROR_KEY", "error-code"),
    "NONCE_KEY": os.getenv("REDIRECT_NONCE_KEY", "token"),
    "NONCE_ACTION": os.getenv("REDIRECT_NONCE_ACTION", "truongwp-redirect-with-error"),
    "TEMPLATE": os.getenv("REDIRECT_ERROR_TEMPLATE", DEFAULT_TEMPLATE),
    "NONCE_LIFETIME": get_int("NONCE_LIFETIME", 60 * 60 * 24),
    "CSP_ENABLED": get_bool("CSP_ENABLED", True),
    "LOG_LEVEL": os.getenv("SECURITY_LOG_LEVEL", "INFO").upper(),
}


def ensure_nonce_secret(env_name: str = "NONCE_SECRET_KEY") -> str:
    """Ensure a strong nonce signing secret exists in .env and environment."""
    dotenv.load_dotenv(_env_path())
    primary = os.getenv(env_name) or os.getenv("SECRET_KEY")
    placeholders = {"", "change-this-secret", "REPLACE_WITH_SECURE_RANDOM_SECRET", "AUTO_GENERATE"}
    if primary and primary not in placeholders:
        os.environ[env_name] = primary
        return primary

    secret = secrets.token_urlsafe(64)
    os.environ[env_name] = secret

    env_path = _env_path()
    if os.path.exists(env_path):
        with open(env_path, "r", encoding="utf-8") as f:
            lines = f.read().splitlines()
        if any(line.startswith(f"{env_name}=") for line in lines):
            lines = [f"{env_name}=\"{secret}\"" if line.startswith(f"{env_name}=") else line for line in lines]
        else:
            lines.append(f"{env_name}=\"{secret}\"")
        content = "\n".join(lines) + "\n"
    else:
        content = f"{env_name}=\"{secret}\"\n"

    with open(env_path, "w", encoding="utf-8") as f:
        f.write(content)

    return secret
