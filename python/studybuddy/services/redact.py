"""Log guard for study data and credentials.

Study content never goes into logs: chat messages, model replies, rendered
prompts, material text, summaries and flashcard text. Neither do passwords,
usernames or API keys. Log the size or a digest instead, under a key with
a redacted suffix (message_chars, username_sha256).

safe_kv enforces this at the call site. In local and test it raises so the
offending log call fails loudly; in staging and prod it emits a
safe_kv_violation warning and passes the fields through.
"""

import hashlib
import os

import structlog

FORBIDDEN_KEYS = frozenset(
    {
        # credentials
        "api_key",
        "bearer",
        "password",
        "secret",
        "token",
        "username",
        # study content
        "answer",
        "content",
        "message",
        "prompt",
        "question",
        "raw_body",
        "reply",
        "summary",
    }
)

REDACTED_SUFFIXES = ("_sha256", "_hash", "_length", "_chars")

STRICT_ENVS = frozenset({"local", "test"})


def hash_text(value: str) -> str:
    """Hex SHA-256 of value; equal inputs give equal digests."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def describe_text(field: str, value: str) -> dict[str, int | str]:
    """Loggable stand-ins for a sensitive string: its length and digest.

    describe_text("username", "alex") gives username_chars=4 and
    username_sha256=<hex digest>.
    """
    return {f"{field}_chars": len(value), f"{field}_sha256": hash_text(value)}


def forbidden_keys(keys) -> list[str]:
    return [
        key
        for key in keys
        if key in FORBIDDEN_KEYS and not key.endswith(REDACTED_SUFFIXES)
    ]


def safe_kv(*, _env: str | None = None, **kwargs) -> dict:
    """Return kwargs unchanged after checking them against FORBIDDEN_KEYS.

    Usage:
        logger.info("chat_turn_stored", **safe_kv(
            conversation_id=3,
            reply_chars=812,        # OK: redacted suffix
            # reply="Mitosis...",   # BLOCKED
        ))

    Args:
        _env: Environment name override; defaults to STUDYBUDDY_ENV.

    Raises:
        ValueError: Forbidden key in a local or test environment.
    """
    violations = forbidden_keys(kwargs)
    if not violations:
        return kwargs

    env = _env or os.environ.get("STUDYBUDDY_ENV", "local")
    if env in STRICT_ENVS:
        raise ValueError(f"Forbidden log keys without redacted suffix: {violations}")

    structlog.get_logger(__name__).warning("safe_kv_violation", forbidden_keys=violations)
    return kwargs
