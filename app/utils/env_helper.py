import os


TRUE_VALUES = ("true", "1", "yes", "on")


def env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in TRUE_VALUES


def env_none_or_str(name: str, default=None):
    """Unset, blank or the literal "none" all give ``default``."""
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    if not value or value.lower() == "none":
        return default
    return value


def env_list(name: str, default: list[str] | None = None) -> list[str]:
    """Comma separated env var as a list, blanks dropped."""
    value = os.getenv(name)
    if not value:
        return list(default or [])
    return [item.strip() for item in value.split(",") if item.strip()]


def env_choice(name: str, choices: tuple[str, ...], default: str) -> str:
    """Case-insensitive pick from ``choices``; anything else gives ``default``."""
    value = (os.getenv(name) or "").strip()
    for choice in choices:
        if value.lower() == choice.lower():
            return choice
    return default
