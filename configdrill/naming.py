"""Resource naming, tagging and identifier masking helpers."""

from __future__ import annotations

import re
import secrets
import string
import time
from typing import Dict, List, Optional

from .settings import Settings

S3_BUCKET_MAX = 63
IAM_NAME_MAX = 64
DEFAULT_NAME_MAX = 128

_PASSWORD_SYMBOLS = "!#$%^&*()_+-=[]{}|"
_S3_INVALID = re.compile(r"[^a-z0-9-]")


def epoch_millis() -> int:
    return int(time.time() * 1000)


def unique_name(prefix: str, *, max_length: int = DEFAULT_NAME_MAX, millis: Optional[int] = None) -> str:
    """Return ``<prefix>-<epoch ms>``, truncating the prefix to fit ``max_length``."""
    stamp = str(millis if millis is not None else epoch_millis())
    room = max_length - len(stamp) - 1
    if room < 1:
        raise ValueError(f"max_length {max_length} too small for a timestamped name")
    return f"{prefix[:room].rstrip('-')}-{stamp}"


def iam_name(prefix: str, *, millis: Optional[int] = None) -> str:
    return unique_name(prefix, max_length=IAM_NAME_MAX, millis=millis)


def bucket_name(prefix: str, *, millis: Optional[int] = None) -> str:
    """S3 bucket names are global, so they also get a random suffix."""
    stamp = str(millis if millis is not None else epoch_millis())
    suffix = secrets.token_hex(3)
    cleaned = _S3_INVALID.sub("-", prefix.lower()).strip("-") or "drill"
    room = S3_BUCKET_MAX - len(stamp) - len(suffix) - 2
    return f"{cleaned[:room].rstrip('-')}-{stamp}-{suffix}"


def generate_password(length: int = 16) -> str:
    """Random console password that satisfies the default IAM password policy."""
    if length < 4:
        raise ValueError("password length must be at least 4")
    pools = [string.ascii_uppercase, string.ascii_lowercase, string.digits, _PASSWORD_SYMBOLS]
    chars = [secrets.choice(pool) for pool in pools]
    alphabet = "".join(pools)
    chars.extend(secrets.choice(alphabet) for _ in range(length - len(chars)))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


def drill_tags(settings: Settings, rule: str, name: Optional[str] = None) -> Dict[str, str]:
    tags = {settings.tag_key: settings.tag_value, "config-rule": rule}
    if name:
        tags["Name"] = name
    return tags


def tag_list(tags: Dict[str, str], key_field: str = "Key", value_field: str = "Value") -> List[Dict[str, str]]:
    """Render a tag mapping in the list shape a given service expects."""
    return [{key_field: key, value_field: value} for key, value in tags.items()]


def mask_identifier(value: Optional[str], visible: int = 4) -> str:
    """Keep only the last ``visible`` characters, e.g. account ids and access key ids in logs."""
    if not value:
        return "****"
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]
