"""
access-keys-rotated - IAM user holding an access key tagged never to rotate.

A freshly created key is inside the 90 day window, so AWS Config reports the
user COMPLIANT at first. The key only becomes non-compliant after it ages past
the threshold, which requires KEEP_RESOURCES. The inspection reads the key's
CreateDate from ``list_access_keys`` and reports its age.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from configdrill.ledger import ResourceLedger
from configdrill.naming import mask_identifier
from configdrill.provision import create_user
from configdrill.settings import Settings

logger = logging.getLogger(__name__)

META = {
    "rule": "access-keys-rotated",
    "title": "IAM access key not rotated",
    "service": "iam",
    "resource_type": "AWS::IAM::User",
    "required_env": [],
}

MAX_KEY_AGE_DAYS = 90


def _as_datetime(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def key_age_days(created: Any, now: Optional[datetime] = None) -> Optional[int]:
    created_at = _as_datetime(created)
    if created_at is None:
        return None
    now = now or datetime.now(timezone.utc)
    return (now - created_at).days


def key_rotation_compliant(
    created: Any,
    now: Optional[datetime] = None,
    max_age_days: int = MAX_KEY_AGE_DAYS,
) -> bool:
    """A key with no creation date is treated as non-compliant."""
    age = key_age_days(created, now)
    return age is not None and age <= max_age_days


def save_credentials(settings: Settings, username: str, access_key: Dict[str, Any]) -> Path:
    """Write the new key pair to ``<username>-credentials.json``; the secret never reaches the log."""
    path = Path(settings.credentials_dir) / f"{username}-credentials.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "username": username,
        "accessKeyId": access_key["AccessKeyId"],
        "secretAccessKey": access_key["SecretAccessKey"],
        "region": settings.aws_region,
        "createdAt": datetime.now(timezone.utc).isoformat(),
    }
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    logger.info("Saved credentials for %s to %s", username, path)
    return path


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    iam = clients["iam"]
    username = create_user(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="stale-key-user",
        extra_tags={"NoRotation": "true"},
    )
    access_key = iam.create_access_key(UserName=username)["AccessKey"]
    iam.tag_user(
        UserName=username,
        Tags=[
            {"Key": "AccessKeyId", "Value": access_key["AccessKeyId"]},
            {"Key": "AccessKeyCreatedAt", "Value": datetime.now(timezone.utc).isoformat()},
        ],
    )
    logger.info("Created never-rotated access key %s for %s", mask_identifier(access_key["AccessKeyId"]), username)
    state: Dict[str, Any] = {"username": username, "access_key_id": access_key["AccessKeyId"]}
    if settings.save_credentials:
        state["credentials_file"] = str(save_credentials(settings, username, access_key))
    return state


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    keys = clients["iam"].list_access_keys(UserName=state["username"]).get("AccessKeyMetadata", [])
    active = [key for key in keys if key.get("Status") == "Active"]
    ages = {key["AccessKeyId"]: key_age_days(key.get("CreateDate")) for key in active}
    stale = [key_id for key_id, age in ages.items() if age is None or age > MAX_KEY_AGE_DAYS]
    return {
        "compliant": not stale,
        "evidence": {
            "username": state["username"],
            "key_ages_days": {mask_identifier(key_id): age for key_id, age in ages.items()},
            "stale_keys": [mask_identifier(key_id) for key_id in stale],
            "max_age_days": MAX_KEY_AGE_DAYS,
        },
    }
