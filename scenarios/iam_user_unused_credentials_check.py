"""
iam-user-unused-credentials-check - user whose password and access key are never used.

The rule measures how long each credential has gone unused, counting from its
creation when it has never been used. Fresh credentials are therefore
COMPLIANT until they pass the 90 day threshold, which requires KEEP_RESOURCES.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from botocore.exceptions import ClientError

from configdrill.ledger import ResourceLedger
from configdrill.naming import mask_identifier
from configdrill.polling import error_code
from configdrill.settings import Settings

from scenarios.access_keys_rotated import key_age_days
from scenarios.iam_user_mfa_enabled import create_console_user

logger = logging.getLogger(__name__)

META = {
    "rule": "iam-user-unused-credentials-check",
    "title": "IAM user credentials unused",
    "service": "iam",
    "resource_type": "AWS::IAM::User",
    "required_env": [],
}

MAX_UNUSED_DAYS = 90


def _login_profile_created(iam: Any, username: str) -> Optional[Any]:
    try:
        return iam.get_login_profile(UserName=username)["LoginProfile"].get("CreateDate")
    except ClientError as exc:
        if error_code(exc) != "NoSuchEntity":
            raise
        return None


def unused_days(iam: Any, username: str) -> Dict[str, Optional[int]]:
    """Days since each credential was last used, or since creation if never used."""
    ages: Dict[str, Optional[int]] = {}
    password_created = _login_profile_created(iam, username)
    if password_created is not None:
        last_used = iam.get_user(UserName=username)["User"].get("PasswordLastUsed")
        ages["password"] = key_age_days(last_used or password_created)
    for key in iam.list_access_keys(UserName=username).get("AccessKeyMetadata", []):
        if key.get("Status") != "Active":
            continue
        used = iam.get_access_key_last_used(AccessKeyId=key["AccessKeyId"]).get("AccessKeyLastUsed", {})
        ages[mask_identifier(key["AccessKeyId"])] = key_age_days(used.get("LastUsedDate") or key.get("CreateDate"))
    return ages


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    username = create_console_user(settings, clients, ledger, rule=META["rule"], prefix="idle-credentials-user")
    key_id = clients["iam"].create_access_key(UserName=username)["AccessKey"]["AccessKeyId"]
    logger.info("Created unused access key %s for %s; the secret is discarded", mask_identifier(key_id), username)
    return {"username": username}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    ages = unused_days(clients["iam"], state["username"])
    stale = [name for name, age in ages.items() if age is None or age > MAX_UNUSED_DAYS]
    return {
        "compliant": not stale,
        "evidence": {
            "username": state["username"],
            "unused_days": ages,
            "stale_credentials": stale,
            "max_unused_days": MAX_UNUSED_DAYS,
        },
    }
