"""s3-account-level-public-access-blocks-periodic - account public access block turned off.

This scenario modifies an account-wide setting instead of creating a
resource. The original configuration is captured first and put back on
teardown; when the account had no configuration it is deleted again.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from botocore.exceptions import ClientError

from configdrill.ledger import ResourceLedger
from configdrill.polling import error_code
from configdrill.settings import Settings

META = {
    "rule": "s3-account-level-public-access-blocks-periodic",
    "title": "Account-level S3 public access block disabled",
    "service": "s3",
    "resource_type": "AWS::S3::AccountPublicAccessBlock",
    "required_env": ["AWS_ACCOUNT_ID"],
}

PAB_FLAGS = (
    "BlockPublicAcls",
    "IgnorePublicAcls",
    "BlockPublicPolicy",
    "RestrictPublicBuckets",
)


def current_configuration(s3control: Any, account_id: str) -> Optional[Dict[str, bool]]:
    try:
        response = s3control.get_public_access_block(AccountId=account_id)
    except ClientError as exc:
        if error_code(exc) == "NoSuchPublicAccessBlockConfiguration":
            return None
        raise
    return response.get("PublicAccessBlockConfiguration")


def restore_configuration(s3control: Any, account_id: str, original: Optional[Dict[str, bool]]) -> None:
    if original:
        s3control.put_public_access_block(AccountId=account_id, PublicAccessBlockConfiguration=original)
    else:
        s3control.delete_public_access_block(AccountId=account_id)


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    s3control = clients["s3control"]
    account_id = settings.account_id
    original = current_configuration(s3control, account_id)
    ledger.restore(
        "s3:account-public-access-block",
        account_id,
        lambda: restore_configuration(s3control, account_id, original),
        note="restore" if original else "delete",
    )
    s3control.put_public_access_block(
        AccountId=account_id,
        PublicAccessBlockConfiguration={flag: False for flag in PAB_FLAGS},
    )
    return {"account_id": account_id, "original": original}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    config = current_configuration(clients["s3control"], state["account_id"]) or {}
    flags = {flag: bool(config.get(flag, False)) for flag in PAB_FLAGS}
    return {"compliant": all(flags.values()), "evidence": flags}
