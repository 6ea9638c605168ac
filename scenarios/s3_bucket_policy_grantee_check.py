"""s3-bucket-policy-grantee-check - bucket policy granting access to unapproved principals."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from configdrill.clients import resolve_account_id
from configdrill.ledger import ResourceLedger
from configdrill.policies import policy_document, statement, to_json
from configdrill.provision import create_bucket, disable_bucket_public_access_block
from configdrill.settings import Settings

META = {
    "rule": "s3-bucket-policy-grantee-check",
    "title": "S3 bucket policy grants access to any principal",
    "service": "s3",
    "resource_type": "AWS::S3::Bucket",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    s3 = clients["s3"]
    account_id = resolve_account_id(settings, clients)
    bucket = create_bucket(settings, clients, ledger, rule=META["rule"], prefix="grantee-test")
    disable_bucket_public_access_block(s3, bucket)
    document = policy_document(
        statement(
            ["s3:GetObject", "s3:PutObject"],
            f"arn:aws:s3:::{bucket}/*",
            principal={"AWS": f"arn:aws:iam::{account_id}:root"},
            sid="OwnerAccess",
        ),
        statement("s3:GetObject", f"arn:aws:s3:::{bucket}/*", principal="*", sid="AnyoneRead"),
    )
    s3.put_bucket_policy(Bucket=bucket, Policy=to_json(document))
    return {"bucket": bucket, "account_id": account_id}


def unauthorized_principals(document: Dict[str, Any], allowed: List[str]) -> List[str]:
    found: List[str] = []
    for entry in document.get("Statement", []):
        if entry.get("Effect") != "Allow":
            continue
        principal = entry.get("Principal")
        if principal == "*":
            candidates = ["*"]
        elif isinstance(principal, dict):
            value = principal.get("AWS", [])
            candidates = value if isinstance(value, list) else [value]
        else:
            candidates = []
        found.extend(candidate for candidate in candidates if candidate not in allowed)
    return found


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    document = json.loads(clients["s3"].get_bucket_policy(Bucket=state["bucket"])["Policy"])
    allowed = [f"arn:aws:iam::{state['account_id']}:root"]
    offenders = unauthorized_principals(document, allowed)
    return {
        "compliant": not offenders,
        "evidence": {"bucket": state["bucket"], "unauthorized_principals": offenders},
    }
