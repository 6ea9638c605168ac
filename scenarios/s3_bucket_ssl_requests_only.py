"""s3-bucket-ssl-requests-only - bucket policy without a SecureTransport deny."""

from __future__ import annotations

import json
from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.policies import public_bucket_policy, to_json
from configdrill.provision import create_bucket, disable_bucket_public_access_block
from configdrill.settings import Settings

META = {
    "rule": "s3-bucket-ssl-requests-only",
    "title": "S3 bucket policy does not require SSL",
    "service": "s3",
    "resource_type": "AWS::S3::Bucket",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    s3 = clients["s3"]
    bucket = create_bucket(settings, clients, ledger, rule=META["rule"], prefix="ssl-test")
    disable_bucket_public_access_block(s3, bucket)
    s3.put_bucket_policy(Bucket=bucket, Policy=to_json(public_bucket_policy(bucket)))
    return {"bucket": bucket}


def denies_insecure_transport(document: Dict[str, Any]) -> bool:
    for entry in document.get("Statement", []):
        condition = entry.get("Condition", {}).get("Bool", {})
        if entry.get("Effect") == "Deny" and str(condition.get("aws:SecureTransport")).lower() == "false":
            return True
    return False


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    document = json.loads(clients["s3"].get_bucket_policy(Bucket=state["bucket"])["Policy"])
    enforced = denies_insecure_transport(document)
    return {
        "compliant": enforced,
        "evidence": {"bucket": state["bucket"], "secure_transport_enforced": enforced},
    }
