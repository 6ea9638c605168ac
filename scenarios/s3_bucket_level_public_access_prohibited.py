"""s3-bucket-level-public-access-prohibited - bucket with every public access block flag off."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_bucket, disable_bucket_public_access_block
from configdrill.settings import Settings

META = {
    "rule": "s3-bucket-level-public-access-prohibited",
    "title": "S3 bucket-level public access block disabled",
    "service": "s3",
    "resource_type": "AWS::S3::Bucket",
    "required_env": [],
}

PAB_FLAGS = (
    "BlockPublicAcls",
    "IgnorePublicAcls",
    "BlockPublicPolicy",
    "RestrictPublicBuckets",
)


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    bucket = create_bucket(settings, clients, ledger, rule=META["rule"], prefix="bucket-pab-test")
    disable_bucket_public_access_block(clients["s3"], bucket)
    return {"bucket": bucket}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    config = clients["s3"].get_public_access_block(Bucket=state["bucket"]).get("PublicAccessBlockConfiguration", {})
    flags = {flag: bool(config.get(flag, False)) for flag in PAB_FLAGS}
    return {"compliant": all(flags.values()), "evidence": {"bucket": state["bucket"], **flags}}
