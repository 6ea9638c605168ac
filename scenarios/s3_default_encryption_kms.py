"""s3-default-encryption-kms - bucket encrypted with SSE-S3 instead of SSE-KMS."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_bucket
from configdrill.settings import Settings

META = {
    "rule": "s3-default-encryption-kms",
    "title": "S3 bucket default encryption does not use KMS",
    "service": "s3",
    "resource_type": "AWS::S3::Bucket",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    s3 = clients["s3"]
    bucket = create_bucket(settings, clients, ledger, rule=META["rule"], prefix="sse-s3-test")
    s3.put_bucket_encryption(
        Bucket=bucket,
        ServerSideEncryptionConfiguration={
            "Rules": [{"ApplyServerSideEncryptionByDefault": {"SSEAlgorithm": "AES256"}}]
        },
    )
    return {"bucket": bucket}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    config = clients["s3"].get_bucket_encryption(Bucket=state["bucket"])["ServerSideEncryptionConfiguration"]
    algorithms = [
        rule.get("ApplyServerSideEncryptionByDefault", {}).get("SSEAlgorithm") for rule in config.get("Rules", [])
    ]
    return {
        "compliant": any(algorithm in {"aws:kms", "aws:kms:dsse"} for algorithm in algorithms),
        "evidence": {"bucket": state["bucket"], "algorithms": algorithms},
    }
