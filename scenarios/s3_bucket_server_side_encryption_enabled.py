"""
s3-bucket-server-side-encryption-enabled - bucket with its default encryption removed.

S3 has applied SSE-S3 to every new bucket since January 2023, and deleting the
encryption configuration only resets it to that default. In current regions
the drill therefore reports COMPLIANT; the inspection still distinguishes a
missing configuration for older buckets and other partitions.
"""

from __future__ import annotations

from typing import Any, Dict, List

from botocore.exceptions import ClientError

from configdrill.ledger import ResourceLedger
from configdrill.polling import error_code
from configdrill.provision import create_bucket
from configdrill.settings import Settings

META = {
    "rule": "s3-bucket-server-side-encryption-enabled",
    "title": "S3 bucket default encryption missing",
    "service": "s3",
    "resource_type": "AWS::S3::Bucket",
    "required_env": [],
}

NO_ENCRYPTION = "ServerSideEncryptionConfigurationNotFoundError"


def encryption_algorithms(s3: Any, bucket: str) -> List[str]:
    try:
        config = s3.get_bucket_encryption(Bucket=bucket)["ServerSideEncryptionConfiguration"]
    except ClientError as exc:
        if error_code(exc) != NO_ENCRYPTION:
            raise
        return []
    return [
        rule.get("ApplyServerSideEncryptionByDefault", {}).get("SSEAlgorithm")
        for rule in config.get("Rules", [])
        if rule.get("ApplyServerSideEncryptionByDefault")
    ]


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    bucket = create_bucket(settings, clients, ledger, rule=META["rule"], prefix="no-sse-test")
    clients["s3"].delete_bucket_encryption(Bucket=bucket)
    return {"bucket": bucket}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    algorithms = encryption_algorithms(clients["s3"], state["bucket"])
    return {"compliant": bool(algorithms), "evidence": {"bucket": state["bucket"], "algorithms": algorithms}}
