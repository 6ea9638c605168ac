"""s3-bucket-replication-enabled - versioned bucket with no replication rules."""

from __future__ import annotations

from typing import Any, Dict

from botocore.exceptions import ClientError

from configdrill.ledger import ResourceLedger
from configdrill.polling import error_code
from configdrill.provision import create_bucket
from configdrill.settings import Settings

META = {
    "rule": "s3-bucket-replication-enabled",
    "title": "S3 bucket without replication",
    "service": "s3",
    "resource_type": "AWS::S3::Bucket",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    s3 = clients["s3"]
    bucket = create_bucket(settings, clients, ledger, rule=META["rule"], prefix="replication-test")
    s3.put_bucket_versioning(Bucket=bucket, VersioningConfiguration={"Status": "Enabled"})
    return {"bucket": bucket}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    try:
        rules = clients["s3"].get_bucket_replication(Bucket=state["bucket"])["ReplicationConfiguration"]["Rules"]
    except ClientError as exc:
        if error_code(exc) != "ReplicationConfigurationNotFoundError":
            raise
        rules = []
    return {
        "compliant": bool(rules),
        "evidence": {"bucket": state["bucket"], "replication_rules": len(rules)},
    }
