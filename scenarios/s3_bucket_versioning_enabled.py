"""s3-bucket-versioning-enabled - S3 bucket created without versioning."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_bucket
from configdrill.settings import Settings

META = {
    "rule": "s3-bucket-versioning-enabled",
    "title": "S3 bucket without versioning",
    "service": "s3",
    "resource_type": "AWS::S3::Bucket",
    "required_env": [],
}

TEST_OBJECTS = ("test-object-1.txt", "test-object-2.txt")


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    s3 = clients["s3"]
    bucket = create_bucket(settings, clients, ledger, rule=META["rule"], prefix="versioning-test")
    for key in TEST_OBJECTS:
        s3.put_object(Bucket=bucket, Key=key, Body=f"config-drill object {key}".encode("utf-8"))
    return {"bucket": bucket}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    response = clients["s3"].get_bucket_versioning(Bucket=state["bucket"])
    # Status is absent for buckets that never had versioning enabled
    status = response.get("Status", "Disabled")
    return {
        "compliant": status == "Enabled",
        "evidence": {"bucket": state["bucket"], "versioning": status},
    }
