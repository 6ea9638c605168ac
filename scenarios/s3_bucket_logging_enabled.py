"""s3-bucket-logging-enabled - source bucket without server access logging.

A second bucket is prepared as a valid log destination so the only
difference from a compliant setup is the missing logging configuration.
"""

from __future__ import annotations

from typing import Any, Dict

from configdrill.clients import resolve_account_id
from configdrill.ledger import ResourceLedger
from configdrill.policies import log_delivery_bucket_policy, to_json
from configdrill.provision import create_bucket
from configdrill.settings import Settings

META = {
    "rule": "s3-bucket-logging-enabled",
    "title": "S3 bucket without server access logging",
    "service": "s3",
    "resource_type": "AWS::S3::Bucket",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    s3 = clients["s3"]
    account_id = resolve_account_id(settings, clients)
    log_bucket = create_bucket(settings, clients, ledger, rule=META["rule"], prefix="access-logs")
    s3.put_bucket_policy(Bucket=log_bucket, Policy=to_json(log_delivery_bucket_policy(log_bucket, account_id)))
    source_bucket = create_bucket(settings, clients, ledger, rule=META["rule"], prefix="logging-test")
    return {"bucket": source_bucket, "log_bucket": log_bucket}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    response = clients["s3"].get_bucket_logging(Bucket=state["bucket"])
    logging_enabled = response.get("LoggingEnabled")
    return {
        "compliant": bool(logging_enabled),
        "evidence": {"bucket": state["bucket"], "logging": logging_enabled or "disabled"},
    }
