"""cloudtrail-s3-dataevents-enabled - trail recording management events only."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_trail, create_trail_bucket
from configdrill.settings import Settings

META = {
    "rule": "cloudtrail-s3-dataevents-enabled",
    "title": "CloudTrail not logging S3 data events",
    "service": "cloudtrail",
    "resource_type": "AWS::CloudTrail::Trail",
    "required_env": [],
}

S3_OBJECT = "AWS::S3::Object"
MANAGEMENT_ONLY = [{"ReadWriteType": "All", "IncludeManagementEvents": True, "DataResources": []}]


def records_s3_data_events(selectors: Dict[str, Any]) -> bool:
    for selector in selectors.get("EventSelectors") or []:
        if any(resource.get("Type") == S3_OBJECT for resource in selector.get("DataResources", [])):
            return True
    for selector in selectors.get("AdvancedEventSelectors") or []:
        for field in selector.get("FieldSelectors", []):
            if field.get("Field") == "resources.type" and S3_OBJECT in field.get("Equals", []):
                return True
    return False


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    bucket = create_trail_bucket(settings, clients, ledger, rule=META["rule"])
    trail = create_trail(settings, clients, ledger, rule=META["rule"], prefix="no-data-events-trail", bucket=bucket)
    clients["cloudtrail"].put_event_selectors(TrailName=trail["Name"], EventSelectors=MANAGEMENT_ONLY)
    return {"trail": trail["Name"], "bucket": bucket}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    selectors = clients["cloudtrail"].get_event_selectors(TrailName=state["trail"])
    enabled = records_s3_data_events(selectors)
    return {"compliant": enabled, "evidence": {"trail": state["trail"], "s3_data_events": enabled}}
