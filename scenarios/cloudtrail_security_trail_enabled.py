"""
cloudtrail-security-trail-enabled - trail missing the security best practices.

A security trail is multi-region, records global service and read/write
management events, validates log files and encrypts them with KMS.
"""

from __future__ import annotations

from typing import Any, Dict, List

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_trail, create_trail_bucket
from configdrill.settings import Settings

from scenarios.cloud_trail_log_file_validation_enabled import describe_trail

META = {
    "rule": "cloudtrail-security-trail-enabled",
    "title": "No CloudTrail trail meets security best practices",
    "service": "cloudtrail",
    "resource_type": "AWS::::Account",
    "required_env": [],
}


def security_trail_gaps(trail: Dict[str, Any], selectors: Dict[str, Any]) -> List[str]:
    gaps = []
    if not trail.get("IsMultiRegionTrail"):
        gaps.append("single-region")
    if not trail.get("IncludeGlobalServiceEvents"):
        gaps.append("no global service events")
    if not trail.get("LogFileValidationEnabled"):
        gaps.append("log file validation off")
    if not trail.get("KmsKeyId"):
        gaps.append("not KMS encrypted")
    basic = selectors.get("EventSelectors") or []
    if basic and not any(
        item.get("IncludeManagementEvents") and item.get("ReadWriteType") == "All" for item in basic
    ):
        gaps.append("management events not fully recorded")
    return gaps


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    bucket = create_trail_bucket(settings, clients, ledger, rule=META["rule"])
    trail = create_trail(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="weak-security-trail",
        bucket=bucket,
        IsMultiRegionTrail=False,
        EnableLogFileValidation=False,
    )
    return {"trail": trail["Name"], "bucket": bucket}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    cloudtrail = clients["cloudtrail"]
    gaps = security_trail_gaps(
        describe_trail(cloudtrail, state["trail"]), cloudtrail.get_event_selectors(TrailName=state["trail"])
    )
    return {"compliant": not gaps, "evidence": {"trail": state["trail"], "gaps": gaps}}
