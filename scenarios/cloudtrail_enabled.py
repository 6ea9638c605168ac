"""
cloudtrail-enabled - no trail logging in the region.

This is an account-level rule, so the scenario pauses logging on every trail
whose home is the drill region and records a restore step that starts each
one again. Trails owned by another account (organization trails) are left
alone and keep the account compliant.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from configdrill.clients import resolve_account_id
from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

logger = logging.getLogger(__name__)

META = {
    "rule": "cloudtrail-enabled",
    "title": "CloudTrail not enabled",
    "service": "cloudtrail",
    "resource_type": "AWS::::Account",
    "required_env": [],
}


def logging_trails(cloudtrail: Any) -> List[Dict[str, Any]]:
    trails = cloudtrail.describe_trails(includeShadowTrails=False).get("trailList", [])
    return [trail for trail in trails if cloudtrail.get_trail_status(Name=trail["TrailARN"]).get("IsLogging")]


def _owned_by(trail: Dict[str, Any], account_id: str) -> bool:
    return trail["TrailARN"].split(":")[4] == account_id


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    cloudtrail = clients["cloudtrail"]
    account_id = resolve_account_id(settings, clients)
    paused: List[str] = []
    for trail in logging_trails(cloudtrail):
        arn = trail["TrailARN"]
        if not _owned_by(trail, account_id):
            logger.warning("Trail %s belongs to another account; leaving it running", trail["Name"])
            continue
        cloudtrail.stop_logging(Name=arn)
        ledger.restore("cloudtrail:trail", trail["Name"], lambda arn=arn: cloudtrail.start_logging(Name=arn))
        paused.append(trail["Name"])
    return {"paused_trails": paused}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    active = [trail["Name"] for trail in logging_trails(clients["cloudtrail"])]
    return {"compliant": bool(active), "evidence": {"logging_trails": active, "paused_trails": state["paused_trails"]}}
