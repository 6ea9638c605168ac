"""
guardduty-enabled-centralized - GuardDuty detector suspended in the region.

An existing detector is suspended and re-enabled during teardown, so its
findings history survives the drill. Without one, a disabled detector is
created and deleted afterwards.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags
from configdrill.settings import Settings

logger = logging.getLogger(__name__)

META = {
    "rule": "guardduty-enabled-centralized",
    "title": "GuardDuty detector disabled",
    "service": "guardduty",
    "resource_type": "AWS::::Account",
    "required_env": [],
}


def detector_ids(guardduty: Any) -> List[str]:
    ids: List[str] = []
    for page in guardduty.get_paginator("list_detectors").paginate():
        ids.extend(page.get("DetectorIds", []))
    return ids


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    guardduty = clients["guardduty"]
    existing = detector_ids(guardduty)
    if existing:
        detector_id = existing[0]
        guardduty.update_detector(DetectorId=detector_id, Enable=False)
        ledger.restore(
            "guardduty:detector",
            detector_id,
            lambda: guardduty.update_detector(DetectorId=detector_id, Enable=True),
            note="re-enable",
        )
        logger.info("Suspended existing GuardDuty detector %s", detector_id)
        return {"detector_id": detector_id, "created": False}
    detector_id = guardduty.create_detector(Enable=False, Tags=drill_tags(settings, META["rule"]))["DetectorId"]
    ledger.track("guardduty:detector", detector_id, lambda: guardduty.delete_detector(DetectorId=detector_id))
    return {"detector_id": detector_id, "created": True}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    status = clients["guardduty"].get_detector(DetectorId=state["detector_id"]).get("Status")
    return {"compliant": status == "ENABLED", "evidence": {"detector_id": state["detector_id"], "status": status}}
