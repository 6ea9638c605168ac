"""acm-certificate-expiration-check - DNS validated certificate left pending validation."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, epoch_millis, tag_list
from configdrill.settings import Settings

META = {
    "rule": "acm-certificate-expiration-check",
    "title": "ACM certificate not issued or close to expiry",
    "service": "acm",
    "resource_type": "AWS::ACM::Certificate",
    "required_env": ["DOMAIN_NAME"],
}

DAYS_TO_EXPIRATION = 14


def days_until(not_after: Optional[datetime], now: Optional[datetime] = None) -> Optional[int]:
    if not_after is None:
        return None
    now = now or datetime.now(timezone.utc)
    return (not_after - now).days


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    acm = clients["acm"]
    arn = acm.request_certificate(
        DomainName=settings.domain_name,
        ValidationMethod="DNS",
        IdempotencyToken=f"drill{epoch_millis()}"[:32],
        Tags=tag_list(drill_tags(settings, META["rule"])),
    )["CertificateArn"]
    ledger.track("acm:certificate", arn.rsplit("/", 1)[-1], lambda: acm.delete_certificate(CertificateArn=arn), arn=arn)
    return {"certificate_arn": arn}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    certificate = clients["acm"].describe_certificate(CertificateArn=state["certificate_arn"])["Certificate"]
    status = certificate.get("Status")
    remaining = days_until(certificate.get("NotAfter"))
    return {
        "compliant": status == "ISSUED" and remaining is not None and remaining >= DAYS_TO_EXPIRATION,
        "evidence": {"certificate_arn": state["certificate_arn"], "status": status, "days_to_expiration": remaining},
    }
