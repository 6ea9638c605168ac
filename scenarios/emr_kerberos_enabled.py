"""emr-kerberos-enabled - cluster launched without a Kerberos security configuration."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.emr_master_no_public_ip import launch_cluster

META = {
    "rule": "emr-kerberos-enabled",
    "title": "EMR cluster without Kerberos",
    "service": "emr",
    "resource_type": "AWS::EMR::Cluster",
    "required_env": [],
    "hold_seconds": 30,
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    subnet_id = settings.subnet_ids[0] if settings.subnet_ids else None
    cluster_id = launch_cluster(
        settings, clients, ledger, rule=META["rule"], prefix="no-kerberos-cluster", subnet_id=subnet_id
    )
    return {"cluster_id": cluster_id}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    cluster = clients["emr"].describe_cluster(ClusterId=state["cluster_id"])["Cluster"]
    realm = cluster.get("KerberosAttributes", {}).get("Realm")
    return {
        "compliant": bool(realm),
        "evidence": {
            "cluster_id": state["cluster_id"],
            "realm": realm,
            "security_configuration": cluster.get("SecurityConfiguration"),
        },
    }
