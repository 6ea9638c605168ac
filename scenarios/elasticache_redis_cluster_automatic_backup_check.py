"""elasticache-redis-cluster-automatic-backup-check - Redis replication group with snapshots turned off."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, tag_list, unique_name
from configdrill.polling import wait_for_state, wait_until_gone
from configdrill.settings import Settings

META = {
    "rule": "elasticache-redis-cluster-automatic-backup-check",
    "title": "ElastiCache Redis without automatic backups",
    "service": "elasticache",
    "resource_type": "AWS::ElastiCache::ReplicationGroup",
    "required_env": [],
}

MIN_RETENTION_DAYS = 15


def describe_group(elasticache: Any, group_id: str) -> Dict[str, Any]:
    return elasticache.describe_replication_groups(ReplicationGroupId=group_id)["ReplicationGroups"][0]


def delete_replication_group(settings: Settings, elasticache: Any, group_id: str) -> None:
    elasticache.delete_replication_group(ReplicationGroupId=group_id)
    wait_until_gone(
        lambda: describe_group(elasticache, group_id),
        gone_codes={"ReplicationGroupNotFoundFault"},
        label=f"replication group {group_id}",
        **settings.poll_kwargs(factor=4),
    )


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    elasticache = clients["elasticache"]
    group_id = unique_name("no-backup-redis", max_length=40)
    group = elasticache.create_replication_group(
        ReplicationGroupId=group_id,
        ReplicationGroupDescription=f"config-drill {META['rule']}",
        Engine="redis",
        CacheNodeType="cache.t3.micro",
        NumCacheClusters=1,
        SnapshotRetentionLimit=0,
        Tags=tag_list(drill_tags(settings, META["rule"], group_id)),
    )["ReplicationGroup"]
    ledger.track(
        "elasticache:replicationgroup",
        group_id,
        lambda: delete_replication_group(settings, elasticache, group_id),
        arn=group.get("ARN"),
    )
    wait_for_state(
        lambda: describe_group(elasticache, group_id),
        target={"available"},
        status_of=lambda g: g["Status"],
        failure_states={"create-failed"},
        retry_codes={"ReplicationGroupNotFoundFault"},
        label=f"replication group {group_id}",
        **settings.poll_kwargs(factor=4),
    )
    return {"replication_group_id": group_id}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    group = describe_group(clients["elasticache"], state["replication_group_id"])
    retention = group.get("SnapshotRetentionLimit", 0)
    return {
        "compliant": retention >= MIN_RETENTION_DAYS,
        "evidence": {
            "replication_group_id": state["replication_group_id"],
            "snapshot_retention_days": retention,
            "minimum_days": MIN_RETENTION_DAYS,
        },
    }
