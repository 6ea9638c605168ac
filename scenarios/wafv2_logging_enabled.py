"""wafv2-logging-enabled - regional web ACL without a logging configuration."""

from __future__ import annotations

from typing import Any, Dict

from botocore.exceptions import ClientError

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, tag_list, unique_name
from configdrill.polling import error_code
from configdrill.settings import Settings

META = {
    "rule": "wafv2-logging-enabled",
    "title": "WAFv2 web ACL logging disabled",
    "service": "wafv2",
    "resource_type": "AWS::WAFv2::WebACL",
    "required_env": [],
}

SCOPE = "REGIONAL"


def visibility(name: str) -> Dict[str, Any]:
    return {"SampledRequestsEnabled": True, "CloudWatchMetricsEnabled": True, "MetricName": name.replace("-", "")}


def delete_web_acl(wafv2: Any, name: str, acl_id: str) -> None:
    """Deletion needs the current lock token, which changes on every update."""
    lock_token = wafv2.get_web_acl(Name=name, Scope=SCOPE, Id=acl_id)["LockToken"]
    wafv2.delete_web_acl(Name=name, Scope=SCOPE, Id=acl_id, LockToken=lock_token)


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    wafv2 = clients["wafv2"]
    name = unique_name("unlogged-acl")
    summary = wafv2.create_web_acl(
        Name=name,
        Scope=SCOPE,
        DefaultAction={"Allow": {}},
        Description="config-drill web ACL without logging",
        Rules=[
            {
                "Name": "rate-limit",
                "Priority": 0,
                "Statement": {"RateBasedStatement": {"Limit": 2000, "AggregateKeyType": "IP"}},
                "Action": {"Block": {}},
                "VisibilityConfig": visibility(f"{name}-rate"),
            }
        ],
        VisibilityConfig=visibility(name),
        Tags=tag_list(drill_tags(settings, META["rule"])),
    )["Summary"]
    acl_id = summary["Id"]
    ledger.track("wafv2:webacl", name, lambda: delete_web_acl(wafv2, name, acl_id), arn=summary["ARN"])
    return {"web_acl_arn": summary["ARN"], "name": name}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    try:
        clients["wafv2"].get_logging_configuration(ResourceArn=state["web_acl_arn"])
        logging_enabled = True
    except ClientError as exc:
        if error_code(exc) != "WAFNonexistentItemException":
            raise
        logging_enabled = False
    return {"compliant": logging_enabled, "evidence": {"web_acl": state["name"], "logging_enabled": logging_enabled}}
