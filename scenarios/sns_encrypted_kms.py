"""sns-encrypted-kms - topic without server-side encryption."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, tag_list, unique_name
from configdrill.settings import Settings

META = {
    "rule": "sns-encrypted-kms",
    "title": "SNS topic not encrypted with KMS",
    "service": "sns",
    "resource_type": "AWS::SNS::Topic",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    sns = clients["sns"]
    name = unique_name("unencrypted-topic", max_length=256)
    arn = sns.create_topic(Name=name, Tags=tag_list(drill_tags(settings, META["rule"])))["TopicArn"]
    ledger.track("sns:topic", name, lambda: sns.delete_topic(TopicArn=arn), arn=arn)
    return {"topic_arn": arn}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    attributes = clients["sns"].get_topic_attributes(TopicArn=state["topic_arn"]).get("Attributes", {})
    key_id = attributes.get("KmsMasterKeyId")
    return {"compliant": bool(key_id), "evidence": {"topic_arn": state["topic_arn"], "kms_master_key_id": key_id}}
