"""Builders and analysers for IAM, S3 and resource policy documents.

Every builder returns a plain dict with ``Version`` 2012-10-17 and a non-empty
``Statement`` list, ready for ``json.dumps``.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

POLICY_VERSION = "2012-10-17"

BLOCKED_KMS_ACTIONS = ("kms:Decrypt", "kms:ReEncryptFrom")

Statement = Dict[str, Any]


def statement(
    actions: Union[str, Sequence[str]],
    resources: Union[str, Sequence[str], None] = "*",
    *,
    effect: str = "Allow",
    principal: Any = None,
    condition: Optional[Dict[str, Any]] = None,
    sid: Optional[str] = None,
) -> Statement:
    if effect not in {"Allow", "Deny"}:
        raise ValueError(f"effect must be Allow or Deny, got {effect!r}")
    entry: Statement = {}
    if sid:
        entry["Sid"] = sid
    entry["Effect"] = effect
    if principal is not None:
        entry["Principal"] = principal
    entry["Action"] = actions if isinstance(actions, str) else list(actions)
    if resources is not None:
        entry["Resource"] = resources if isinstance(resources, str) else list(resources)
    if condition:
        entry["Condition"] = condition
    return entry


def policy_document(*statements: Statement) -> Dict[str, Any]:
    if not statements:
        raise ValueError("a policy document needs at least one statement")
    return {"Version": POLICY_VERSION, "Statement": list(statements)}


def to_json(document: Dict[str, Any]) -> str:
    return json.dumps(document)


def assume_role_policy(service: str) -> Dict[str, Any]:
    return policy_document(
        statement("sts:AssumeRole", None, principal={"Service": service}),
    )


def admin_access_policy() -> Dict[str, Any]:
    return policy_document(statement("*", "*"))


def full_access_policy(service: str = "s3") -> Dict[str, Any]:
    return policy_document(statement(f"{service}:*", "*"))


def blocked_kms_policy() -> Dict[str, Any]:
    return policy_document(
        statement(["kms:Decrypt", "kms:ReEncryptFrom", "kms:ReEncryptTo", "kms:CreateGrant", "kms:RetireGrant"], "*"),
    )


def read_only_policy() -> Dict[str, Any]:
    return policy_document(statement(["s3:ListAllMyBuckets", "s3:GetBucketLocation"], "*"))


def public_bucket_policy(bucket: str, actions: Sequence[str] = ("s3:GetObject",)) -> Dict[str, Any]:
    return policy_document(
        statement(list(actions), f"arn:aws:s3:::{bucket}/*", principal="*", sid="PublicAccess"),
    )


def cross_account_bucket_policy(bucket: str, account_id: str) -> Dict[str, Any]:
    return policy_document(
        statement(
            "s3:GetObject",
            f"arn:aws:s3:::{bucket}/*",
            principal={"AWS": f"arn:aws:iam::{account_id}:root"},
            sid="ForeignAccountRead",
        ),
    )


def log_delivery_bucket_policy(bucket: str, source_account: str) -> Dict[str, Any]:
    return policy_document(
        statement(
            "s3:PutObject",
            f"arn:aws:s3:::{bucket}/*",
            principal={"Service": "logging.s3.amazonaws.com"},
            condition={"StringEquals": {"aws:SourceAccount": source_account}},
            sid="S3ServerAccessLogsPolicy",
        ),
    )


def cloudtrail_bucket_policy(bucket: str, account_id: str) -> Dict[str, Any]:
    return policy_document(
        statement(
            "s3:GetBucketAcl",
            f"arn:aws:s3:::{bucket}",
            principal={"Service": "cloudtrail.amazonaws.com"},
            sid="AWSCloudTrailAclCheck",
        ),
        statement(
            "s3:PutObject",
            f"arn:aws:s3:::{bucket}/AWSLogs/{account_id}/*",
            principal={"Service": "cloudtrail.amazonaws.com"},
            condition={"StringEquals": {"s3:x-amz-acl": "bucket-owner-full-control"}},
            sid="AWSCloudTrailWrite",
        ),
    )


def secure_transport_topic_policy(topic_arn: str) -> Dict[str, Any]:
    return policy_document(
        statement(
            "SNS:Publish",
            topic_arn,
            effect="Deny",
            principal="*",
            condition={"Bool": {"aws:SecureTransport": "false"}},
            sid="AllowPublishThroughSSLOnly",
        ),
    )


def key_policy(account_id: str) -> Dict[str, Any]:
    return policy_document(
        statement("kms:*", "*", principal={"AWS": f"arn:aws:iam::{account_id}:root"}, sid="EnableRootPermissions"),
    )


def opensearch_access_policy(domain_arn: str, allowed_ip: Optional[str] = None) -> Dict[str, Any]:
    condition = {"IpAddress": {"aws:SourceIp": [allowed_ip]}} if allowed_ip else None
    return policy_document(
        statement("es:*", f"{domain_arn}/*", principal={"AWS": "*"}, condition=condition),
    )


def logs_write_policy(region: str, account_id: str) -> Dict[str, Any]:
    return policy_document(
        statement(
            ["logs:CreateLogGroup", "logs:CreateLogStream", "logs:PutLogEvents"],
            f"arn:aws:logs:{region}:{account_id}:log-group:*",
        ),
    )


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _statements(document: Union[str, Dict[str, Any]]) -> Iterable[Statement]:
    if isinstance(document, str):
        document = json.loads(document)
    return _as_list(document.get("Statement"))


def admin_access_issues(document: Union[str, Dict[str, Any]]) -> List[str]:
    """Describe Allow statements that grant every action on every resource."""
    issues: List[str] = []
    for index, entry in enumerate(_statements(document)):
        if entry.get("Effect") != "Allow":
            continue
        actions = _as_list(entry.get("Action"))
        resources = _as_list(entry.get("Resource"))
        if "*" in actions and "*" in resources:
            issues.append(f"Statement {index} allows all actions on all resources")
    return issues


def full_access_actions(document: Union[str, Dict[str, Any]]) -> List[str]:
    """Return ``service:*`` actions granted by Allow statements."""
    found: List[str] = []
    for entry in _statements(document):
        if entry.get("Effect") != "Allow":
            continue
        for action in _as_list(entry.get("Action")):
            if action != "*" and action.endswith(":*") and action not in found:
                found.append(action)
    return found


def blocked_kms_actions(document: Union[str, Dict[str, Any]]) -> List[str]:
    """Return blocked KMS actions allowed on all resources."""
    found: List[str] = []
    for entry in _statements(document):
        if entry.get("Effect") != "Allow" or "*" not in _as_list(entry.get("Resource")):
            continue
        for action in _as_list(entry.get("Action")):
            for blocked in BLOCKED_KMS_ACTIONS:
                if _action_matches(action, blocked) and blocked not in found:
                    found.append(blocked)
    return found


def _action_matches(pattern: str, action: str) -> bool:
    pattern = pattern.lower()
    action = action.lower()
    if pattern in {"*", "kms:*"}:
        return True
    if pattern.endswith("*"):
        return action.startswith(pattern[:-1])
    return pattern == action
