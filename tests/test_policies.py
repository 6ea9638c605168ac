import json

import pytest

from configdrill.policies import (
    admin_access_issues,
    admin_access_policy,
    assume_role_policy,
    blocked_kms_actions,
    blocked_kms_policy,
    full_access_actions,
    full_access_policy,
    policy_document,
    public_bucket_policy,
    read_only_policy,
    statement,
    to_json,
)


def test_policy_document_requires_statements():
    with pytest.raises(ValueError):
        policy_document()
    document = policy_document(statement("s3:GetObject"))
    assert document["Version"] == "2012-10-17"
    assert document["Statement"][0] == {"Effect": "Allow", "Action": "s3:GetObject", "Resource": "*"}


def test_statement_rejects_unknown_effect():
    with pytest.raises(ValueError):
        statement("s3:*", effect="Maybe")


def test_assume_role_policy_has_service_principal():
    document = assume_role_policy("lambda.amazonaws.com")
    entry = document["Statement"][0]
    assert entry["Principal"] == {"Service": "lambda.amazonaws.com"}
    assert "Resource" not in entry


def test_public_bucket_policy_targets_objects():
    entry = public_bucket_policy("drill-bucket", ["s3:PutObject"])["Statement"][0]
    assert entry["Principal"] == "*"
    assert entry["Resource"] == "arn:aws:s3:::drill-bucket/*"


def test_admin_access_detection_accepts_json_strings():
    assert admin_access_issues(to_json(admin_access_policy())) == [
        "Statement 0 allows all actions on all resources"
    ]
    assert admin_access_issues(read_only_policy()) == []


def test_admin_access_ignores_wildcard_actions_on_a_single_resource():
    scoped = policy_document(statement("*", "arn:aws:s3:::drill-bucket"))
    assert admin_access_issues(scoped) == []
    mixed = policy_document(statement("*", ["arn:aws:s3:::drill-bucket", "*"]))
    assert admin_access_issues(mixed) == ["Statement 0 allows all actions on all resources"]


def test_full_access_detection():
    assert full_access_actions(full_access_policy("s3")) == ["s3:*"]
    assert full_access_actions(admin_access_policy()) == []


def test_blocked_kms_detection_matches_wildcards():
    assert blocked_kms_actions(blocked_kms_policy()) == ["kms:Decrypt", "kms:ReEncryptFrom"]
    wildcard = policy_document(statement("kms:ReEncrypt*", "*"))
    assert blocked_kms_actions(wildcard) == ["kms:ReEncryptFrom"]
    scoped = policy_document(statement("kms:Decrypt", "arn:aws:kms:us-east-1:123456789012:key/abc"))
    assert blocked_kms_actions(scoped) == []
    denied = policy_document(statement("kms:*", "*", effect="Deny"))
    assert blocked_kms_actions(json.dumps(denied)) == []
