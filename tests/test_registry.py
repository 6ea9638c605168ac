from pathlib import Path

from configdrill.settings import ENV_FIELDS
from scenarios.registry import MODULE_NAMES, SCENARIO_REGISTRY, scenarios_for_service

SCENARIO_DIR = Path(__file__).resolve().parents[1] / "scenarios"


def test_every_scenario_module_is_registered():
    files = {path.stem for path in SCENARIO_DIR.glob("*.py") if path.stem not in {"__init__", "registry"}}
    assert {name.rsplit(".", 1)[-1] for name in MODULE_NAMES} == files
    assert len(SCENARIO_REGISTRY) == len(files) == 124


def test_rule_names_match_module_names():
    for rule, module in SCENARIO_REGISTRY.items():
        assert module.__name__ == "scenarios." + rule.replace("-", "_")
        assert module.META["rule"] == rule


def test_scenario_contract():
    for rule, module in SCENARIO_REGISTRY.items():
        meta = module.META
        assert meta["title"], rule
        assert meta["service"], rule
        assert meta["resource_type"].startswith("AWS::"), rule
        assert callable(module.provision), rule
        assert callable(getattr(module, "inspect", None)), rule
        for name in meta["required_env"]:
            assert name in ENV_FIELDS, f"{rule} requires unknown {name}"


def test_required_env_declarations():
    assert SCENARIO_REGISTRY["acm-certificate-expiration-check"].META["required_env"] == ["DOMAIN_NAME"]
    assert SCENARIO_REGISTRY["emr-master-no-public-ip"].META["required_env"] == ["SUBNET_IDS"]
    assert SCENARIO_REGISTRY["emr-kerberos-enabled"].META["required_env"] == []
    assert SCENARIO_REGISTRY["s3-account-level-public-access-blocks-periodic"].META["required_env"] == [
        "AWS_ACCOUNT_ID"
    ]


def test_scenarios_for_service():
    iam = scenarios_for_service("IAM")
    assert len(iam) == 13
    assert "access-keys-rotated" in iam
    assert set(scenarios_for_service("s3")) >= {"s3-bucket-versioning-enabled", "s3-default-encryption-kms"}
    assert len(scenarios_for_service("redshift")) == 6
