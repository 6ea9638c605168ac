"""Environment variable loader for drill runs."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing or unusable."""


def _to_bool(value: str | bool | int) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _split_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


# Environment variable name -> Settings attribute, used by require().
ENV_FIELDS: Dict[str, str] = {
    "AWS_REGION": "aws_region",
    "AWS_ACCESS_KEY_ID": "aws_access_key_id",
    "AWS_SECRET_ACCESS_KEY": "aws_secret_access_key",
    "AWS_SESSION_TOKEN": "aws_session_token",
    "AWS_PROFILE": "aws_profile",
    "AWS_ACCOUNT_ID": "account_id",
    "VPC_ID": "vpc_id",
    "SUBNET_IDS": "subnet_ids",
    "EC2_AMI_ID": "ec2_ami_id",
    "CUSTOM_AMI_ID": "custom_ami_id",
    "SECURITY_CONFIGURATION": "security_configuration",
    "ROTATION_LAMBDA_ARN": "rotation_lambda_arn",
    "ALLOWED_IP": "allowed_ip",
    "DOMAIN_NAME": "domain_name",
}


@dataclass
class Settings:
    aws_region: str = field(default_factory=lambda: os.getenv("AWS_REGION", "us-east-1"))
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_session_token: Optional[str] = None
    aws_profile: Optional[str] = None
    account_id: Optional[str] = None
    vpc_id: Optional[str] = None
    subnet_ids: List[str] = field(default_factory=list)
    ec2_ami_id: Optional[str] = None
    custom_ami_id: Optional[str] = None
    security_configuration: Optional[str] = None
    rotation_lambda_arn: Optional[str] = None
    allowed_ip: str = "10.0.0.0/16"
    domain_name: Optional[str] = None
    save_credentials: bool = False
    credentials_dir: str = "."
    create_compliant_example: bool = False
    tag_key: str = "simulation-mas"
    tag_value: str = "true"
    hold_seconds: Optional[float] = None
    poll_interval_seconds: float = 5.0
    poll_max_attempts: int = 120
    keep_resources: bool = False
    sweep_delay_seconds: float = 1.0
    log_level: str = "INFO"
    _ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        env = env if env is not None else os.environ
        try:
            return cls(
                aws_region=env.get("AWS_REGION") or env.get("AWS_DEFAULT_REGION") or "us-east-1",
                aws_access_key_id=env.get("AWS_ACCESS_KEY_ID") or None,
                aws_secret_access_key=env.get("AWS_SECRET_ACCESS_KEY") or None,
                aws_session_token=env.get("AWS_SESSION_TOKEN") or None,
                aws_profile=env.get("AWS_PROFILE") or None,
                account_id=env.get("AWS_ACCOUNT_ID") or None,
                vpc_id=env.get("VPC_ID") or None,
                subnet_ids=_split_list(env.get("SUBNET_IDS")),
                ec2_ami_id=env.get("EC2_AMI_ID") or None,
                custom_ami_id=env.get("CUSTOM_AMI_ID") or None,
                security_configuration=env.get("SECURITY_CONFIGURATION") or None,
                rotation_lambda_arn=env.get("ROTATION_LAMBDA_ARN") or None,
                allowed_ip=env.get("ALLOWED_IP") or env.get("ALLOWED_IP_RANGE") or "10.0.0.0/16",
                domain_name=env.get("DOMAIN_NAME") or None,
                save_credentials=_to_bool(env.get("SAVE_CREDENTIALS", "false")),
                credentials_dir=env.get("CREDENTIALS_DIR", "."),
                create_compliant_example=_to_bool(env.get("CREATE_COMPLIANT_EXAMPLE", "false")),
                tag_key=env.get("DRILL_TAG_KEY", "simulation-mas"),
                tag_value=env.get("DRILL_TAG_VALUE", "true"),
                hold_seconds=_optional_float(env.get("HOLD_SECONDS")),
                poll_interval_seconds=float(env.get("POLL_INTERVAL_SECONDS", "5")),
                poll_max_attempts=int(env.get("POLL_MAX_ATTEMPTS", "120")),
                keep_resources=_to_bool(env.get("KEEP_RESOURCES", "false")),
                sweep_delay_seconds=float(env.get("SWEEP_DELAY_SECONDS", "1")),
                log_level=env.get("LOG_LEVEL", "INFO"),
            )
        except ValueError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "Settings":
        env = {key: str(value) for key, value in data.items()}
        return cls.from_env(env)

    def __post_init__(self) -> None:
        self.log_level = self.log_level.upper()
        if self.log_level not in self._ALLOWED_LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(self._ALLOWED_LOG_LEVELS)}")
        if not self.aws_region.strip():
            raise ValueError("AWS_REGION cannot be blank")
        if not self.tag_key.strip():
            raise ValueError("DRILL_TAG_KEY cannot be blank")
        if self.poll_interval_seconds < 0:
            raise ValueError("POLL_INTERVAL_SECONDS must be >= 0")
        if self.poll_max_attempts < 1:
            raise ValueError("POLL_MAX_ATTEMPTS must be >= 1")
        if self.hold_seconds is not None and self.hold_seconds < 0:
            raise ValueError("HOLD_SECONDS must be >= 0")
        if self.sweep_delay_seconds < 0:
            raise ValueError("SWEEP_DELAY_SECONDS must be >= 0")

    def missing(self, names: Iterable[str]) -> List[str]:
        """Return the environment variable names in ``names`` that have no value."""
        missing: List[str] = []
        for name in names:
            attribute = ENV_FIELDS.get(name)
            if attribute is None:
                raise KeyError(f"Unknown configuration variable: {name}")
            if not getattr(self, attribute):
                missing.append(name)
        return missing

    def require(self, *names: str) -> None:
        missing = self.missing(names)
        if missing:
            raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")

    def require_credentials(self) -> None:
        """Static keys or a named profile must be configured before any client is built."""
        if self.aws_profile:
            return
        self.require("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY")

    def poll_kwargs(self, factor: float = 1.0) -> Dict[str, float]:
        return {
            "interval": self.poll_interval_seconds * factor,
            "max_attempts": self.poll_max_attempts,
        }


def load_settings() -> Settings:
    """Load settings from environment variables."""
    return Settings.from_env()
