import sys
from pathlib import Path

import pytest


def _ensure_repo_root() -> None:
    root_path = Path(__file__).resolve().parents[1]
    root_str = str(root_path)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)


_ensure_repo_root()

from configdrill.settings import Settings  # noqa: E402


def make_settings(**overrides) -> Settings:
    values = dict(
        aws_region="us-east-1",
        aws_access_key_id="AKIDEXAMPLE",
        aws_secret_access_key="not-a-real-secret",
        account_id="123456789012",
        hold_seconds=0,
        poll_interval_seconds=0,
        poll_max_attempts=3,
        sweep_delay_seconds=0,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()
