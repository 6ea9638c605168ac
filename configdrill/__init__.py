"""Provision short-lived non-compliant AWS resources to exercise AWS Config rules."""

__version__ = "0.1.0"
