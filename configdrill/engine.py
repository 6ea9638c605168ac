"""Scenario orchestration: validate, provision, hold, inspect, tear down."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from types import ModuleType
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .clients import ClientPool
from .ledger import ResourceLedger
from .models import BatchResult, BatchSummary, ScenarioResult
from .naming import mask_identifier
from .settings import ConfigurationError, Settings

logger = logging.getLogger(__name__)

DEFAULT_HOLD_SECONDS = 5.0

ClientFactory = Callable[[Settings], Mapping[str, Any]]


def _default_scenarios() -> Dict[str, ModuleType]:
    from scenarios.registry import SCENARIO_REGISTRY

    return dict(SCENARIO_REGISTRY)


class Engine:
    """Run drill scenarios one at a time and collect their results."""

    def __init__(
        self,
        settings: Settings,
        *,
        client_factory: Optional[ClientFactory] = None,
        scenarios: Optional[Mapping[str, ModuleType]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self._scenarios: Dict[str, ModuleType] = dict(scenarios) if scenarios is not None else _default_scenarios()
        self._client_factory: ClientFactory = client_factory or ClientPool
        self._clients: Optional[Mapping[str, Any]] = None
        self._sleep = sleep

    @property
    def scenario_ids(self) -> List[str]:
        return list(self._scenarios)

    def run(self, rules: Optional[Sequence[str]] = None) -> BatchResult:
        """Run the requested scenarios sequentially; a failing scenario never stops the batch."""
        started_at = datetime.now(timezone.utc)
        results: List[ScenarioResult] = []
        selected = self._resolve_rules(rules)
        for index, rule in enumerate(selected, start=1):
            logger.info("[%s/%s] Running scenario %s", index, len(selected), rule)
            results.append(self.run_scenario(rule))

        return BatchResult(
            account_id=self.settings.account_id,
            region=self.settings.aws_region,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
            results=results,
            summary=self._summarize(results),
        )

    def run_scenario(self, rule: str) -> ScenarioResult:
        module = self._scenarios[rule]
        meta = getattr(module, "META", {})
        started_at = datetime.now(timezone.utc)

        try:
            self.settings.require(*meta.get("required_env", ()))
        except ConfigurationError as exc:
            logger.error("Scenario %s is misconfigured: %s", rule, exc)
            return self._result(rule, meta, "MISCONFIGURED", started_at, error=str(exc))

        clients = self._client_pool()
        ledger = ResourceLedger(keep=self.settings.keep_resources, scope=rule)
        evidence: Dict[str, Any] = {}
        error: Optional[str] = None
        try:
            state = module.provision(settings=self.settings, clients=clients, ledger=ledger) or {}
            self._hold(rule, meta)
            status, evidence = self._inspect(rule, module, clients, state)
        except Exception as exc:  # reported as an ERROR result; teardown still runs
            logger.error("Scenario %s failed: %s", rule, exc)
            logger.debug("Scenario failure detail", exc_info=exc)
            status = "ERROR"
            error = str(exc)
        finally:
            ledger.teardown()

        result = self._result(
            rule,
            meta,
            status,
            started_at,
            evidence=evidence,
            resources=ledger.handles,
            cleanup_failures=list(ledger.failures),
            error=error,
        )
        logger.info("Scenario %s finished with %s in %ss", rule, result.status, result.duration_seconds)
        return result

    def _client_pool(self) -> Mapping[str, Any]:
        if self._clients is None:
            self._clients = self._client_factory(self.settings)
            if self.settings.account_id:
                logger.info(
                    "Using account %s in %s",
                    mask_identifier(self.settings.account_id),
                    self.settings.aws_region,
                )
        return self._clients

    def _resolve_rules(self, rules: Optional[Sequence[str]]) -> List[str]:
        if not rules:
            return list(self._scenarios)
        resolved: List[str] = []
        for item in rules:
            rule = item.strip().lower()
            if rule in self._scenarios:
                if rule not in resolved:
                    resolved.append(rule)
            else:
                logger.warning("Ignoring unknown scenario: %s", item)
        return resolved

    def _hold(self, rule: str, meta: Mapping[str, Any]) -> None:
        hold = self.settings.hold_seconds
        if hold is None:
            hold = float(meta.get("hold_seconds", DEFAULT_HOLD_SECONDS))
        if hold > 0:
            logger.info("Holding %s for %ss so AWS Config can record it", rule, hold)
            self._sleep(hold)

    def _inspect(
        self,
        rule: str,
        module: ModuleType,
        clients: Mapping[str, Any],
        state: Dict[str, Any],
    ) -> Tuple[str, Dict[str, Any]]:
        inspector = getattr(module, "inspect", None)
        if inspector is None:
            return "NOT_EVALUATED", {}
        try:
            verdict = inspector(settings=self.settings, clients=clients, state=state)
        except Exception as exc:
            logger.warning("Inspection of %s failed: %s", rule, exc)
            logger.debug("Inspection failure detail", exc_info=exc)
            return "NOT_EVALUATED", {"error": str(exc)}

        evidence = dict(verdict.get("evidence", {}))
        if verdict.get("compliant"):
            logger.warning("Scenario %s produced a COMPLIANT resource", rule)
            return "COMPLIANT", evidence
        logger.info("Scenario %s produced a NON_COMPLIANT resource", rule)
        return "NON_COMPLIANT", evidence

    def _result(
        self,
        rule: str,
        meta: Mapping[str, Any],
        status: str,
        started_at: datetime,
        **fields: Any,
    ) -> ScenarioResult:
        return ScenarioResult(
            rule=rule,
            title=meta.get("title", rule),
            service=meta.get("service", "unknown"),
            status=status,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
            **fields,
        )

    def _summarize(self, results: Sequence[ScenarioResult]) -> BatchSummary:
        summary = BatchSummary(total=len(results))
        for result in results:
            setattr(summary, result.status, getattr(summary, result.status) + 1)
            if result.cleanup_failures:
                summary.cleanup_failures += 1
        return summary
