"""Policy runs and dry-run simulation.

A run takes one policy, evaluates every asset against the organization's full
active policy set (first match wins), applies the policy's actions to the
assets it won, and records a PolicyExecutionLog. Per-asset failures end up in
the log's ``errors`` and never abort the run.
"""

from __future__ import annotations

import asyncio
import calendar
import time
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta, timezone

import structlog

from syncops_lifecycle.config import Settings
from syncops_lifecycle.costs import calculate_monthly_storage_cost, calculate_storage_cost_savings
from syncops_lifecycle.evaluator import match_policy_for_asset
from syncops_lifecycle.exceptions import PolicyNotFoundError, TransientStorageError
from syncops_lifecycle.models import (
    AssetContext,
    ExecutionStatus,
    PolicyActionConfig,
    PolicyActionType,
    PolicyExecutionLog,
    PolicySchedule,
    RunFrequency,
    SimulationResult,
    StorageLifecyclePolicy,
    StorageTier,
    TierBreakdown,
)
from syncops_lifecycle.storage import StorageBackend
from syncops_lifecycle.store import PolicyStore
from syncops_lifecycle.utils import retry_on_failure
from syncops_lifecycle.validation import validate_storage_policy

logger = structlog.get_logger()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(moment: datetime | None) -> datetime:
    """Current time when ``moment`` is None; naive datetimes are taken as UTC."""
    if moment is None:
        return _now()
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def determine_run_status(
    assets_evaluated: int,
    assets_transitioned: int,
    errors: Sequence[str],
) -> ExecutionStatus:
    """Classify a run.

    PARTIAL when some but not all evaluated assets were actioned and something
    failed; FAILED when nothing was actioned and something failed; SUCCESS
    otherwise.
    """

    if errors and 0 < assets_transitioned < assets_evaluated:
        return ExecutionStatus.PARTIAL
    if errors and assets_transitioned == 0:
        return ExecutionStatus.FAILED
    return ExecutionStatus.SUCCESS


def _add_month(moment: datetime) -> datetime:
    year = moment.year + moment.month // 12
    month = moment.month % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def compute_next_run_at(frequency: str, from_time: datetime) -> datetime | None:
    """Next scheduled run after ``from_time``; None for an unknown frequency."""

    if frequency == RunFrequency.HOURLY.value:
        return from_time + timedelta(hours=1)
    if frequency == RunFrequency.DAILY.value:
        return from_time + timedelta(days=1)
    if frequency == RunFrequency.WEEKLY.value:
        return from_time + timedelta(weeks=1)
    if frequency == RunFrequency.MONTHLY.value:
        return _add_month(from_time)
    return None


def resulting_tier(action: PolicyActionConfig) -> str | None:
    """Tier an asset ends up in after ``action``, or None if the tier is unchanged."""

    if action.type == PolicyActionType.TRANSITION.value:
        return action.target_tier
    if action.type == PolicyActionType.ARCHIVE.value:
        return StorageTier.DEEP_ARCHIVE.value
    if action.type == PolicyActionType.RESTORE.value:
        return StorageTier.HOT.value
    return None


def projected_savings(asset: AssetContext, actions: Iterable[PolicyActionConfig]) -> float:
    """Monthly savings from walking the asset through ``actions`` in order."""

    tier = asset.current_storage_tier
    size = asset.file_size or 0
    savings = 0.0
    for action in actions:
        if action.type == PolicyActionType.DELETE.value:
            if tier:
                savings += calculate_monthly_storage_cost(tier, size)
            break
        target = resulting_tier(action)
        if target is None:
            continue
        if tier:
            savings += calculate_storage_cost_savings(tier, target, size)
        tier = target
    return savings


class PolicyRunner:
    """Executes lifecycle policies against a set of assets.

    The runner is the only stateful piece: it reads policies from the store,
    writes logs and schedule timestamps back, and pushes actions to the storage
    backend. Policy matching itself is delegated to the pure evaluator.
    """

    def __init__(
        self,
        store: PolicyStore,
        backend: StorageBackend,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            store: Source of policies and sink for execution logs.
            backend: Storage backend that applies actions.
            settings: Application settings. If None, uses default settings.
        """
        from syncops_lifecycle.config import get_settings

        self.settings = settings or get_settings()
        self._store = store
        self._backend = backend
        self._apply = retry_on_failure(
            max_retries=self.settings.max_retries,
            delay=self.settings.retry_delay_seconds,
            retry_on=(TransientStorageError,),
        )(backend.apply_action)

    async def run_policy(
        self,
        policy_id: str,
        assets: Sequence[AssetContext],
        *,
        now: datetime | None = None,
    ) -> PolicyExecutionLog:
        """Run one policy now and record its execution log.

        Args:
            policy_id: Policy to run.
            assets: Flattened asset snapshots of the policy's organization.
            now: Run timestamp; defaults to the current UTC time. A naive
                datetime is taken as UTC.

        Returns:
            The stored PolicyExecutionLog.

        Raises:
            PolicyNotFoundError: If the policy does not exist or was deleted.
        """

        policy = self._store.get(policy_id)
        if policy is None:
            raise PolicyNotFoundError(f"Unknown policy_id: {policy_id}")

        executed_at = _as_utc(now)
        started = time.perf_counter()
        logger.info("policy_run_started", policy_id=policy.id, asset_count=len(assets))

        errors: list[str] = []
        transitioned = 0
        savings = 0.0

        validation = validate_storage_policy(policy)
        if not validation.valid:
            errors.extend(validation.errors)
        elif not policy.is_active:
            logger.warning("policy_run_inactive", policy_id=policy.id)
        else:
            policy_set = self._store.list(policy.organization_id, include_inactive=False)
            targets = [a for a in assets if self._wins(policy, a, policy_set)]
            semaphore = asyncio.Semaphore(self.settings.max_concurrency)

            async def process(asset: AssetContext) -> tuple[bool, float, str | None]:
                async with semaphore:
                    return await self._apply_actions(policy, asset)

            for ok, asset_savings, error in await asyncio.gather(*(process(a) for a in targets)):
                if ok:
                    transitioned += 1
                    savings += asset_savings
                elif error:
                    errors.append(error)

        log = PolicyExecutionLog(
            policy_id=policy.id,
            policy_name=policy.name,
            organization_id=policy.organization_id,
            executed_at=executed_at,
            status=determine_run_status(len(assets), transitioned, errors),
            assets_evaluated=len(assets),
            assets_transitioned=transitioned,
            errors=errors,
            cost_savings_achieved=round(savings, 4),
            execution_time_ms=int((time.perf_counter() - started) * 1000),
        )
        self._store.append_log(log)
        self._store.update_schedule(
            policy.id,
            PolicySchedule(
                run_frequency=policy.schedule.run_frequency,
                last_run_at=executed_at,
                next_run_at=compute_next_run_at(policy.schedule.run_frequency, executed_at),
            ),
        )

        logger.info(
            "policy_run_completed",
            policy_id=policy.id,
            status=log.status.value,
            assets_evaluated=log.assets_evaluated,
            assets_transitioned=log.assets_transitioned,
            error_count=len(errors),
            execution_time_ms=log.execution_time_ms,
        )
        return log

    async def run_due_policies(
        self,
        organization_id: str,
        assets: Sequence[AssetContext],
        *,
        now: datetime | None = None,
    ) -> list[PolicyExecutionLog]:
        """Run every active policy whose next run is due (or was never scheduled).

        Policies run one after another in priority order so that a lock applied
        by a higher-precedence policy is in place before later policies run.
        """

        moment = _as_utc(now)
        due = [
            p
            for p in self._store.list(organization_id, include_inactive=False)
            if p.schedule.next_run_at is None or p.schedule.next_run_at <= moment
        ]
        due.sort(key=lambda p: p.priority)

        logs = []
        for policy in due:
            logs.append(await self.run_policy(policy.id, assets, now=moment))
        return logs

    def _wins(
        self,
        policy: StorageLifecyclePolicy,
        asset: AssetContext,
        policy_set: list[StorageLifecyclePolicy],
    ) -> bool:
        winner = match_policy_for_asset(asset, policy_set)
        return winner is not None and winner.id == policy.id

    async def _apply_actions(
        self,
        policy: StorageLifecyclePolicy,
        asset: AssetContext,
    ) -> tuple[bool, float, str | None]:
        applied: list[str] = []
        for action in policy.actions:
            try:
                await asyncio.to_thread(self._apply, asset, action)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "policy_action_failed",
                    policy_id=policy.id,
                    asset_id=asset.asset_id,
                    action=action.type,
                    applied_actions=applied,
                    error=str(exc),
                )
                error = f"{asset.asset_id}: {exc}"
                # Earlier actions stay in effect; the backend has no rollback.
                if applied:
                    error += f" (already applied: {', '.join(applied)})"
                return False, 0.0, error
            applied.append(action.type)
        return True, projected_savings(asset, policy.actions), None


def simulate_policy(
    policy: StorageLifecyclePolicy,
    assets: Sequence[AssetContext],
    policies: Iterable[StorageLifecyclePolicy] | None = None,
) -> SimulationResult:
    """Project what ``policy`` would do without touching storage.

    The simulated policy is treated as active so drafts can be previewed.
    When ``policies`` is given, the policy competes with them under
    first-match-wins; otherwise it is evaluated on its own.
    """

    candidate = policy.model_copy(update={"is_active": True})
    policy_set = [p for p in (policies or []) if p.id != policy.id]
    policy_set.append(candidate)

    affected: list[AssetContext] = []
    for asset in assets:
        winner = match_policy_for_asset(asset, policy_set)
        if winner is not None and winner.id == candidate.id:
            affected.append(asset)

    breakdown: dict[str, TierBreakdown] = {}
    monthly = 0.0
    total_bytes = 0
    for asset in affected:
        size = asset.file_size or 0
        total_bytes += size
        monthly += projected_savings(asset, candidate.actions)
        tier = asset.current_storage_tier or "UNKNOWN"
        entry = breakdown.setdefault(tier, TierBreakdown(tier=tier))
        entry.count += 1
        entry.bytes += size

    return SimulationResult(
        policy=policy,
        assets_evaluated=len(assets),
        affected_assets=len(affected),
        affected_asset_ids=[a.asset_id for a in affected],
        total_bytes=total_bytes,
        estimated_monthly_savings=monthly,
        estimated_annual_savings=monthly * 12,
        asset_breakdown=list(breakdown.values()),
    )
