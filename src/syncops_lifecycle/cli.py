"""Command-line interface for SyncOps storage lifecycle policies.

This module provides the main entry point for the CLI application.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import structlog
from pydantic import TypeAdapter

from syncops_lifecycle import __version__
from syncops_lifecycle.config import get_settings
from syncops_lifecycle.costs import RESTORE_COSTS, STORAGE_TIER_COSTS
from syncops_lifecycle.exceptions import SyncOpsError
from syncops_lifecycle.execution import PolicyRunner, simulate_policy
from syncops_lifecycle.formatting import format_storage_currency, format_storage_file_size
from syncops_lifecycle.models import AssetContext, StorageLifecyclePolicy
from syncops_lifecycle.storage import InMemoryStorageBackend
from syncops_lifecycle.store import PolicyStore, open_store
from syncops_lifecycle.templates import STORAGE_POLICY_TEMPLATES, instantiate_template
from syncops_lifecycle.validation import validate_storage_policy

logger = structlog.get_logger()

_ASSETS = TypeAdapter(list[AssetContext])


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="syncops-lifecycle",
        description="SyncOps storage lifecycle policies",
    )
    parser.add_argument(
        "--org",
        default=None,
        help="Organization id (default: settings default_organization_id)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    policies_parser = subparsers.add_parser("policies", help="Manage lifecycle policies")
    policies_sub = policies_parser.add_subparsers(dest="policies_command", required=True)

    list_parser = policies_sub.add_parser("list", help="List policies in precedence order")
    list_parser.add_argument("--active-only", action="store_true", help="Hide inactive policies")

    policies_sub.add_parser("templates", help="Show the built-in policy templates")

    create_parser = policies_sub.add_parser("create", help="Create an inactive policy from a template")
    create_parser.add_argument("--template", type=int, required=True, help="Template number (see templates)")
    create_parser.add_argument("--created-by", default="cli", help="Author recorded on the policy")

    validate_parser = policies_sub.add_parser("validate", help="Validate a policy JSON file")
    validate_parser.add_argument("path", type=Path, help="Policy JSON file (camelCase keys)")

    import_parser = policies_sub.add_parser("import", help="Validate and save a policy JSON file")
    import_parser.add_argument("path", type=Path, help="Policy JSON file (camelCase keys)")

    for name, help_text in (
        ("activate", "Activate a policy"),
        ("deactivate", "Deactivate a policy"),
        ("delete", "Soft-delete a policy"),
    ):
        p = policies_sub.add_parser(name, help=help_text)
        p.add_argument("policy_id", help="Policy id")

    run_parser = subparsers.add_parser(
        "run",
        help="Run a policy now against an asset snapshot",
        description=(
            "Run a policy now against an asset snapshot. Actions are applied to an "
            "in-memory backend that is discarded after the run; only the execution "
            "log and schedule are persisted."
        ),
    )
    run_parser.add_argument("policy_id", help="Policy id")
    run_parser.add_argument("--assets", type=Path, required=True, help="JSON list of asset contexts")

    simulate_parser = subparsers.add_parser("simulate", help="Dry-run a policy against an asset snapshot")
    simulate_parser.add_argument("policy_id", help="Policy id")
    simulate_parser.add_argument("--assets", type=Path, required=True, help="JSON list of asset contexts")

    logs_parser = subparsers.add_parser("logs", help="Show recent execution logs")
    logs_parser.add_argument("--policy-id", default=None, help="Only logs of this policy")
    logs_parser.add_argument("--limit", type=int, default=20, help="Max logs")

    subparsers.add_parser("costs", help="Show the storage tier cost table")

    return parser


def _load_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _load_assets(path: Path) -> list[AssetContext]:
    return _ASSETS.validate_python(_load_json(path))


def _cmd_policies_list(store: PolicyStore, org: str, args: argparse.Namespace) -> int:
    policies = store.list(org, include_inactive=not args.active_only)
    for p in sorted(policies, key=lambda p: p.priority):
        state = "ACTIVE" if p.is_active else "inactive"
        print(f"{p.priority:>5}\t{state}\t{p.type}\t{p.id}\t{p.name} (v{p.version})")
    return 0


def _cmd_policies_templates() -> int:
    for i, template in enumerate(STORAGE_POLICY_TEMPLATES):
        print(f"[{i}] {template['name']} ({template['type']}, priority {template['priority']})")
        print(f"    {template['description']}")
    return 0


def _cmd_policies_create(store: PolicyStore, org: str, args: argparse.Namespace) -> int:
    if not 0 <= args.template < len(STORAGE_POLICY_TEMPLATES):
        print(f"No template {args.template}; see 'policies templates'", file=sys.stderr)
        return 2
    policy = instantiate_template(STORAGE_POLICY_TEMPLATES[args.template], org, args.created_by)
    saved = store.save(policy)
    print(f"Created {saved.id}: {saved.name} (inactive)")
    return 0


def _cmd_policies_validate(args: argparse.Namespace) -> int:
    result = validate_storage_policy(_load_json(args.path))
    if result.valid:
        print("Policy is valid")
        return 0
    print("Validation errors:")
    for error in result.errors:
        print(f"- {error}")
    return 1


def _cmd_policies_import(store: PolicyStore, org: str, args: argparse.Namespace) -> int:
    record = _load_json(args.path)
    result = validate_storage_policy(record)
    if not result.valid:
        for error in result.errors:
            print(f"- {error}", file=sys.stderr)
        return 1

    policy = StorageLifecyclePolicy.model_validate(record)
    if not policy.organization_id:
        policy = policy.model_copy(update={"organization_id": org})
    saved = store.save(policy)
    print(f"Saved {saved.id} (v{saved.version})")
    return 0


def _cmd_run(store: PolicyStore, args: argparse.Namespace) -> int:
    assets = _load_assets(args.assets)
    backend = InMemoryStorageBackend()
    runner = PolicyRunner(store, backend)
    log = asyncio.run(runner.run_policy(args.policy_id, assets))

    print(f"{log.status.value}: {log.assets_transitioned}/{log.assets_evaluated} assets actioned")
    print(f"Monthly savings: {format_storage_currency(log.cost_savings_achieved)}")
    for error in log.errors:
        print(f"- {error}")
    return 0 if log.status.value == "SUCCESS" else 1


def _cmd_simulate(store: PolicyStore, args: argparse.Namespace) -> int:
    policy = store.get(args.policy_id)
    if policy is None:
        print(f"Unknown policy_id: {args.policy_id}", file=sys.stderr)
        return 2

    assets = _load_assets(args.assets)
    others = store.list(policy.organization_id, include_inactive=False)
    result = simulate_policy(policy, assets, others)

    print(f"Affected assets: {result.affected_assets} of {result.assets_evaluated}")
    print(f"Total size: {format_storage_file_size(result.total_bytes)}")
    print(f"Estimated monthly savings: {format_storage_currency(result.estimated_monthly_savings)}")
    print(f"Estimated annual savings: {format_storage_currency(result.estimated_annual_savings)}")
    for item in result.asset_breakdown:
        print(f"- {item.tier}: {item.count} assets ({format_storage_file_size(item.bytes)})")
    return 0


def _cmd_logs(store: PolicyStore, args: argparse.Namespace) -> int:
    for log in store.list_logs(args.policy_id, limit=args.limit):
        print(
            f"{log.executed_at.isoformat()}\t{log.status.value}\t{log.policy_name}\t"
            f"{log.assets_transitioned}/{log.assets_evaluated}\t"
            f"{format_storage_currency(log.cost_savings_achieved)}\t{log.execution_time_ms}ms"
        )
        for error in log.errors:
            print(f"\t- {error}")
    return 0


def _cmd_costs() -> int:
    print("Storage tier costs (per GB/month):")
    for tier, cost in STORAGE_TIER_COSTS.items():
        restore = RESTORE_COSTS[tier]
        print(
            f"- {tier}: {format_storage_currency(cost)} "
            f"(restore {format_storage_currency(restore.per_gb)}/GB, ~{restore.hours:g}h)"
        )
    return 0


def _dispatch(parsed: argparse.Namespace) -> int:
    settings = get_settings()
    org: str = parsed.org or settings.default_organization_id

    if parsed.command == "costs":
        return _cmd_costs()
    if parsed.command == "policies" and parsed.policies_command == "templates":
        return _cmd_policies_templates()
    if parsed.command == "policies" and parsed.policies_command == "validate":
        return _cmd_policies_validate(parsed)

    store = open_store(settings)

    if parsed.command == "policies":
        if parsed.policies_command == "list":
            return _cmd_policies_list(store, org, parsed)
        if parsed.policies_command == "create":
            return _cmd_policies_create(store, org, parsed)
        if parsed.policies_command == "import":
            return _cmd_policies_import(store, org, parsed)
        if parsed.policies_command == "activate":
            saved = store.set_active(parsed.policy_id, True)
            print(f"Activated {saved.id} (v{saved.version})")
            return 0
        if parsed.policies_command == "deactivate":
            saved = store.set_active(parsed.policy_id, False)
            print(f"Deactivated {saved.id} (v{saved.version})")
            return 0
        if parsed.policies_command == "delete":
            store.delete(parsed.policy_id)
            print(f"Deleted {parsed.policy_id}")
            return 0
    if parsed.command == "run":
        return _cmd_run(store, parsed)
    if parsed.command == "simulate":
        return _cmd_simulate(store, parsed)
    if parsed.command == "logs":
        return _cmd_logs(store, parsed)

    logger.error("unknown_command", command=parsed.command)
    return 2


def main(args: list[str] | None = None) -> int:
    """Main entry point for the SyncOps lifecycle CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    if args is None:
        args = sys.argv[1:]

    try:
        settings = get_settings()
    except SyncOpsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    # Configure logging
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level.upper(), logging.INFO)
        ),
    )

    logger.info("syncops_lifecycle_started", version=__version__, debug=settings.debug)

    parser = _build_parser()
    parsed = parser.parse_args(args)

    try:
        return _dispatch(parsed)
    except SyncOpsError as exc:
        logger.error("command_failed", command=parsed.command, error=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        logger.error("command_input_invalid", command=parsed.command, error=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
