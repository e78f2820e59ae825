"""SyncOps storage lifecycle - policy rules for media asset storage tiers.

This package decides which lifecycle policy applies to each production asset
(first matching policy by priority wins), validates and stores policies, and
runs them against a storage backend, recording an execution log per run.
"""

__version__ = "0.1.0"
__author__ = "SyncOps"

from syncops_lifecycle.config import Settings, get_settings
from syncops_lifecycle.costs import STORAGE_TIER_COSTS, calculate_storage_cost_savings
from syncops_lifecycle.evaluator import (
    evaluate_asset_against_policy_set,
    evaluate_policy,
    match_policy_for_asset,
    resolve_first_match,
)
from syncops_lifecycle.conditions import evaluate_condition
from syncops_lifecycle.formatting import format_storage_currency, format_storage_file_size
from syncops_lifecycle.validation import validate_policy_set, validate_storage_policy

__all__ = [
    "STORAGE_TIER_COSTS",
    "Settings",
    "__author__",
    "__version__",
    "calculate_storage_cost_savings",
    "evaluate_asset_against_policy_set",
    "evaluate_condition",
    "evaluate_policy",
    "format_storage_currency",
    "format_storage_file_size",
    "get_settings",
    "match_policy_for_asset",
    "resolve_first_match",
    "validate_policy_set",
    "validate_storage_policy",
]
