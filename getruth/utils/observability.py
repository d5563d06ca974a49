"""Run reports and determinism signatures."""

from __future__ import annotations

import dataclasses
import hashlib
import json
from typing import Any

SCHEMA_VERSION = 1

# Sections that can differ between runs with the same seed.
VOLATILE_KEYS = ("cache",)


def _canonicalize(obj: Any, float_precision: int = 12) -> Any:
    if obj is None or isinstance(obj, (str, bool, int)):
        return obj
    if isinstance(obj, float):
        return f"{obj:.{float_precision}f}"
    if isinstance(obj, (list, tuple)):
        return [_canonicalize(x, float_precision) for x in obj]
    if isinstance(obj, dict):
        return {str(k): _canonicalize(obj[k], float_precision) for k in sorted(obj.keys(), key=str)}
    return str(obj)


def run_report(result: Any, config: Any | None = None) -> dict[str, Any]:
    """JSON-serialisable summary of an ``EvolutionResult``."""
    report: dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "best_fitness": result.best_fitness,
        "best_phenotype": result.best_phenotype,
        "best_genotype": [list(ch) for ch in result.best_genotype.chromosomes],
        "total_generations": result.total_generations,
        "termination_reason": result.termination_reason,
        "history": [dataclasses.asdict(record) for record in result.history],
        "cache": dict(result.cache_metrics),
    }
    if config is not None:
        report["config"] = config.to_dict() if hasattr(config, "to_dict") else dict(config)
    return report


def determinism_signature(report: dict[str, Any], *, float_precision: int = 12) -> str:
    """SHA-256 over the canonical form of ``report`` minus volatile sections."""
    stable = {k: v for k, v in report.items() if k not in VOLATILE_KEYS}
    payload = json.dumps(_canonicalize(stable, float_precision), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def assert_determinism_equivalence(reports: list[dict[str, Any]]) -> None:
    signatures = {determinism_signature(r) for r in reports}
    if len(signatures) > 1:
        raise AssertionError(f"Reports diverge: {sorted(signatures)}")


__all__ = [
    "SCHEMA_VERSION",
    "run_report",
    "determinism_signature",
    "assert_determinism_equivalence",
]
