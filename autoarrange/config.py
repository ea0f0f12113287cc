"""Shared tunables for the arranger.

The objective function, the placement solver and the orchestrator all
read their knobs from ``RULES``.  A JSON file can override any field
(see ``load_rules``); unknown keys are rejected.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path


class ArrangeError(Exception):
    """Raised when arrangement input (job, polygon, config) is malformed."""


@dataclass(frozen=True)
class ArrangeRules:
    """Arrangement parameters."""

    big_item_threshold: float = 0.02
    """Items whose area / bed area exceeds this are treated as big."""

    accuracy: float = 0.65
    """Search effort, 0.0–1.0.  Scales the number of candidate positions
    the solver tries along each contact edge."""

    rotations: tuple[float, ...] = (0.0,)
    """Rotations (radians) tried for every item."""

    parallel: bool = True
    """Evaluate candidate positions on a thread pool."""

    max_workers: int | None = None
    """Thread pool size; None lets the executor decide."""

    def __post_init__(self) -> None:
        for name in ("big_item_threshold", "accuracy"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ArrangeError(f"{name} must be a number, got {value!r}")
        if not isinstance(self.parallel, bool):
            raise ArrangeError(f"parallel must be true or false, got {self.parallel!r}")
        if self.max_workers is not None and (
                isinstance(self.max_workers, bool)
                or not isinstance(self.max_workers, int) or self.max_workers < 1):
            raise ArrangeError(
                f"max_workers must be a positive integer or null, got {self.max_workers!r}")
        if not 0.0 <= self.accuracy <= 1.0:
            raise ArrangeError(f"accuracy must be in [0, 1], got {self.accuracy}")
        if self.big_item_threshold <= 0:
            raise ArrangeError(
                f"big_item_threshold must be positive, got {self.big_item_threshold}")
        if not self.rotations:
            raise ArrangeError("rotations must not be empty")


# Module-level singleton, importable everywhere.
RULES = ArrangeRules()


def _load(path: str | Path) -> dict:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def load_rules(path: str | Path, base: ArrangeRules = RULES) -> ArrangeRules:
    """Return *base* with the overrides from a JSON file applied."""
    try:
        data = _load(path)
    except (OSError, json.JSONDecodeError) as exc:
        raise ArrangeError(f"Cannot read rules from {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ArrangeError(f"Rules file {path} must contain a JSON object")

    known = {f.name for f in fields(ArrangeRules)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ArrangeError(f"Unknown rule(s) in {path}: {', '.join(unknown)}")

    overrides = dict(data)
    try:
        if "rotations" in overrides:
            if not isinstance(overrides["rotations"], list):
                raise ArrangeError(f"rotations in {path} must be a list of radians")
            overrides["rotations"] = tuple(float(r) for r in overrides["rotations"])
        return replace(base, **overrides)
    except (TypeError, ValueError) as exc:
        raise ArrangeError(f"Bad rule value in {path}: {exc}") from exc
