"""Policy loading utilities for extraction checks and call rendering."""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import ValidationError

from i18n_core.policy.models import ExtractionPolicy


def load_policy(path: Path | None = None) -> ExtractionPolicy:
    """Load and validate extraction policy from YAML."""

    policy_path = path or Path(__file__).with_name("policy.yaml")

    try:
        raw = yaml.safe_load(policy_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ValueError(f"Policy file not found: {policy_path}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in policy file: {policy_path}") from exc

    if not isinstance(raw, dict):
        raise ValueError(f"Policy file must contain a mapping: {policy_path}")

    try:
        policy = ExtractionPolicy.model_validate(raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid policy schema: {policy_path}") from exc

    _check_patterns(policy, policy_path)
    return policy


@lru_cache(maxsize=1)
def default_policy() -> ExtractionPolicy:
    """Return the bundled policy, loaded once per process."""

    return load_policy()


def _check_patterns(policy: ExtractionPolicy, policy_path: Path) -> None:
    for pattern in policy.excluded_attribute_patterns:
        try:
            re.compile(pattern)
        except re.error as exc:
            raise ValueError(
                f"Invalid attribute pattern '{pattern}' in {policy_path}: {exc}"
            ) from exc
