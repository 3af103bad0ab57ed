"""
Regulation loader (``fueleu_config.loader``).

Responsibility
--------------
Loads a regulation YAML file and parses it into a validated
``RegulationParameters``.  Runtime callers go through
``fueleu_config.get_active_regulation()`` instead of calling this directly.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing keys or invalid values -> ``RegulationConfigError`` listing every
  problem found.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from fueleu_config.schema import RegulationParameters, TargetIntensityStep
from fueleu_kernel.exceptions import RegulationConfigError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        data = yaml.safe_load(f)
    return data or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _decimal(raw: Any, field: str, errors: list[str]) -> Decimal | None:
    if raw is None:
        errors.append(f"{field} is required")
        return None
    try:
        value = Decimal(str(raw))
    except InvalidOperation:
        errors.append(f"{field} is not a number: {raw!r}")
        return None
    if not value.is_finite() or value <= 0:
        errors.append(f"{field} must be positive, got {raw!r}")
        return None
    return value


def parse_regulation(data: dict[str, Any], source: str = "<dict>") -> RegulationParameters:
    """
    Parse a ``{"regulation": {...}}`` mapping into RegulationParameters.

    Raises:
        RegulationConfigError: with every validation problem found.
    """
    errors: list[str] = []
    section = data.get("regulation")
    if not isinstance(section, dict):
        raise RegulationConfigError(source, ["missing 'regulation' section"])

    reference = _decimal(section.get("reference_intensity"), "reference_intensity", errors)
    energy = _decimal(section.get("energy_per_tonne_mj"), "energy_per_tonne_mj", errors)

    steps: list[TargetIntensityStep] = []
    raw_steps = section.get("target_intensity_steps") or []
    if not raw_steps:
        errors.append("target_intensity_steps must contain at least one step")
    seen_years: set[int] = set()
    for i, raw in enumerate(raw_steps):
        year = raw.get("year") if isinstance(raw, dict) else None
        if not isinstance(year, int):
            errors.append(f"target_intensity_steps[{i}].year must be an integer")
            continue
        if year in seen_years:
            errors.append(f"duplicate target intensity step for {year}")
            continue
        seen_years.add(year)
        intensity = _decimal(
            raw.get("intensity"), f"target_intensity_steps[{i}].intensity", errors
        )
        if intensity is not None:
            steps.append(TargetIntensityStep(year=year, intensity=intensity))

    if errors:
        raise RegulationConfigError(source, errors)

    return RegulationParameters(
        name=str(section.get("name", "FuelEU Maritime")),
        version=str(section.get("version", "0")),
        reference_intensity=reference,
        energy_per_tonne_mj=energy,
        steps=tuple(sorted(steps, key=lambda s: s.year)),
        checksum=compute_checksum(data),
    )


def load_regulation(path: Path) -> RegulationParameters:
    """Load and validate a regulation YAML file."""
    return parse_regulation(load_yaml_file(path), source=str(path))
