"""
fueleu_config -- single public entrypoint for regulation parameters.

Responsibility:
    Provides the ONLY way to obtain regulatory constants at runtime through
    ``get_active_regulation()``.  No engine or service reads YAML files or
    environment variables directly.

Resolution order for the regulation file:
    1. the ``path`` argument,
    2. the ``FUELEU_REGULATION_FILE`` environment variable,
    3. ``regulation.yaml`` shipped with this package.

Failure modes:
    - ``FileNotFoundError`` -- the resolved file does not exist.
    - ``RegulationConfigError`` -- the file failed validation.

Audit relevance:
    Every call emits a ``FUELEU_CONFIG_TRACE`` log entry with the
    regulation name, version and checksum, tying each computed CB back to
    the parameters that produced it.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from fueleu_config.loader import load_regulation, parse_regulation
from fueleu_config.schema import RegulationParameters, TargetIntensityStep

_logger = logging.getLogger("fueleu.config")

_DEFAULT_REGULATION_FILE = Path(__file__).parent / "regulation.yaml"

ENV_REGULATION_FILE = "FUELEU_REGULATION_FILE"


def get_active_regulation(path: Path | str | None = None) -> RegulationParameters:
    """Load the regulation parameters in force."""
    if path is None:
        path = os.environ.get(ENV_REGULATION_FILE) or _DEFAULT_REGULATION_FILE
    params = load_regulation(Path(path))

    _logger.info(
        "FUELEU_CONFIG_TRACE",
        extra={
            "trace_type": "FUELEU_CONFIG_TRACE",
            "regulation": params.name,
            "regulation_version": params.version,
            "checksum": params.checksum,
            "step_count": len(params.steps),
            "source": str(path),
        },
    )
    return params


__all__ = [
    "ENV_REGULATION_FILE",
    "RegulationParameters",
    "TargetIntensityStep",
    "get_active_regulation",
    "parse_regulation",
]
