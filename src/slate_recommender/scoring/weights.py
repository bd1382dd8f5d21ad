"""
Scoring weight table.

The table maps signal names to numeric weights and is loaded once at process
start from a JSON file:

    {"version": 1, "neverOpened": 2, "freshForgotten": 3, "timeFit": 1.5,
     "frequentSource": 1, "bridge": 1, "duplicatePenalty": -2, "sameDomainPenalty": -1}

Loading fails open: a missing or malformed file yields an all-zero table and a
result flagged as degraded, never an exception.
"""

import json
import math
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import structlog

from slate_recommender.errors import ConfigLoadError


logger = structlog.get_logger(__name__)


# JSON key -> dataclass field
SIGNAL_KEYS = {
    "neverOpened": "never_opened",
    "freshForgotten": "fresh_forgotten",
    "timeFit": "time_fit",
    "frequentSource": "frequent_source",
    "bridge": "bridge",
    "duplicatePenalty": "duplicate_penalty",
    "sameDomainPenalty": "same_domain_penalty",
}


@dataclass(frozen=True)
class ScoringWeights:
    """
    Weight per scoring signal.

    duplicate_penalty and same_domain_penalty are carried for consumers of the
    table but are not applied by the scorer.
    """
    version: int = 0
    never_opened: float = 0.0
    fresh_forgotten: float = 0.0
    time_fit: float = 0.0
    frequent_source: float = 0.0
    bridge: float = 0.0
    duplicate_penalty: float = 0.0
    same_domain_penalty: float = 0.0

    @classmethod
    def zero(cls) -> "ScoringWeights":
        """All-zero table used when the configured one cannot be loaded."""
        return cls()

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "ScoringWeights":
        """
        Build weights from the JSON document.

        Unknown keys are ignored and missing signals default to 0.

        Raises:
            ValueError: If the document is not an object or a weight is not numeric
        """
        if not isinstance(data, dict):
            raise ValueError("weight table must be a JSON object")

        values: Dict[str, Any] = {}
        for key, field_name in SIGNAL_KEYS.items():
            raw = data.get(key, 0)
            if isinstance(raw, bool) or not isinstance(raw, (int, float)):
                raise ValueError(f"weight '{key}' is not a number: {raw!r}")
            if not math.isfinite(raw):
                raise ValueError(f"weight '{key}' is not finite: {raw!r}")
            values[field_name] = float(raw)

        version = data.get("version", 0)
        if isinstance(version, bool) or not isinstance(version, int):
            raise ValueError(f"weight table version is not an integer: {version!r}")

        return cls(version=version, **values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class WeightsLoadResult:
    """Outcome of loading the weight table."""
    weights: ScoringWeights
    source: str
    degraded: bool = False
    error: Optional[str] = None


def read_weights_file(path: Union[str, Path]) -> ScoringWeights:
    """
    Read and parse the weight table.

    Raises:
        ConfigLoadError: If the file is missing, unreadable or malformed
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigLoadError(str(path), "file not found") from e
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigLoadError(str(path), str(e)) from e

    try:
        return ScoringWeights.from_mapping(data)
    except ValueError as e:
        raise ConfigLoadError(str(path), str(e)) from e


def load_weights(path: Union[str, Path, None] = None) -> WeightsLoadResult:
    """
    Load the weight table, failing open to all-zero weights.

    Args:
        path: JSON file path (default: settings.weights_file)

    Returns:
        WeightsLoadResult; ``degraded`` is True when the zero table was used
    """
    if path is None:
        from slate_recommender.config import settings

        path = settings.weights_file

    try:
        weights = read_weights_file(path)
    except ConfigLoadError as e:
        logger.warning(
            "weights_load_degraded",
            path=str(path),
            reason=e.reason,
        )
        return WeightsLoadResult(
            weights=ScoringWeights.zero(),
            source=str(path),
            degraded=True,
            error=str(e),
        )

    logger.info("weights_loaded", path=str(path), version=weights.version)
    return WeightsLoadResult(weights=weights, source=str(path))
