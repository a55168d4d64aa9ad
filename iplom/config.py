"""
Configuration for the iterative partitioning miner.

All thresholds live on a single immutable object that is validated once at
construction and passed explicitly to every stage.
"""

from dataclasses import dataclass, replace as dataclass_replace
from typing import Optional


DEFAULT_DELIMITERS = " []=:()/|'\""


class ConfigurationError(ValueError):
    """Raised when a miner configuration value is out of range."""


@dataclass(frozen=True)
class IPLoMConfig:
    """
    Thresholds and tokenization settings for one mining run.

    Attributes:
        delimiters: Characters that separate tokens in a log line
        partition_support_threshold: Minimum fraction of its parent a
            sub-partition must hold to avoid the outlier bucket
        cluster_goodness_threshold: Minimum fraction of constant positions
            for a partition to be accepted without bijection splitting
        lower_bound: Distance at or below which a 1-M split stays on the one side
        upper_bound: Distance at or above which a 1-M split moves to the many side
        wildcard: Marker rendered for variable template positions
        max_refinement_steps: Optional cap on splits per run
    """
    delimiters: str = DEFAULT_DELIMITERS
    partition_support_threshold: float = 0.05
    cluster_goodness_threshold: float = 0.8
    lower_bound: float = 0.1
    upper_bound: float = 0.9
    wildcard: str = "<*>"
    max_refinement_steps: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.delimiters, str):
            raise ConfigurationError(
                f"delimiters must be a string of characters, got {type(self.delimiters).__name__}"
            )

        for name in ('partition_support_threshold', 'cluster_goodness_threshold',
                     'lower_bound', 'upper_bound'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{name} must be a number, got {type(value).__name__}")

        for name in ('partition_support_threshold', 'cluster_goodness_threshold'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must be within [0, 1], got {value}")

        for name in ('lower_bound', 'upper_bound'):
            value = getattr(self, name)
            if not 0.0 < value < 1.0:
                raise ConfigurationError(f"{name} must be within (0, 1), got {value}")

        if self.lower_bound >= self.upper_bound:
            raise ConfigurationError(
                f"lower_bound ({self.lower_bound}) must be below upper_bound ({self.upper_bound})"
            )
        if self.lower_bound >= 0.5 or self.upper_bound <= 0.5:
            raise ConfigurationError(
                f"bounds must straddle 0.5, got lower_bound={self.lower_bound} "
                f"upper_bound={self.upper_bound}"
            )

        if not self.wildcard:
            raise ConfigurationError("wildcard marker must not be empty")

        steps = self.max_refinement_steps
        if steps is not None and (isinstance(steps, bool) or not isinstance(steps, int)):
            raise ConfigurationError(
                f"max_refinement_steps must be an integer, got {type(steps).__name__}"
            )
        if steps is not None and steps < 1:
            raise ConfigurationError(
                f"max_refinement_steps must be positive, got {self.max_refinement_steps}"
            )

    @property
    def joiner(self) -> str:
        """Separator used when rendering a template back to text."""
        if not self.delimiters or " " in self.delimiters:
            return " "
        return self.delimiters[0]

    def replace(self, **changes) -> 'IPLoMConfig':
        """Return a validated copy with the given fields changed."""
        return dataclass_replace(self, **changes)
