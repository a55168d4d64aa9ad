"""
Core data models for iterative partitioning log mining.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from dataclasses_json import dataclass_json, config
from enum import Enum


class PartitionStage(Enum):
    """Refinement step that produced a partition."""
    LENGTH = "length"
    POSITION = "position"
    BIJECTION = "bijection"

    def __str__(self) -> str:
        return self.value


class MappingType(Enum):
    """Relational shape between the value sets of two token positions."""
    ONE_TO_ONE = "1-1"
    ONE_TO_MANY = "1-M"
    MANY_TO_ONE = "M-1"
    MANY_TO_MANY = "M-M"

    def __str__(self) -> str:
        return self.value


@dataclass_json
@dataclass(frozen=True)
class LogLine:
    """A raw log line and its token sequence."""
    line_id: int  # position in the input
    text: str
    tokens: Tuple[str, ...]

    @property
    def token_count(self) -> int:
        return len(self.tokens)

    def __str__(self) -> str:
        return self.text


@dataclass_json
@dataclass(frozen=True)
class PartitionKey:
    """
    Structural constraints shared by every line of a partition.

    Keys compare and hash by value, so they can index dictionaries of
    partitions safely.
    """
    token_count: int
    constraints: Tuple[Tuple[int, str], ...] = ()

    def extend(self, *pairs: Tuple[int, str]) -> 'PartitionKey':
        """Return a new key with extra (position, value) constraints."""
        return PartitionKey(self.token_count, self.constraints + tuple(pairs))

    def matches(self, line: LogLine) -> bool:
        """Check if a line satisfies the token count and every constraint."""
        if line.token_count != self.token_count:
            return False
        return all(line.tokens[position] == value for position, value in self.constraints)

    def sort_key(self) -> Tuple:
        return (self.token_count, self.constraints)

    def __str__(self) -> str:
        parts = [f"n={self.token_count}"]
        parts.extend(f"{position}={value}" for position, value in self.constraints)
        return "|".join(parts)


@dataclass_json
@dataclass
class Partition:
    """A group of log lines sharing a partition key."""
    key: PartitionKey
    lines: Tuple[LogLine, ...]
    stage: PartitionStage = field(default=PartitionStage.LENGTH, metadata=config(
        encoder=lambda x: x.value,
        decoder=lambda x: PartitionStage(x)
    ))
    is_outlier: bool = False

    @property
    def token_count(self) -> int:
        return self.key.token_count

    @property
    def size(self) -> int:
        return len(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def validate(self) -> None:
        """Raise ValueError if any member line violates the key."""
        for line in self.lines:
            if not self.key.matches(line):
                raise ValueError(
                    f"Line {line.line_id} does not satisfy partition key {self.key}: {line.text!r}"
                )


@dataclass_json
@dataclass(frozen=True)
class TemplateSlot:
    """One template position: a literal token, or a wildcard when value is None."""
    value: Optional[str] = None

    @property
    def is_wildcard(self) -> bool:
        return self.value is None

    def render(self, wildcard: str = "<*>") -> str:
        return wildcard if self.value is None else self.value


@dataclass_json
@dataclass
class Template:
    """Literal/wildcard slot sequence summarizing a cluster."""
    slots: List[TemplateSlot]
    wildcard: str = "<*>"
    joiner: str = " "

    @property
    def tokens(self) -> List[str]:
        return [slot.render(self.wildcard) for slot in self.slots]

    @property
    def pattern(self) -> str:
        return self.joiner.join(self.tokens)

    @property
    def literal_count(self) -> int:
        return sum(1 for slot in self.slots if not slot.is_wildcard)

    def wildcard_positions(self) -> List[int]:
        return [i for i, slot in enumerate(self.slots) if slot.is_wildcard]

    def matches(self, tokens) -> bool:
        """Check if a token sequence instantiates this template."""
        if len(tokens) != len(self.slots):
            return False
        return all(slot.is_wildcard or slot.value == token
                   for slot, token in zip(self.slots, tokens))

    def __len__(self) -> int:
        return len(self.slots)

    def __str__(self) -> str:
        return self.pattern


@dataclass_json
@dataclass
class Cluster:
    """A terminal partition accepted as one event type."""
    cluster_id: str
    key: PartitionKey
    template: Template
    lines: List[LogLine]
    aborted: bool = False  # accepted as-is because the step guard ran out

    @property
    def size(self) -> int:
        return len(self.lines)

    @property
    def token_count(self) -> int:
        return self.key.token_count

    def __str__(self) -> str:
        return f"Cluster(id={self.cluster_id}, size={self.size}, template={self.template.pattern!r})"


@dataclass_json
@dataclass
class MiningResult:
    """Clusters and outlier partitions produced by one mining run."""
    clusters: List[Cluster] = field(default_factory=list)
    outliers: List[Partition] = field(default_factory=list)
    line_count: int = 0
    aborted: bool = False

    @property
    def templates(self) -> List[Template]:
        return [cluster.template for cluster in self.clusters]

    @property
    def outlier_count(self) -> int:
        return sum(partition.size for partition in self.outliers)

    def outliers_by_length(self) -> Dict[int, List[LogLine]]:
        """Merge outlier partitions into one bucket per token count."""
        buckets: Dict[int, List[LogLine]] = defaultdict(list)
        for partition in self.outliers:
            buckets[partition.token_count].extend(partition.lines)
        for lines in buckets.values():
            lines.sort(key=lambda line: line.line_id)
        return dict(sorted(buckets.items()))

    def cluster_for(self, text: str) -> Optional[Cluster]:
        """Find the cluster holding a raw line, if any."""
        for cluster in self.clusters:
            if any(line.text == text for line in cluster.lines):
                return cluster
        return None

    def get_summary(self) -> Dict:
        """Get summary statistics."""
        clustered = sum(cluster.size for cluster in self.clusters)
        coverage = (clustered / self.line_count * 100) if self.line_count > 0 else 0

        return {
            'total_lines': self.line_count,
            'clustered_lines': clustered,
            'outlier_lines': self.outlier_count,
            'coverage': coverage,
            'cluster_count': len(self.clusters),
            'aborted': self.aborted,
            'top_clusters': [
                (cluster.cluster_id, cluster.template.pattern, cluster.size)
                for cluster in sorted(self.clusters, key=lambda c: c.size, reverse=True)[:10]
            ],
        }


@dataclass
class TemplateMatch:
    """Result of matching a log line to a mined template."""
    cluster_id: str
    template: Template
    confidence: float  # fraction of line tokens fixed by the template
    extracted_values: List[str]  # tokens that filled wildcard slots

    def __str__(self) -> str:
        return (f"Match(cluster_id={self.cluster_id}, "
                f"confidence={self.confidence:.3f}, "
                f"pattern={self.template.pattern!r})")
