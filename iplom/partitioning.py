"""
Length and position partitioning steps.

Both steps share the partition support check: a candidate sub-partition
holding less than the configured fraction of its parent is folded into a
single outlier partition for that parent.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .config import IPLoMConfig
from .models import LogLine, MappingType, Partition, PartitionKey, PartitionStage
from .statistics import PositionStatistics


@dataclass
class SplitResult:
    """Outcome of splitting one partition."""
    parent: Partition
    children: List[Partition] = field(default_factory=list)
    outliers: Optional[Partition] = None
    split_positions: Tuple[int, ...] = ()
    mapping_type: Optional[MappingType] = None  # set by bijection splits

    @property
    def is_productive(self) -> bool:
        """False when the split left the parent exactly as it was."""
        if self.outliers is not None:
            return True
        return not (len(self.children) == 1 and self.children[0].size == self.parent.size)

    def partitions(self) -> List[Partition]:
        """Children followed by the outlier partition, if any."""
        if self.outliers is None:
            return list(self.children)
        return list(self.children) + [self.outliers]


def unsplit(partition: Partition) -> SplitResult:
    return SplitResult(parent=partition, children=[partition])


def apply_support_threshold(parent: Partition,
                            groups: Dict[PartitionKey, List[LogLine]],
                            stage: PartitionStage,
                            config: IPLoMConfig,
                            split_positions: Tuple[int, ...] = ()) -> SplitResult:
    """
    Turn candidate groups into child partitions, folding small ones into outliers.

    Support is measured against the parent being split; a group whose
    support equals the threshold exactly is kept.
    """
    children = []
    folded: List[LogLine] = []
    parent_size = parent.size

    for key in sorted(groups, key=lambda k: k.sort_key()):
        lines = groups[key]
        support = len(lines) / parent_size
        if support < config.partition_support_threshold:
            folded.extend(lines)
        else:
            children.append(Partition(key=key, lines=tuple(lines), stage=stage))

    outliers = None
    if folded:
        folded.sort(key=lambda line: line.line_id)
        outliers = Partition(key=parent.key, lines=tuple(folded), stage=stage, is_outlier=True)

    return SplitResult(parent=parent, children=children, outliers=outliers,
                       split_positions=split_positions)


def group_by_positions(partition: Partition,
                       positions: Tuple[int, ...]) -> Dict[PartitionKey, List[LogLine]]:
    """Group a partition's lines by their values at the given positions."""
    groups: Dict[PartitionKey, List[LogLine]] = {}
    for line in partition.lines:
        key = partition.key.extend(*((p, line.tokens[p]) for p in positions))
        groups.setdefault(key, []).append(line)
    return groups


class LengthPartitioner:
    """Groups log lines into partitions of equal token count."""

    def partition(self, lines: Iterable[LogLine]) -> Dict[int, Partition]:
        """
        Partition lines by token count.

        Returns:
            Mapping of token count to partition, in ascending token count
        """
        groups: Dict[int, List[LogLine]] = {}
        for line in lines:
            groups.setdefault(line.token_count, []).append(line)

        return OrderedDict(
            (count, Partition(key=PartitionKey(count), lines=tuple(groups[count]),
                              stage=PartitionStage.LENGTH))
            for count in sorted(groups)
        )


class PositionPartitioner:
    """
    Splits a partition on its lowest-cardinality variable token position.
    """

    def __init__(self, config: Optional[IPLoMConfig] = None):
        self.config = config or IPLoMConfig()

    def choose_position(self, stats: PositionStatistics) -> Optional[int]:
        """Position to split on, or None when no position varies."""
        if stats.token_count <= 1:
            return None
        return stats.lowest_cardinality_position()

    def split(self, partition: Partition,
              stats: Optional[PositionStatistics] = None) -> SplitResult:
        """
        Split a partition on the chosen position and apply the support check.

        Partitions with one token or fewer, or with no varying position,
        come back unsplit.
        """
        if partition.token_count <= 1 or partition.size == 0:
            return unsplit(partition)

        stats = stats or PositionStatistics.from_partition(partition)
        position = self.choose_position(stats)
        if position is None:
            return unsplit(partition)

        groups = group_by_positions(partition, (position,))
        return apply_support_threshold(partition, groups, PartitionStage.POSITION,
                                       self.config, split_positions=(position,))
