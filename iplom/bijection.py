"""
Bijection-based splitting of partitions that are not yet good clusters.

Two token positions P1 and P2 are chosen and the relation between their
value sets (1-1, 1-M, M-1 or M-M) decides which position, or which pair
of positions, the partition is split on.
"""

from collections import Counter
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .config import IPLoMConfig
from .models import MappingType, Partition, PartitionStage
from .partitioning import SplitResult, apply_support_threshold, group_by_positions, unsplit
from .statistics import PositionStatistics


class SplitSide(Enum):
    """Which side of a 1-M relation a partition is split on."""
    ONE = "one"
    MANY = "many"

    def __str__(self) -> str:
        return self.value


def classify_mapping(relation: Iterable[Tuple[str, str]]) -> MappingType:
    """
    Classify the co-occurrence relation between two positions.

    Args:
        relation: (value at P1, value at P2) pairs, one per line

    Returns:
        ONE_TO_MANY when some P1 value pairs with several P2 values while
        every P2 value pairs with one P1 value, MANY_TO_ONE for the mirror
        case, MANY_TO_MANY when both directions are multi-valued and
        ONE_TO_ONE otherwise.
    """
    forward: Dict[str, Set[str]] = {}
    backward: Dict[str, Set[str]] = {}
    for left, right in relation:
        forward.setdefault(left, set()).add(right)
        backward.setdefault(right, set()).add(left)

    forward_multi = any(len(values) > 1 for values in forward.values())
    backward_multi = any(len(values) > 1 for values in backward.values())

    if forward_multi and backward_multi:
        return MappingType.MANY_TO_MANY
    if forward_multi:
        return MappingType.ONE_TO_MANY
    if backward_multi:
        return MappingType.MANY_TO_ONE
    return MappingType.ONE_TO_ONE


def one_to_many_distance_inputs(relation: List[Tuple[str, str]]) -> Tuple[int, int]:
    """
    Distance numerator and denominator for a relation read one-side first.

    The one-side values that map to several many-side values form the set
    S. Returns the number of distinct many-side values co-occurring with S
    and the number of lines whose one-side value is in S.
    """
    targets: Dict[str, Set[str]] = {}
    line_counts: Counter = Counter()
    for one, many in relation:
        targets.setdefault(one, set()).add(many)
        line_counts[one] += 1

    multi = [one for one, values in targets.items() if len(values) > 1]
    many_values: Set[str] = set()
    for one in multi:
        many_values |= targets[one]
    return len(many_values), sum(line_counts[one] for one in multi)


def choose_split_side(many_cardinality: int, lines_matching: int,
                      config: IPLoMConfig) -> SplitSide:
    """
    Decide the split side of a 1-M relation from its distance ratio.

    A distance at or below the lower bound keeps the split on the one
    side, at or above the upper bound moves it to the many side, and
    anything in between stays on the one side. Without matching lines
    there is no evidence and the one side is used.
    """
    if lines_matching <= 0:
        return SplitSide.ONE

    distance = many_cardinality / lines_matching
    if distance <= config.lower_bound:
        return SplitSide.ONE
    if distance >= config.upper_bound:
        return SplitSide.MANY
    return SplitSide.ONE


def select_split_positions(stats: PositionStatistics) -> Optional[Tuple[int, int]]:
    """
    Choose P1 and P2 (P1 < P2).

    Two-token partitions use (0, 1). Longer ones use the first two
    positions sharing the most frequent non-unit cardinality, falling back
    to (0, 1) when no such cardinality is shared. Returns None for fewer
    than two tokens.
    """
    if stats.token_count < 2:
        return None
    if stats.token_count == 2:
        return 0, 1

    cardinality = stats.shared_cardinality()
    if cardinality is None:
        return 0, 1

    positions = stats.positions_with_cardinality(cardinality)
    return positions[0], positions[1]


class BijectionSplitter:
    """
    Splits partitions on the relation between two token positions.
    """

    def __init__(self, config: Optional[IPLoMConfig] = None):
        self.config = config or IPLoMConfig()

    def is_good(self, stats: PositionStatistics) -> bool:
        """Check if the constant-position fraction reaches the goodness threshold."""
        return stats.goodness() >= self.config.cluster_goodness_threshold

    def choose_positions(self, partition: Partition,
                         stats: PositionStatistics) -> Tuple[Tuple[int, ...], Optional[MappingType]]:
        """
        Decide which position(s) to split on.

        Returns:
            Tuple of (split positions, mapping type); the positions are
            empty when the partition should not be split
        """
        if stats.token_count < 2 or self.is_good(stats):
            return (), None

        p1, p2 = select_split_positions(stats)
        relation = [(line.tokens[p1], line.tokens[p2]) for line in partition.lines]
        mapping = classify_mapping(relation)

        if mapping is MappingType.ONE_TO_ONE:
            return (p1,), mapping

        if mapping is MappingType.MANY_TO_MANY:
            return (p1, p2), mapping

        if mapping is MappingType.ONE_TO_MANY:
            one, many = p1, p2
            oriented = relation
        else:
            one, many = p2, p1
            oriented = [(right, left) for left, right in relation]

        many_cardinality, lines_matching = one_to_many_distance_inputs(oriented)
        side = choose_split_side(many_cardinality, lines_matching, self.config)
        return ((one,) if side is SplitSide.ONE else (many,)), mapping

    def split(self, partition: Partition,
              stats: Optional[PositionStatistics] = None) -> SplitResult:
        """
        Split a partition by token bijection and apply the support check.

        Good partitions and partitions with fewer than two tokens come back
        unsplit.
        """
        if partition.size == 0:
            return unsplit(partition)

        stats = stats or PositionStatistics.from_partition(partition)
        positions, mapping = self.choose_positions(partition, stats)
        if not positions:
            return unsplit(partition)

        groups = group_by_positions(partition, positions)
        result = apply_support_threshold(partition, groups, PartitionStage.BIJECTION,
                                         self.config, split_positions=positions)
        result.mapping_type = mapping
        return result
