"""
Per-position token value distributions for a partition.
"""

from collections import Counter
from typing import Dict, Iterable, List, Optional

from .models import LogLine, Partition


class PositionStatistics:
    """
    Maps each token position to the occurrence count of every value seen there.

    Recomputed from scratch for every partition; never shared between them.
    """

    def __init__(self, counts: List[Counter]):
        self.counts = counts

    @classmethod
    def from_lines(cls, lines: Iterable[LogLine], token_count: int) -> 'PositionStatistics':
        counts = [Counter() for _ in range(token_count)]
        for line in lines:
            if line.token_count != token_count:
                raise ValueError(
                    f"Line {line.line_id} has {line.token_count} tokens, expected {token_count}"
                )
            for position, token in enumerate(line.tokens):
                counts[position][token] += 1
        return cls(counts)

    @classmethod
    def from_partition(cls, partition: Partition) -> 'PositionStatistics':
        return cls.from_lines(partition.lines, partition.token_count)

    @property
    def token_count(self) -> int:
        return len(self.counts)

    def cardinality(self, position: int) -> int:
        """Number of distinct values observed at a position."""
        return len(self.counts[position])

    def cardinalities(self) -> List[int]:
        return [len(counter) for counter in self.counts]

    def values_at(self, position: int) -> Dict[str, int]:
        return dict(self.counts[position])

    def constant_positions(self) -> List[int]:
        return [i for i, counter in enumerate(self.counts) if len(counter) == 1]

    def variable_positions(self) -> List[int]:
        return [i for i, counter in enumerate(self.counts) if len(counter) > 1]

    def goodness(self) -> float:
        """Fraction of positions holding a single value; 1.0 for empty lines."""
        if not self.counts:
            return 1.0
        return len(self.constant_positions()) / len(self.counts)

    def lowest_cardinality_position(self) -> Optional[int]:
        """
        Variable position with the fewest distinct values.

        Constant positions are skipped since splitting on them changes
        nothing. Ties go to the lowest index. Returns None when every
        position is constant.
        """
        best = None
        best_cardinality = None
        for position in self.variable_positions():
            cardinality = self.cardinality(position)
            if best_cardinality is None or cardinality < best_cardinality:
                best, best_cardinality = position, cardinality
        return best

    def shared_cardinality(self) -> Optional[int]:
        """
        Most frequent non-unit cardinality shared by two or more positions.

        Ties between equally frequent cardinalities go to the smaller value.
        """
        frequency = Counter(c for c in self.cardinalities() if c > 1)
        shared = [(count, cardinality) for cardinality, count in frequency.items() if count >= 2]
        if not shared:
            return None
        top = max(count for count, _ in shared)
        return min(cardinality for count, cardinality in shared if count == top)

    def positions_with_cardinality(self, cardinality: int) -> List[int]:
        return [i for i, c in enumerate(self.cardinalities()) if c == cardinality]
