"""
Iterative Partitioning Log Mining (IPLoM) driver.

Runs the length, position and bijection steps over a work-list of
partitions until every partition is either an accepted cluster or part
of an outlier bucket, then derives one template per cluster.

Based on:
    A. Makanju, A. N. Zincir-Heywood, E. E. Milios. Clustering event logs
    using iterative partitioning. KDD 2009.
"""

from typing import Dict, Iterable, List, Optional, Tuple
from tqdm import tqdm

from .bijection import BijectionSplitter
from .config import IPLoMConfig
from .io_utils import LogFileReader
from .models import Cluster, LogLine, MiningResult, Partition, PartitionStage
from .partitioning import LengthPartitioner, PositionPartitioner, SplitResult
from .statistics import PositionStatistics
from .templating import TemplateBuilder
from .tokenizer import Tokenizer


class _StepGuard:
    """Counts splits against the optional per-run limit."""

    def __init__(self, limit: Optional[int]):
        self.limit = limit
        self.used = 0
        self.exhausted = False

    def consume(self) -> bool:
        if self.limit is not None and self.used >= self.limit:
            self.exhausted = True
            return False
        self.used += 1
        return True


class IPLoMMiner:
    """
    Main entry point for mining message templates from log lines.
    """

    def __init__(self,
                 config: Optional[IPLoMConfig] = None,
                 verbose: bool = False,
                 show_progress: bool = False):
        """
        Initialize the miner.

        Args:
            config: Thresholds and delimiters (defaults when omitted)
            verbose: Print progress messages
            show_progress: Show a progress bar over token-count groups
        """
        self.config = config or IPLoMConfig()
        self.verbose = verbose
        self.show_progress = show_progress

        self.tokenizer = Tokenizer(self.config.delimiters)
        self.length_partitioner = LengthPartitioner()
        self.position_partitioner = PositionPartitioner(self.config)
        self.bijection_splitter = BijectionSplitter(self.config)
        self.template_builder = TemplateBuilder(self.config)

    def _log(self, message: str) -> None:
        if self.verbose:
            print(message)

    def partition_by_length(self, lines: Iterable[str]) -> Dict[int, Partition]:
        """Tokenize raw lines and group them by token count."""
        return self.length_partitioner.partition(self.tokenizer.tokenize_all(lines))

    def mine(self, lines: Iterable[str]) -> MiningResult:
        """
        Mine clusters and templates from raw log lines.

        Args:
            lines: Log messages, one per element

        Returns:
            MiningResult with clusters and outlier partitions sorted by key
        """
        log_lines = self.tokenizer.tokenize_all(lines)
        self._log(f"Mining templates from {len(log_lines)} log lines")

        groups = self.length_partitioner.partition(log_lines)
        self._log(f"Found {len(groups)} token-count groups")

        guard = _StepGuard(self.config.max_refinement_steps)
        clusters: List[Cluster] = []
        outliers: List[Partition] = []

        for partition in tqdm(groups.values(), total=len(groups),
                              desc="Refining partitions", disable=not self.show_progress):
            accepted, folded = self._refine(partition, guard)
            clusters.extend(self.template_builder.build_cluster(p, aborted=a) for p, a in accepted)
            outliers.extend(folded)

        if guard.exhausted:
            print(f"Warning: refinement stopped after {guard.used} splits; "
                  f"remaining partitions were accepted as-is")

        clusters.sort(key=lambda c: c.key.sort_key())
        outliers.sort(key=lambda p: p.key.sort_key())

        result = MiningResult(clusters=clusters, outliers=outliers,
                              line_count=len(log_lines), aborted=guard.exhausted)
        self._log(f"Extracted {len(clusters)} clusters "
                  f"({result.outlier_count} outlier lines in {len(outliers)} buckets)")
        return result

    def mine_file(self, file_path: str, limit: Optional[int] = None) -> MiningResult:
        """Read a log file and mine it."""
        return self.mine(LogFileReader(file_path, limit=limit))

    def _refine(self, root: Partition,
                guard: Optional[_StepGuard] = None) -> Tuple[List[Tuple[Partition, bool]], List[Partition]]:
        """
        Refine one token-count partition to a fixed point.

        Returns:
            Tuple of (accepted partitions with their aborted flag, outlier partitions)
        """
        guard = guard or _StepGuard(self.config.max_refinement_steps)
        accepted: List[Tuple[Partition, bool]] = []
        outliers: List[Partition] = []
        pending = [root]

        while pending:
            partition = pending.pop()
            stats = PositionStatistics.from_partition(partition)

            if self._is_terminal(partition, stats):
                accepted.append((partition, False))
                continue

            if not guard.consume():
                accepted.append((partition, True))
                continue

            result = self._split(partition, stats)
            if not result.is_productive:
                accepted.append((partition, False))
                continue

            if result.outliers is not None:
                outliers.append(result.outliers)
            # reversed so children are popped in key order
            pending.extend(reversed(result.children))

        return accepted, outliers

    def _is_terminal(self, partition: Partition, stats: PositionStatistics) -> bool:
        """
        A partition is final when it has at most one token, is already good
        enough, or has a single varying position left.
        """
        if partition.token_count <= 1:
            return True
        if self.bijection_splitter.is_good(stats):
            return True
        return len(stats.variable_positions()) < 2

    def _split(self, partition: Partition, stats: PositionStatistics) -> SplitResult:
        # Token-count groups always get one positional split. After that a
        # shared non-unit cardinality hands the partition to bijection.
        if partition.stage is PartitionStage.LENGTH or stats.shared_cardinality() is None:
            return self.position_partitioner.split(partition, stats)
        return self.bijection_splitter.split(partition, stats)
