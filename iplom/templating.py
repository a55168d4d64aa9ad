"""
Template derivation for accepted clusters.

A position becomes a literal when every member line carries the same
token there, and a wildcard otherwise.
"""

import hashlib
from typing import Iterable, Optional

from .config import IPLoMConfig
from .models import Cluster, LogLine, Partition, PartitionKey, Template, TemplateSlot


class TemplateBuilder:
    """
    Builds templates and cluster records from terminal partitions.
    """

    def __init__(self, config: Optional[IPLoMConfig] = None):
        self.config = config or IPLoMConfig()

    def build_template(self, lines: Iterable[LogLine], token_count: int) -> Template:
        """
        Derive the literal/wildcard template of a group of lines.

        Args:
            lines: Member lines, all with token_count tokens
            token_count: Length of the template

        Returns:
            Template with one slot per position
        """
        values = [set() for _ in range(token_count)]
        for line in lines:
            if line.token_count != token_count:
                raise ValueError(
                    f"Line {line.line_id} has {line.token_count} tokens, expected {token_count}"
                )
            for position, token in enumerate(line.tokens):
                values[position].add(token)

        slots = []
        for observed in values:
            if len(observed) == 1:
                slots.append(TemplateSlot(next(iter(observed))))
            else:
                slots.append(TemplateSlot())

        return Template(slots=slots, wildcard=self.config.wildcard, joiner=self.config.joiner)

    def build_cluster(self, partition: Partition, aborted: bool = False) -> Cluster:
        """Turn a terminal partition into a cluster with its template."""
        if partition.is_outlier:
            raise ValueError(f"Outlier partition {partition.key} cannot become a cluster")

        template = self.build_template(partition.lines, partition.token_count)
        return Cluster(
            cluster_id=self._create_cluster_id(partition.key),
            key=partition.key,
            template=template,
            lines=sorted(partition.lines, key=lambda line: line.line_id),
            aborted=aborted,
        )

    def _create_cluster_id(self, key: PartitionKey) -> str:
        """Create a stable cluster identifier from the partition key."""
        content = f"{key.token_count}:{key.constraints!r}"
        hash_obj = hashlib.md5(content.encode('utf-8'))
        return hash_obj.hexdigest()[:16]
