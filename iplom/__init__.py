"""
Iterative Partitioning Log Mining

A Python library for grouping free-text log lines into event types and
deriving a literal/wildcard template for each type from token counts,
token position value distributions and token co-occurrence.
"""

__version__ = "1.0.0"
__author__ = "Log Template Extraction System"

from .config import IPLoMConfig, ConfigurationError
from .models import (
    LogLine, PartitionKey, Partition, Template, TemplateSlot,
    Cluster, MiningResult, TemplateMatch, MappingType
)
from .tokenizer import Tokenizer
from .statistics import PositionStatistics
from .partitioning import LengthPartitioner, PositionPartitioner
from .bijection import BijectionSplitter, classify_mapping
from .templating import TemplateBuilder
from .miner import IPLoMMiner
from .trie import TemplateTrie
from .io_utils import LogFileReader

__all__ = [
    "IPLoMConfig",
    "ConfigurationError",
    "LogLine",
    "PartitionKey",
    "Partition",
    "Template",
    "TemplateSlot",
    "Cluster",
    "MiningResult",
    "TemplateMatch",
    "MappingType",
    "Tokenizer",
    "PositionStatistics",
    "LengthPartitioner",
    "PositionPartitioner",
    "BijectionSplitter",
    "classify_mapping",
    "TemplateBuilder",
    "IPLoMMiner",
    "TemplateTrie",
    "LogFileReader",
]
