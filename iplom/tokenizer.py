"""
Delimiter-based tokenization of raw log lines.
"""

import re
from typing import Iterable, List

from .config import DEFAULT_DELIMITERS
from .models import LogLine


class Tokenizer:
    """
    Splits a log line on a set of single-character delimiters.

    Delimiters are dropped and runs of delimiters collapse, so empty tokens
    are never emitted.
    """

    def __init__(self, delimiters: str = DEFAULT_DELIMITERS):
        self.delimiters = delimiters
        if delimiters:
            self._token_pattern = re.compile(f"[^{re.escape(delimiters)}]+")
        else:
            self._token_pattern = None

    def tokenize(self, line: str) -> List[str]:
        """Tokenize a line into its ordered non-delimiter substrings."""
        if self._token_pattern is None:
            return [line] if line else []
        return self._token_pattern.findall(line)

    def to_log_line(self, text: str, line_id: int = 0) -> LogLine:
        return LogLine(line_id=line_id, text=text, tokens=tuple(self.tokenize(text)))

    def tokenize_all(self, lines: Iterable[str]) -> List[LogLine]:
        """Build LogLine values for a sequence of raw lines, numbered from 0."""
        return [self.to_log_line(text, line_id) for line_id, text in enumerate(lines)]
