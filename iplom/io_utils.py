"""
I/O utilities for reading log files.
"""

from pathlib import Path
from typing import Iterator, List, Optional


class LogFileReader:
    """
    Reader for plain-text log files, one message per line.

    Line terminators are stripped; blank lines are kept since they form
    the zero-token partition.
    """

    def __init__(self, file_path: str, limit: Optional[int] = None,
                 encoding: str = 'utf-8'):
        self.file_path = Path(file_path)
        self.limit = limit
        self.encoding = encoding

    def __iter__(self) -> Iterator[str]:
        """Iterate over lines in the file."""
        with open(self.file_path, 'r', encoding=self.encoding, errors='ignore') as f:
            for line_num, line in enumerate(f, 1):
                if self.limit is not None and line_num > self.limit:
                    break
                yield line.rstrip('\r\n')

    def read_lines(self) -> List[str]:
        """Read all lines from the file."""
        return list(self)
