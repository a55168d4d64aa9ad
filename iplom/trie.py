"""
Trie-based matcher that assigns new log lines to mined templates.

Templates are fixed-length, so a wildcard slot consumes exactly one
token. When several templates match, the one with the most literal
slots wins.
"""

from typing import Dict, List, Optional, Tuple

from .config import IPLoMConfig
from .models import Cluster, MiningResult, Template, TemplateMatch
from .tokenizer import Tokenizer


class TrieNode:
    """A node in the template trie."""

    def __init__(self):
        self.children: Dict[str, 'TrieNode'] = {}
        self.wildcard_child: Optional['TrieNode'] = None
        self.entries: List[Tuple[str, Template]] = []

    def add_child(self, token: Optional[str]) -> 'TrieNode':
        """Add a child node for a literal token, or the wildcard when token is None."""
        if token is None:
            if self.wildcard_child is None:
                self.wildcard_child = TrieNode()
            return self.wildcard_child
        if token not in self.children:
            self.children[token] = TrieNode()
        return self.children[token]


class TemplateTrie:
    """
    Trie of mined templates keyed by literal tokens and wildcard slots.
    """

    def __init__(self, config: Optional[IPLoMConfig] = None):
        self.config = config or IPLoMConfig()
        self.tokenizer = Tokenizer(self.config.delimiters)
        self.root = TrieNode()

    @classmethod
    def from_result(cls, result: MiningResult,
                    config: Optional[IPLoMConfig] = None) -> 'TemplateTrie':
        trie = cls(config)
        for cluster in result.clusters:
            trie.add_cluster(cluster)
        return trie

    def add_template(self, cluster_id: str, template: Template) -> None:
        """Add a template to the trie."""
        current = self.root
        for slot in template.slots:
            current = current.add_child(slot.value)
        current.entries.append((cluster_id, template))

    def add_cluster(self, cluster: Cluster) -> None:
        self.add_template(cluster.cluster_id, cluster.template)

    def _match_tokens(self, tokens: List[str]) -> List[Tuple[str, Template, List[str]]]:
        """Walk the trie with an explicit stack of (node, token index, captured values)."""
        matches = []
        pending = [(self.root, 0, ())]

        while pending:
            node, token_idx, captured_values = pending.pop()
            if token_idx == len(tokens):
                matches.extend((cluster_id, template, list(captured_values))
                               for cluster_id, template in node.entries)
                continue

            token = tokens[token_idx]
            if node.wildcard_child:
                pending.append((node.wildcard_child, token_idx + 1, captured_values + (token,)))

            exact_child = node.children.get(token)
            if exact_child:
                pending.append((exact_child, token_idx + 1, captured_values))

        return matches

    def match(self, log_line: str) -> List[TemplateMatch]:
        """
        Match a log line against all templates in the trie.

        Returns:
            List of TemplateMatch objects, most specific first
        """
        tokens = self.tokenizer.tokenize(log_line)
        matches = []
        for cluster_id, template, values in self._match_tokens(tokens):
            confidence = template.literal_count / len(tokens) if tokens else 1.0
            matches.append(TemplateMatch(
                cluster_id=cluster_id,
                template=template,
                confidence=confidence,
                extracted_values=values
            ))

        matches.sort(key=lambda m: (-m.template.literal_count, m.cluster_id))
        return matches

    def get_best_match(self, log_line: str) -> Optional[TemplateMatch]:
        matches = self.match(log_line)
        return matches[0] if matches else None

    def size(self) -> int:
        """Return the number of templates stored in the trie."""
        return self._count_templates(self.root)

    def _count_templates(self, node: TrieNode) -> int:
        count = 0
        pending = [node]
        while pending:
            current = pending.pop()
            count += len(current.entries)
            pending.extend(current.children.values())
            if current.wildcard_child:
                pending.append(current.wildcard_child)
        return count
