# geo_trie.py
# Prefix tree over the geohash alphabet. Each node owns its children;
# deletion prunes chains that no longer lead to a stored geohash.

from typing import Dict, Iterator, List, Set

from geohash_codec import common_prefix


class TrieNode:
    __slots__ = ("children", "is_end")

    def __init__(self):
        self.children: Dict[str, "TrieNode"] = {}
        self.is_end = False


class GeoHashTrie:
    def __init__(self):
        self.root = TrieNode()
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def __contains__(self, geohash: str) -> bool:
        return self.search(geohash)

    def __iter__(self) -> Iterator[str]:
        return iter(self._collect(self.root, "", ""))

    def copy(self) -> "GeoHashTrie":
        """Independent copy; writes to it never touch this trie."""
        clone = GeoHashTrie()
        clone._size = self._size
        stack = [(self.root, clone.root)]
        while stack:
            src, dst = stack.pop()
            dst.is_end = src.is_end
            for ch, child in src.children.items():
                new = dst.children[ch] = TrieNode()
                stack.append((child, new))
        return clone

    def insert(self, geohash: str) -> None:
        node = self.root
        for c in geohash:
            child = node.children.get(c)
            if child is None:
                child = node.children[c] = TrieNode()
            node = child
        if not node.is_end:
            node.is_end = True
            self._size += 1

    def search(self, geohash: str) -> bool:
        """Exact membership; a prefix of stored hashes is not a match."""
        node = self.root
        for c in geohash:
            node = node.children.get(c)
            if node is None:
                return False
        return node.is_end

    def delete(self, geohash: str) -> bool:
        """Remove a stored geohash. Returns False if it was never stored."""
        removed = [False]
        self._delete(self.root, geohash, 0, removed)
        if removed[0]:
            self._size -= 1
        return removed[0]

    def _delete(self, node: TrieNode, geohash: str, depth: int, removed: List[bool]) -> bool:
        # returns True when `node` no longer carries anything and can be dropped
        if depth == len(geohash):
            if not node.is_end:
                return False
            node.is_end = False
            removed[0] = True
            return not node.children

        c = geohash[depth]
        child = node.children.get(c)
        if child is None:
            return False
        if self._delete(child, geohash, depth + 1, removed):
            del node.children[c]
            return not node.children and not node.is_end
        return False

    def collect_by_prefix_range(self, sw_hash: str, ne_hash: str) -> Set[str]:
        """
        Candidate geohashes for the box spanned by two corner hashes.

        Only paths compatible with the corners' common prefix are walked, so
        the result is a superset of what lies inside the box: candidates,
        never a final answer. Callers re-check with exact distance or
        coordinate comparison.

        Shorter stored ancestors of the common prefix (e.g. a stored "te7"
        when the prefix is "te7ud") are walked through but not returned.
        """
        prefix = common_prefix(sw_hash, ne_hash)
        return set(self._collect(self.root, prefix, ""))

    def _collect(self, node: TrieNode, prefix: str, current: str) -> List[str]:
        results = []
        if node.is_end and current.startswith(prefix):
            results.append(current)
        for ch, child in node.children.items():
            nxt = current + ch
            if prefix.startswith(nxt) or nxt.startswith(prefix):
                results.extend(self._collect(child, prefix, nxt))
        return results

    def node_count(self) -> int:
        """Nodes below the root."""
        count = 0
        stack = [self.root]
        while stack:
            node = stack.pop()
            count += len(node.children)
            stack.extend(node.children.values())
        return count
