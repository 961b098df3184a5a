"""
Module 04 - Merkle Tree Implementation
Deterministic binary Merkle tree over leaf digests.

Owner: Protocol/Crypto Engineer
Module ID: M04

Canonical Commitment Rules (Hard Contracts):
1. Parent hashing: parent = sha256(left + right)
2. Padding rule: Duplicate last node if odd number at any level
3. Empty leaves: build_merkle_root([]) returns sha256(b"")
4. Single leaf: root = leaf (the leaf hash itself)

Leaf digests are produced upstream (see core.merkle.partial_tree); this
module never sorts leaves, it trusts input order.
"""
from __future__ import annotations

from typing import Sequence

from core.crypto.hashing import hash_concat, sha256


# Empty tree sentinel: sha256 of empty bytes
EMPTY_TREE_ROOT: bytes = sha256(b"")


def merkle_parent(left: bytes, right: bytes) -> bytes:
    """Compute the parent hash of two child nodes: sha256(left + right)."""
    return hash_concat(left, right)


def level_sizes(num_leaves: int) -> list[int]:
    """
    Number of nodes at each level, leaves first, root last.

    Padding duplicates are not counted: a level of 3 nodes reports 3
    and its parent level reports 2.

    Example:
        >>> level_sizes(5)
        [5, 3, 2, 1]
    """
    if num_leaves < 0:
        raise ValueError(f"Leaf count must be non-negative, got {num_leaves}")
    if num_leaves == 0:
        return []
    sizes = [num_leaves]
    while sizes[-1] > 1:
        sizes.append((sizes[-1] + 1) // 2)
    return sizes


def build_merkle_levels(leaves: Sequence[bytes]) -> list[list[bytes]]:
    """
    Build every level of the tree, leaves first, root level last.

    Levels are stored unpadded; the duplicate used for an odd level is
    implied by the padding rule.
    """
    if len(leaves) == 0:
        return []

    levels: list[list[bytes]] = [list(leaves)]
    while len(levels[-1]) > 1:
        current = levels[-1]
        next_level: list[bytes] = []
        for i in range(0, len(current), 2):
            left = current[i]
            # Pad with duplicate of last node if odd
            right = current[i + 1] if i + 1 < len(current) else left
            next_level.append(merkle_parent(left, right))
        levels.append(next_level)
    return levels


def build_merkle_root(leaves: Sequence[bytes]) -> bytes:
    """
    Build a Merkle root from a sequence of leaf hashes.

    Padding Rule: Duplicate last node at each level if odd.
    Example: [a, b, c] -> [a, b, c, c] -> [parent(a,b), parent(c,c)]

    Returns:
        32-byte Merkle root
    """
    if len(leaves) == 0:
        return EMPTY_TREE_ROOT
    return build_merkle_levels(leaves)[-1][0]


def compute_tree_depth(num_leaves: int) -> int:
    """
    Depth of a Merkle tree with ``num_leaves`` leaves.

    Depth counts levels from leaves to root inclusive: a single leaf
    has depth 1, two leaves depth 2, an empty tree depth 0.
    """
    return len(level_sizes(num_leaves))


__all__ = [
    "EMPTY_TREE_ROOT",
    "merkle_parent",
    "level_sizes",
    "build_merkle_levels",
    "build_merkle_root",
    "compute_tree_depth",
]
