"""
Module 04 - Selective Disclosure Tree
Merkle tree over transaction components that can be filtered into a
partial view exposing only chosen leaves.

Owner: Protocol/Crypto Engineer
Module ID: M04

Leaf Rules (Hard Contracts):
1. nonce_i = sha256(privacy_salt || i) (see core.crypto.hashing.derive_nonce)
2. leaf_i = sha256(dumps_canonical({"component": c_i, "nonce": hex(nonce_i)}))
3. Tree shape and padding follow core.merkle.merkle_tree exactly, so
   root(view) == root(tree) for every predicate.

A partial view is a tagged tree:
- VisibleLeaf: a disclosed component with its position and nonce
- HiddenNode: the digest of a leaf or of a fully hidden subtree
- BranchNode: two children; ``right=None`` marks the padded duplicate
  of ``left`` on an odd level

Hidden digests cannot be inverted, so a view only lets its holder
recompute the root and inspect what was disclosed.
"""
from __future__ import annotations

import os
from typing import Annotated, Callable, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from core.crypto.hashing import DIGEST_SIZE, derive_nonce, from_hex, hash_canonical, to_hex
from core.merkle.merkle_tree import (
    EMPTY_TREE_ROOT,
    build_merkle_levels,
    level_sizes,
    merkle_parent,
)
from core.schemas.errors import MalformedDisclosureException
from core.schemas.ledger import LedgerComponent


PRIVACY_SALT_SIZE = 32

# Leaf positions are encoded in 4 bytes when deriving nonces
MAX_LEAF_COUNT = 2**32

ComponentPredicate = Callable[[LedgerComponent], bool]


# =============================================================================
# Partial View Nodes
# =============================================================================

class VisibleLeaf(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    node: Literal["visible"] = "visible"
    index: int = Field(..., ge=0, description="Position of the leaf in the tree")
    nonce: str = Field(..., description="Leaf nonce (0x hex)")
    component: LedgerComponent


class HiddenNode(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    node: Literal["hidden"] = "hidden"
    digest: str = Field(..., description="Digest standing in for the hidden subtree (0x hex)")


class BranchNode(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    node: Literal["branch"] = "branch"
    left: "PartialNode"
    right: Optional["PartialNode"] = None


PartialNode = Annotated[
    Union[VisibleLeaf, HiddenNode, BranchNode],
    Field(discriminator="node"),
]

BranchNode.model_rebuild()


class PartialView(BaseModel):
    """
    Read-only projection of a SelectiveDisclosureTree.

    Attributes:
        root: Committed Merkle root of the full tree (0x hex)
        leaf_count: Number of leaves in the full tree
        tree: Root node of the pruned tree, None for an empty tree
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    root: str
    leaf_count: int = Field(..., ge=0, le=MAX_LEAF_COUNT)
    tree: Optional[PartialNode] = None

    @property
    def root_bytes(self) -> bytes:
        return from_hex(self.root)

    def visible_leaves(self) -> list[VisibleLeaf]:
        """Disclosed leaves in tree order. Does not verify the view."""
        found: list[VisibleLeaf] = []
        stack = [self.tree] if self.tree is not None else []
        while stack:
            node = stack.pop()
            if isinstance(node, VisibleLeaf):
                found.append(node)
            elif isinstance(node, BranchNode):
                if node.right is not None:
                    stack.append(node.right)
                stack.append(node.left)
        return found

    def visible_components(self) -> list[LedgerComponent]:
        return [leaf.component for leaf in self.visible_leaves()]


# =============================================================================
# Leaf Hashing
# =============================================================================

def component_leaf_hash(component: LedgerComponent, nonce_hex: str) -> bytes:
    """Digest of a component salted with its leaf nonce."""
    return hash_canonical({"component": component, "nonce": nonce_hex})


# =============================================================================
# Full Tree
# =============================================================================

class SelectiveDisclosureTree:
    """
    Merkle tree over an ordered sequence of transaction components.

    Owned by the requester. Only views produced by ``filter`` are meant
    to be handed to other parties.

    Example:
        >>> tree = SelectiveDisclosureTree.build([command, state])
        >>> view = tree.filter(lambda c: isinstance(c, CreateCommand))
        >>> view.root == tree.id
        True
    """

    def __init__(self, components: Sequence[LedgerComponent], privacy_salt: bytes) -> None:
        if len(privacy_salt) != PRIVACY_SALT_SIZE:
            raise ValueError(
                f"Privacy salt must be {PRIVACY_SALT_SIZE} bytes, got {len(privacy_salt)}"
            )
        if len(components) > MAX_LEAF_COUNT:
            raise ValueError(f"Too many components: {len(components)}")
        self._components: tuple[LedgerComponent, ...] = tuple(components)
        self._privacy_salt = privacy_salt
        self._nonces: list[str] = [
            to_hex(derive_nonce(privacy_salt, i)) for i in range(len(self._components))
        ]
        leaves = [
            component_leaf_hash(component, nonce)
            for component, nonce in zip(self._components, self._nonces)
        ]
        self._levels = build_merkle_levels(leaves)

    @classmethod
    def build(
        cls,
        components: Sequence[LedgerComponent],
        privacy_salt: bytes | None = None,
    ) -> "SelectiveDisclosureTree":
        """Build a tree, drawing a fresh privacy salt unless one is given."""
        if privacy_salt is None:
            privacy_salt = os.urandom(PRIVACY_SALT_SIZE)
        return cls(components, privacy_salt)

    @property
    def components(self) -> tuple[LedgerComponent, ...]:
        return self._components

    @property
    def privacy_salt(self) -> bytes:
        return self._privacy_salt

    @property
    def leaf_count(self) -> int:
        return len(self._components)

    @property
    def root(self) -> bytes:
        if not self._levels:
            return EMPTY_TREE_ROOT
        return self._levels[-1][0]

    @property
    def id(self) -> str:
        """Root digest as 0x hex."""
        return to_hex(self.root)

    def filter(self, predicate: ComponentPredicate) -> PartialView:
        """
        Produce a view disclosing only the components matching ``predicate``.

        Non-matching leaves become HiddenNode placeholders; subtrees with
        no disclosed leaf collapse into a single HiddenNode. The view's
        root equals this tree's root.
        """
        if not self._levels:
            return PartialView(root=self.id, leaf_count=0, tree=None)

        def prune(level: int, position: int) -> tuple[PartialNode, bool]:
            if level == 0:
                component = self._components[position]
                if predicate(component):
                    leaf = VisibleLeaf(
                        index=position,
                        nonce=self._nonces[position],
                        component=component,
                    )
                    return leaf, True
                return HiddenNode(digest=to_hex(self._levels[0][position])), False

            left, left_visible = prune(level - 1, 2 * position)
            right: PartialNode | None = None
            right_visible = False
            if 2 * position + 1 < len(self._levels[level - 1]):
                right, right_visible = prune(level - 1, 2 * position + 1)

            if not (left_visible or right_visible):
                return HiddenNode(digest=to_hex(self._levels[level][position])), False
            return BranchNode(left=left, right=right), True

        tree, _ = prune(len(self._levels) - 1, 0)
        return PartialView(root=self.id, leaf_count=self.leaf_count, tree=tree)


# =============================================================================
# View Verification
# =============================================================================

def compute_view_root(view: PartialView) -> bytes:
    """
    Recompute the root digest of a partial view.

    Walks the view top-down, checking every node sits where a tree with
    ``view.leaf_count`` leaves puts it: disclosed leaves only at the leaf
    level and at their stated position, padding markers only on the last
    node of an odd level, hidden digests of the right length.

    Raises:
        MalformedDisclosureException: If the view's shape is inconsistent
    """
    sizes = level_sizes(view.leaf_count)
    if not sizes:
        if view.tree is not None:
            raise MalformedDisclosureException(
                "Empty tree must not carry nodes",
                details={"leaf_count": 0},
            )
        return EMPTY_TREE_ROOT
    if view.tree is None:
        raise MalformedDisclosureException(
            "Non-empty tree is missing its nodes",
            details={"leaf_count": view.leaf_count},
        )

    def fold(node: PartialNode, level: int, position: int) -> bytes:
        if isinstance(node, HiddenNode):
            try:
                digest = from_hex(node.digest)
            except ValueError as e:
                raise MalformedDisclosureException(
                    f"Hidden digest is not valid hex: {e}",
                    details={"level": level, "position": position},
                ) from e
            if len(digest) != DIGEST_SIZE:
                raise MalformedDisclosureException(
                    f"Hidden digest must be {DIGEST_SIZE} bytes, got {len(digest)}",
                    details={"level": level, "position": position},
                )
            return digest

        if isinstance(node, VisibleLeaf):
            if level != 0 or node.index != position:
                raise MalformedDisclosureException(
                    "Disclosed leaf is out of place",
                    details={"level": level, "position": position, "index": node.index},
                )
            return component_leaf_hash(node.component, node.nonce)

        if level == 0:
            raise MalformedDisclosureException(
                "Branch found at leaf level",
                details={"position": position},
            )
        left = fold(node.left, level - 1, 2 * position)
        if 2 * position + 1 < sizes[level - 1]:
            if node.right is None:
                raise MalformedDisclosureException(
                    "Branch is missing its right child",
                    details={"level": level, "position": position},
                )
            right = fold(node.right, level - 1, 2 * position + 1)
        else:
            if node.right is not None:
                raise MalformedDisclosureException(
                    "Padded branch must not carry a right child",
                    details={"level": level, "position": position},
                )
            right = left
        return merkle_parent(left, right)

    return fold(view.tree, len(sizes) - 1, 0)


def verify_structure(view: PartialView) -> bool:
    """
    Check a partial view against its committed root.

    Returns False if the recomputed root differs from ``view.root`` or
    the view's shape is inconsistent with its leaf count. A view with
    no disclosed leaves verifies as long as its digests add up.
    """
    try:
        return compute_view_root(view) == from_hex(view.root)
    except (MalformedDisclosureException, ValueError):
        return False


def build_disclosure_tree(
    components: Sequence[LedgerComponent],
    privacy_salt: bytes | None = None,
) -> SelectiveDisclosureTree:
    return SelectiveDisclosureTree.build(components, privacy_salt)


def filter_tree(tree: SelectiveDisclosureTree, predicate: ComponentPredicate) -> PartialView:
    return tree.filter(predicate)


__all__ = [
    "PRIVACY_SALT_SIZE",
    "MAX_LEAF_COUNT",
    "ComponentPredicate",
    "VisibleLeaf",
    "HiddenNode",
    "BranchNode",
    "PartialNode",
    "PartialView",
    "SelectiveDisclosureTree",
    "component_leaf_hash",
    "compute_view_root",
    "verify_structure",
    "build_disclosure_tree",
    "filter_tree",
]
