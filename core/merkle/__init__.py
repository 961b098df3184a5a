"""
Module 04 - Merkle Tree and Selective Disclosure
Deterministic Merkle tree construction plus filtered partial views.

Owner: Protocol/Crypto Engineer
Module ID: M04

This module provides:
- build_merkle_root / build_merkle_levels: roots over leaf digests
- SelectiveDisclosureTree: tree over transaction components
- PartialView: filtered projection that keeps the root
- verify_structure: recompute and check a view's root

Usage:
    from core.merkle import SelectiveDisclosureTree, verify_structure

    tree = SelectiveDisclosureTree.build([command, state])
    view = tree.filter(lambda c: c.kind == "create_command")
    assert verify_structure(view)
    assert view.root == tree.id
"""
from .merkle_tree import (
    EMPTY_TREE_ROOT,
    merkle_parent,
    level_sizes,
    build_merkle_levels,
    build_merkle_root,
    compute_tree_depth,
)

from .partial_tree import (
    BranchNode,
    ComponentPredicate,
    HiddenNode,
    PartialNode,
    PartialView,
    SelectiveDisclosureTree,
    VisibleLeaf,
    build_disclosure_tree,
    component_leaf_hash,
    compute_view_root,
    filter_tree,
    verify_structure,
)


__all__ = [
    # Tree primitives
    "EMPTY_TREE_ROOT",
    "merkle_parent",
    "level_sizes",
    "build_merkle_levels",
    "build_merkle_root",
    "compute_tree_depth",
    # Selective disclosure
    "BranchNode",
    "ComponentPredicate",
    "HiddenNode",
    "PartialNode",
    "PartialView",
    "SelectiveDisclosureTree",
    "VisibleLeaf",
    "build_disclosure_tree",
    "component_leaf_hash",
    "compute_view_root",
    "filter_tree",
    "verify_structure",
]
