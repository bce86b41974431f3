"""Builder tree: model, document accessors, locating, normalizing, synthesizing."""

from .fallback import synthesize_fallback
from .locator import FIELD_PRIORITY, LocatedTree, locate_tree
from .model import NodeKind, TreeNode, count_nodes, generate_element_id
from .normalizer import TreeNormalizer, normalize_tree
from .payload import RemoteDocument, parse_document

__all__ = [
    "FIELD_PRIORITY",
    "LocatedTree",
    "NodeKind",
    "RemoteDocument",
    "TreeNode",
    "TreeNormalizer",
    "count_nodes",
    "generate_element_id",
    "locate_tree",
    "normalize_tree",
    "parse_document",
    "synthesize_fallback",
]
