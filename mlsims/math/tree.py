"""
Decision-tree implementation for mlsims.

This module provides entropy, information gain and the recursive
binary-split tree builder behind the decision-tree page. Trees are
immutable and always rebuilt from scratch when a parameter changes.
"""

import logging
import numpy as np
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from mlsims.math.points import Point, Sample
from mlsims.utils.general import (
    InvalidInputError, count_labels, feature_value, majority_label, point_label
)

# Set up logging
logger = logging.getLogger(__name__)

# Gains below this are rounding noise from equal child distributions
GAIN_TOLERANCE = 1e-12


class Leaf:
    """
    Terminal node predicting a single label.
    """

    def __init__(self, label: Any, samples: int, depth: int, counts: Optional[Dict[Any, int]] = None):
        """
        Args:
            label: Predicted (majority) label
            samples: Number of training samples that reached the node
            depth: Distance from the root
            counts: Label tally of those samples
        """
        self.label = label
        self.samples = samples
        self.depth = depth
        self.counts = dict(counts or {})

    @property
    def children(self) -> List[Any]:
        return []

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': 'leaf',
            'label': self.label,
            'samples': self.samples,
            'depth': self.depth,
            'counts': {str(label): count for label, count in self.counts.items()}
        }

    def __repr__(self) -> str:
        return f"Leaf(label={self.label!r}, samples={self.samples}, depth={self.depth})"


class Split:
    """
    Internal node: go left when feature <= threshold, right otherwise.
    """

    def __init__(self,
                feature: str,
                threshold: float,
                left: 'TreeNode',
                right: 'TreeNode',
                samples: int,
                depth: int,
                gain: float = 0.0):
        self.feature = feature
        self.threshold = float(threshold)
        self.left = left
        self.right = right
        self.samples = samples
        self.depth = depth
        self.gain = float(gain)

    @property
    def children(self) -> List['TreeNode']:
        return [self.left, self.right]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': 'split',
            'feature': self.feature,
            'threshold': self.threshold,
            'gain': self.gain,
            'samples': self.samples,
            'depth': self.depth,
            'children': [self.left.to_dict(), self.right.to_dict()]
        }

    def __repr__(self) -> str:
        return f"Split({self.feature} <= {self.threshold}, samples={self.samples}, depth={self.depth})"


TreeNode = Union[Leaf, Split]


def _as_label(item: Any) -> Any:
    # Samples, Points and mappings carry their label; anything else is a label
    if isinstance(item, (Mapping, Sample, Point)):
        return point_label(item)
    return item


def entropy(labels: Iterable[Any]) -> float:
    """
    Shannon entropy (base 2) of a collection of labels.

    Args:
        labels: Labels, or samples carrying a label

    Returns:
        Entropy in bits; 0.0 for an empty collection
    """
    labels = [_as_label(item) for item in labels]
    counts = np.array(list(count_labels(labels).values()), dtype=float)
    if counts.size == 0:
        return 0.0

    p = counts / np.sum(counts)
    return float(-np.sum(p * np.log2(p)))


def _labels(samples: Sequence[Any]) -> List[Any]:
    return [point_label(sample) for sample in samples]


def information_gain(samples: Sequence[Any], feature: str, threshold: float) -> float:
    """
    Entropy reduction from splitting samples on feature <= threshold.

    Args:
        samples: Labeled samples
        feature: Feature name
        threshold: Split threshold

    Returns:
        H(parent) minus the size-weighted entropy of the two children
    """
    if not samples:
        return 0.0

    left = [s for s in samples if feature_value(s, feature) <= threshold]
    right = [s for s in samples if feature_value(s, feature) > threshold]

    n = len(samples)
    weighted = (len(left) / n) * entropy(_labels(left)) + (len(right) / n) * entropy(_labels(right))

    return entropy(_labels(samples)) - weighted


def find_best_split(samples: Sequence[Any], features: Sequence[str]) -> Optional[Dict[str, Any]]:
    """
    Search every feature for the threshold with the highest information gain.

    Candidate thresholds are the midpoints between consecutive distinct
    sorted values. Only a strictly higher gain replaces the current best,
    so the first candidate found wins ties.

    Args:
        samples: Labeled samples
        features: Feature names to consider, in order

    Returns:
        Dictionary with 'feature', 'threshold' and 'gain', or None when no
        split has a positive gain
    """
    best_gain = GAIN_TOLERANCE
    best_split = None

    for feature in features:
        values = np.unique([feature_value(s, feature) for s in samples])

        for low, high in zip(values[:-1], values[1:]):
            threshold = (low + high) / 2
            gain = information_gain(samples, feature, threshold)

            if gain > best_gain:
                best_gain = gain
                best_split = {'feature': feature, 'threshold': float(threshold), 'gain': float(gain)}

    return best_split


def _leaf(samples: Sequence[Any], depth: int) -> Leaf:
    labels = _labels(samples)
    return Leaf(majority_label(labels), len(samples), depth, count_labels(labels))


def build_tree(samples: Sequence[Any],
              features: Sequence[str],
              max_depth: Optional[int] = 4,
              min_samples_split: int = 3,
              min_samples_leaf: int = 2,
              depth: int = 0) -> TreeNode:
    """
    Grow a binary decision tree top-down.

    A node becomes a leaf, checked in this order, when: the depth reached
    max_depth or the node is pure; it holds fewer than min_samples_split
    samples; no split improves entropy; the best split would leave a child
    with fewer than min_samples_leaf samples.

    Args:
        samples: Labeled samples (Sample, Point or mapping)
        features: Feature names to split on
        max_depth: Depth limit, None for unbounded
        min_samples_split: Minimum samples required to split a node
        min_samples_leaf: Minimum samples required in each child
        depth: Depth of this node (0 for the root)

    Returns:
        Root of the tree
    """
    samples = list(samples)
    if not samples:
        raise InvalidInputError("Cannot build a tree from an empty sample set")
    if depth == 0:
        if max_depth is not None and max_depth < 0:
            raise InvalidInputError(f"max_depth must be non-negative, got {max_depth}")
        if not features:
            raise InvalidInputError("At least one feature is required")

    labels = _labels(samples)
    depth_reached = max_depth is not None and depth >= max_depth

    if depth_reached or len(set(labels)) == 1:
        return _leaf(samples, depth)

    if len(samples) < min_samples_split:
        return _leaf(samples, depth)

    best_split = find_best_split(samples, features)
    if best_split is None:
        return _leaf(samples, depth)

    feature = best_split['feature']
    threshold = best_split['threshold']
    left = [s for s in samples if feature_value(s, feature) <= threshold]
    right = [s for s in samples if feature_value(s, feature) > threshold]

    if len(left) < min_samples_leaf or len(right) < min_samples_leaf:
        return _leaf(samples, depth)

    logger.debug(f"Depth {depth}: split {len(samples)} samples on {feature} <= {threshold:.4f} "
                 f"(gain {best_split['gain']:.4f})")

    return Split(
        feature=feature,
        threshold=threshold,
        left=build_tree(left, features, max_depth, min_samples_split, min_samples_leaf, depth + 1),
        right=build_tree(right, features, max_depth, min_samples_split, min_samples_leaf, depth + 1),
        samples=len(samples),
        depth=depth,
        gain=best_split['gain']
    )


def predict(tree: TreeNode, sample: Any) -> Any:
    """
    Walk the tree from the root and return the label of the leaf reached.

    Args:
        tree: Root node
        sample: Sample, Point or mapping with the tree's features

    Returns:
        Predicted label
    """
    node = tree
    while isinstance(node, Split):
        if feature_value(sample, node.feature) <= node.threshold:
            node = node.left
        else:
            node = node.right
    return node.label


def accuracy(tree: TreeNode, samples: Sequence[Any]) -> float:
    """
    Fraction of samples whose label the tree predicts correctly.
    """
    samples = list(samples)
    if not samples:
        return 0.0

    correct = sum(1 for s in samples if predict(tree, s) == point_label(s))
    return correct / len(samples)


def count_nodes(tree: TreeNode) -> int:
    return 1 + sum(count_nodes(child) for child in tree.children)


def count_leaves(tree: TreeNode) -> int:
    if isinstance(tree, Leaf):
        return 1
    return count_leaves(tree.left) + count_leaves(tree.right)


def tree_depth(tree: TreeNode) -> int:
    """
    Depth of the deepest leaf.
    """
    if isinstance(tree, Leaf):
        return tree.depth
    return max(tree_depth(tree.left), tree_depth(tree.right))
