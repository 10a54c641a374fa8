"""
K-means clustering implementation for mlsims.

This module provides Lloyd's algorithm with random or k-means++ seeding,
the within-cluster sum of squares, an elbow-curve helper and the silhouette
coefficient used by the K-means and Euclidean distance pages.
"""

import logging
import numpy as np
from copy import deepcopy
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from scipy.spatial.distance import pdist, squareform

from mlsims.utils.general import InvalidInputError, as_xy_array, check_k, point_id, resolve_rng

# Set up logging
logger = logging.getLogger(__name__)

INIT_METHODS = ('random', 'kmeans++')


class Cluster:
    """
    Represents a cluster in K-means clustering.
    """

    def __init__(self,
                center: np.ndarray,
                members: Optional[List[int]] = None,
                id: Optional[int] = None):
        """
        Initialize a cluster with a center and optional members.

        Args:
            center: The center of the cluster
            members: Indices of members belonging to the cluster
            id: Cluster index
        """
        self.center = np.array(center, dtype=float)
        self.members = [] if members is None else list(members)
        self.id = id

    def add_member(self, idx: int) -> None:
        self.members.append(idx)

    def clear_members(self) -> None:
        self.members = []

    def update_center(self, data: np.ndarray) -> None:
        """
        Move the center to the mean of the members.

        A cluster without members keeps its current center.

        Args:
            data: Data matrix containing all points
        """
        if not self.members:
            return

        self.center = np.mean(data[self.members], axis=0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'center': self.center.tolist(),
            'members': list(self.members)
        }

    def __repr__(self) -> str:
        return f"Cluster(id={self.id}, members={len(self.members)})"


class KMeansResult:
    """
    Outcome of one K-means run.
    """

    def __init__(self,
                clusters: List[Cluster],
                assignments: Dict[Any, int],
                wcss: float,
                converged: bool,
                iterations: int):
        """
        Args:
            clusters: Final clusters, indexed by cluster id
            assignments: Point id -> cluster index, keyed by position instead
                when any id is missing or repeated
            wcss: Within-cluster sum of squared distances
            converged: Whether every centroid moved less than the threshold
            iterations: Number of assign/update steps performed
        """
        self.clusters = clusters
        self.assignments = assignments
        self.wcss = float(wcss)
        self.converged = bool(converged)
        self.iterations = int(iterations)

    @property
    def centroids(self) -> np.ndarray:
        """Final centroids as a (k, 2) array."""
        return np.array([cluster.center for cluster in self.clusters])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'centroids': self.centroids.tolist(),
            'assignments': {str(key): value for key, value in self.assignments.items()},
            'wcss': self.wcss,
            'converged': self.converged,
            'iterations': self.iterations
        }

    def __repr__(self) -> str:
        return (f"KMeansResult(k={len(self.clusters)}, wcss={self.wcss:.3f}, "
                f"converged={self.converged}, iterations={self.iterations})")


def euclidean_distance(a: np.ndarray, b: np.ndarray) -> float:
    """
    Calculate Euclidean distance between two vectors.
    """
    return float(np.linalg.norm(np.asarray(a) - np.asarray(b)))


def init_clusters(data: np.ndarray, k: int, rng: Any = None) -> List[Cluster]:
    """
    Seed k clusters on k distinct data points picked by shuffling.

    Args:
        data: Data matrix
        k: Number of clusters
        rng: numpy Generator or int seed

    Returns:
        List of clusters with empty member lists
    """
    generator = resolve_rng(rng)
    order = generator.permutation(data.shape[0])

    return [Cluster(data[idx], [], i) for i, idx in enumerate(order[:k])]


def init_clusters_plus_plus(data: np.ndarray, k: int, rng: Any = None) -> List[Cluster]:
    """
    Seed k clusters with k-means++.

    The first center is a uniformly random point; each further center is
    drawn with probability proportional to the squared distance to the
    nearest center chosen so far.

    Args:
        data: Data matrix
        k: Number of clusters
        rng: numpy Generator or int seed

    Returns:
        List of clusters with empty member lists
    """
    generator = resolve_rng(rng)
    n_points = data.shape[0]

    centers = [data[generator.integers(n_points)]]

    for _ in range(1, k):
        min_dists = np.array([
            min(euclidean_distance(point, center) for center in centers) ** 2
            for point in data
        ])

        total = np.sum(min_dists)
        if total == 0:
            # Every point sits on a center already
            probs = np.ones(n_points) / n_points
        else:
            probs = min_dists / total

        centers.append(data[generator.choice(n_points, p=probs)])

    return [Cluster(center, [], i) for i, center in enumerate(centers)]


def assign_points(data: np.ndarray, clusters: List[Cluster]) -> None:
    """
    Assign each data point to the nearest cluster.

    Ties go to the cluster listed first.

    Args:
        data: Data matrix
        clusters: List of clusters, member lists are rebuilt in place
    """
    for cluster in clusters:
        cluster.clear_members()

    for i, point in enumerate(data):
        min_dist = float('inf')
        nearest_cluster = None

        for cluster in clusters:
            dist = euclidean_distance(point, cluster.center)
            if dist < min_dist:
                min_dist = dist
                nearest_cluster = cluster

        if nearest_cluster is not None:
            nearest_cluster.add_member(i)


def update_centroids(data: np.ndarray, clusters: List[Cluster]) -> None:
    """
    Update the centers of all clusters.
    """
    for cluster in clusters:
        cluster.update_center(data)


def kmeans_step(data: np.ndarray, clusters: List[Cluster]) -> List[Cluster]:
    """
    Perform one assign/update step of K-means.

    Args:
        data: Data matrix
        clusters: Current clusters

    Returns:
        Updated copies of the clusters
    """
    clusters = deepcopy(clusters)

    assign_points(data, clusters)
    update_centroids(data, clusters)

    return clusters


def has_converged(old_clusters: List[Cluster],
                 new_clusters: List[Cluster],
                 convergence_eps: float = 0.1) -> bool:
    """
    Check whether every center moved less than convergence_eps.

    Args:
        old_clusters: Clusters before the step
        new_clusters: Clusters after the step, in the same order
        convergence_eps: Movement threshold in data units

    Returns:
        True if all centers moved less than the threshold
    """
    return all(
        euclidean_distance(old.center, new.center) < convergence_eps
        for old, new in zip(old_clusters, new_clusters)
    )


def compute_wcss(data: np.ndarray, clusters: List[Cluster]) -> float:
    """
    Within-cluster sum of squared distances to the cluster centers.
    """
    wcss = 0.0
    for cluster in clusters:
        if cluster.members:
            wcss += float(np.sum((data[cluster.members] - cluster.center) ** 2))
    return wcss


def _assignment_keys(points: Union[Sequence[Any], np.ndarray], n: int) -> List[Any]:
    """
    Point ids when every point has one and they stay distinct as strings,
    otherwise positions, so every point keeps its own entry.
    """
    if isinstance(points, np.ndarray):
        return list(range(n))

    ids = [point_id(point) for point in points]
    if None in ids or len({str(pid) for pid in ids}) < n:
        return list(range(n))
    return ids


def kmeans(points: Union[Sequence[Any], np.ndarray],
          k: int,
          rng: Any = None,
          max_iterations: int = 10,
          convergence_eps: float = 0.1,
          init: str = 'random') -> KMeansResult:
    """
    Partition points into k clusters with Lloyd's algorithm.

    Args:
        points: Points, (x, y) pairs or an (n, 2) array
        k: Number of clusters, 1 <= k <= number of points
        rng: numpy Generator or int seed for the initialization
        max_iterations: Cap on assign/update steps
        convergence_eps: Stop once every centroid moves less than this
        init: 'random' (shuffle) or 'kmeans++'

    Returns:
        KMeansResult
    """
    if init not in INIT_METHODS:
        raise InvalidInputError(f"Unknown initialization method: {init}")
    if max_iterations < 1:
        raise InvalidInputError(f"max_iterations must be at least 1, got {max_iterations}")

    if not isinstance(points, np.ndarray):
        points = list(points)
    data = as_xy_array(points)
    check_k(k, data.shape[0])

    generator = resolve_rng(rng)
    if init == 'kmeans++':
        clusters = init_clusters_plus_plus(data, k, generator)
    else:
        clusters = init_clusters(data, k, generator)

    converged = False
    iterations = 0

    for _ in range(max_iterations):
        new_clusters = kmeans_step(data, clusters)
        iterations += 1

        converged = has_converged(clusters, new_clusters, convergence_eps)
        clusters = new_clusters

        if converged:
            break

    if not converged:
        logger.warning(f"K-means stopped at the iteration cap ({max_iterations}) before converging")
    else:
        logger.debug(f"K-means converged after {iterations} iterations")

    keys = _assignment_keys(points, data.shape[0])

    assignments = {}
    for cluster in clusters:
        for idx in cluster.members:
            assignments[keys[idx]] = cluster.id
    # Keep the input order
    assignments = {key: assignments[key] for key in keys}

    return KMeansResult(
        clusters=clusters,
        assignments=assignments,
        wcss=compute_wcss(data, clusters),
        converged=converged,
        iterations=iterations
    )


def elbow_curve(points: Union[Sequence[Any], np.ndarray],
               max_k: int = 8,
               rng: Any = None,
               max_iterations: int = 50,
               convergence_eps: float = 0.01,
               init: str = 'random') -> List[Tuple[int, float]]:
    """
    Final WCSS for every k from 1 to max_k.

    Args:
        points: Points to cluster
        max_k: Largest k to try, capped at the number of points
        rng: numpy Generator or int seed shared by all runs
        max_iterations: Iteration cap for each run
        convergence_eps: Movement threshold for each run
        init: Initialization method

    Returns:
        List of (k, wcss)
    """
    data = as_xy_array(points if isinstance(points, np.ndarray) else list(points))
    if data.shape[0] == 0:
        raise InvalidInputError("At least one point is required")

    generator = resolve_rng(rng)
    results = []

    for k in range(1, min(max_k, data.shape[0]) + 1):
        result = kmeans(data, k, generator, max_iterations, convergence_eps, init)
        results.append((k, result.wcss))

    return results


def silhouette(points: Union[Sequence[Any], np.ndarray], clusters: List[Cluster]) -> float:
    """
    Calculate the silhouette coefficient for a clustering.

    Args:
        points: Points that were clustered
        clusters: List of clusters

    Returns:
        Silhouette coefficient (between -1 and 1)
    """
    data = as_xy_array(points if isinstance(points, np.ndarray) else list(points))

    if len(clusters) <= 1 or data.shape[0] < 2:
        return 0.0

    dist_matrix = squareform(pdist(data))

    silhouette_values = []

    for i, cluster in enumerate(clusters):
        for idx in cluster.members:
            same_cluster_indices = [m for m in cluster.members if m != idx]

            if not same_cluster_indices:
                # Singleton cluster
                silhouette_values.append(0.0)
                continue

            a = np.mean(dist_matrix[idx, same_cluster_indices])

            b_values = [
                np.mean(dist_matrix[idx, other.members])
                for j, other in enumerate(clusters)
                if j != i and other.members
            ]

            if not b_values:
                silhouette_values.append(0.0)
                continue

            b = min(b_values)

            if a == 0 and b == 0:
                silhouette_values.append(0.0)
            else:
                silhouette_values.append((b - a) / max(a, b))

    return float(np.mean(silhouette_values)) if silhouette_values else 0.0
