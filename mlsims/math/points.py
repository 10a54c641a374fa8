"""
Point, Sample and Dataset types shared by the mlsims kernels.

Kernels accept these types as well as plain (x, y) pairs and mappings;
the classes here exist so datasets can carry labels, ids, colors and
descriptive metadata alongside the coordinates.
"""

import numpy as np
import pandas as pd
from typing import Any, Dict, List, Optional, Sequence, Union


class Point:
    """
    A 2-D point with an optional label, id and display color.
    """

    def __init__(self,
                x: float,
                y: float,
                label: Optional[Any] = None,
                id: Optional[str] = None,
                color: Optional[str] = None):
        """
        Initialize a point.

        Args:
            x: First coordinate
            y: Second coordinate
            label: Class name or cluster index
            id: Identifier, unique within a dataset
            color: Display color
        """
        self.x = float(x)
        self.y = float(y)
        self.label = label
        self.id = id
        self.color = color

    def to_array(self) -> np.ndarray:
        """Return the coordinates as a numpy array."""
        return np.array([self.x, self.y])

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the point to a dictionary for serialization.

        Returns:
            Dictionary with the non-empty fields of the point
        """
        result = {'x': self.x, 'y': self.y}
        for key in ('label', 'id', 'color'):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Point':
        """Build a point from a dictionary produced by ``to_dict``."""
        return cls(
            x=data['x'],
            y=data['y'],
            label=data.get('label'),
            id=data.get('id'),
            color=data.get('color')
        )

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        return (self.x, self.y, self.label, self.id) == (other.x, other.y, other.label, other.id)

    def __hash__(self) -> int:
        return hash((self.x, self.y, self.label, self.id))

    def __repr__(self) -> str:
        return f"Point(x={self.x}, y={self.y}, label={self.label!r}, id={self.id!r})"


class Sample:
    """
    A labeled observation with named numeric features.
    """

    def __init__(self,
                features: Dict[str, float],
                label: Any,
                id: Optional[str] = None,
                color: Optional[str] = None):
        self.features = {name: float(value) for name, value in features.items()}
        self.label = label
        self.id = id
        self.color = color

    def value(self, feature: str) -> float:
        """
        Get the value of a named feature.

        Args:
            feature: Feature name

        Returns:
            Feature value
        """
        return self.features[feature]

    def to_dict(self) -> Dict[str, Any]:
        """Convert the sample to a dictionary for serialization."""
        result = {'features': dict(self.features), 'label': self.label}
        if self.id is not None:
            result['id'] = self.id
        if self.color is not None:
            result['color'] = self.color
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Sample':
        """Build a sample from a dictionary produced by ``to_dict``."""
        return cls(
            features=data['features'],
            label=data['label'],
            id=data.get('id'),
            color=data.get('color')
        )

    def __repr__(self) -> str:
        return f"Sample(features={self.features}, label={self.label!r}, id={self.id!r})"


class Dataset:
    """
    A named, ordered, read-only collection of points plus metadata.
    """

    def __init__(self,
                key: str,
                name: str,
                description: str,
                points: Sequence[Union[Point, Sample]],
                x_label: str = 'x',
                y_label: str = 'y',
                features: Optional[List[str]] = None,
                optimal_k: Optional[int] = None,
                metadata: Optional[Dict[str, Any]] = None):
        """
        Initialize a dataset.

        Args:
            key: Short lookup key
            name: Display name
            description: One-line description
            points: Points (2-D) or Samples (named features)
            x_label: Axis label for x
            y_label: Axis label for y
            features: Feature names; defaults to ['x', 'y'] for point data
            optimal_k: Known number of groups, for clustering datasets
            metadata: Any further descriptive fields
        """
        self.key = key
        self.name = name
        self.description = description
        self._points = tuple(points)
        self.x_label = x_label
        self.y_label = y_label
        self.features = list(features) if features is not None else ['x', 'y']
        self.optimal_k = optimal_k
        self.metadata = dict(metadata or {})

    @property
    def points(self) -> List[Union[Point, Sample]]:
        """Return a fresh list of the dataset's points."""
        return list(self._points)

    def labels(self) -> List[Any]:
        """Return the label of every point, in order."""
        return [point.label for point in self._points]

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self):
        return iter(self._points)

    def to_frame(self) -> pd.DataFrame:
        """
        Convert the dataset to a DataFrame with one row per point.

        Returns:
            DataFrame indexed by point id with one column per feature plus 'label'
        """
        rows = []
        index = []
        for i, point in enumerate(self._points):
            if isinstance(point, Sample):
                row = dict(point.features)
            else:
                row = {'x': point.x, 'y': point.y}
            row['label'] = point.label
            rows.append(row)
            index.append(point.id if point.id is not None else str(i))

        columns = self.features + ['label'] if rows and isinstance(self._points[0], Sample) else None
        return pd.DataFrame(rows, index=index, columns=columns)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the dataset to a dictionary for serialization.
        """
        return {
            'key': self.key,
            'name': self.name,
            'description': self.description,
            'x_label': self.x_label,
            'y_label': self.y_label,
            'features': list(self.features),
            'optimal_k': self.optimal_k,
            'metadata': dict(self.metadata),
            'points': [point.to_dict() for point in self._points]
        }

    def __repr__(self) -> str:
        return f"Dataset(key={self.key!r}, points={len(self._points)})"
