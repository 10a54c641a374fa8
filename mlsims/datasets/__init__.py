"""
Datasets for mlsims.

Static datasets come from mlsims.datasets.builtin; the generated ones
(moons, circles, linear, blobs, regression) are drawn on request from a
seedable generator.
"""

from typing import Any, Dict, List

from mlsims.datasets.builtin import builtin_datasets
from mlsims.datasets.generators import (
    make_blobs, make_circles, make_linear, make_moons, make_regression_data
)
from mlsims.math.points import Dataset


class NormalPreset:
    """
    Real-world parameters for the normal distribution page.
    """

    def __init__(self, key: str, name: str, description: str, mean: float, stddev: float,
                 unit: str, x_range: tuple):
        self.key = key
        self.name = name
        self.description = description
        self.mean = mean
        self.stddev = stddev
        self.unit = unit
        self.x_range = x_range

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'name': self.name,
            'description': self.description,
            'mean': self.mean,
            'stddev': self.stddev,
            'unit': self.unit,
            'x_range': list(self.x_range)
        }


NORMAL_PRESETS = {
    preset.key: preset for preset in [
        NormalPreset('height', 'Human Height', 'Adult male height distribution', 170, 10, 'cm', (120, 220)),
        NormalPreset('iq', 'IQ Scores', 'Intelligence quotient scores', 100, 15, 'IQ Score', (40, 160)),
        NormalPreset('temperature', 'Body Temperature', 'Human body temperature in Celsius',
                     36.8, 0.4, '°C', (34, 40)),
        NormalPreset('test', 'Test Scores', 'Standardized test scores', 75, 12, 'Points', (20, 120)),
        NormalPreset('weight', 'Birth Weight', 'Newborn baby weights in grams', 3200, 500, 'grams', (1000, 5000)),
    ]
}

# key -> (name, description, kind, generator)
GENERATED = {
    'moons': ('Two Moons', 'Non-linearly separable data with moon-shaped clusters', 'classification', make_moons),
    'circles': ('Concentric Circles', 'Concentric circular patterns with different radii', 'classification',
                make_circles),
    'linear': ('Linear Separation', 'Linearly separable data with clear boundary', 'classification', make_linear),
    'blobs': ('Randomized Data', 'Randomly generated clusters with different shapes and separations',
              'clustering', make_blobs),
    'regression': ('Simple Regression', 'Basic linear relationship with noise', 'regression',
                   make_regression_data),
}


def get_dataset(key: str, rng: Any = None) -> Dataset:
    """
    Look up a dataset by key.

    Args:
        key: Dataset key, see list_datasets
        rng: numpy Generator or int seed, used by generated datasets only

    Returns:
        Dataset

    Raises:
        KeyError: If no dataset has this key
    """
    static = builtin_datasets()
    if key in static:
        return static[key]

    if key not in GENERATED:
        raise KeyError(f"Unknown dataset: {key}")

    name, description, kind, generate = GENERATED[key]
    points = generate(rng=rng)

    optimal_k = len({point.label for point in points}) if kind == 'clustering' else None

    return Dataset(
        key, name, description, points,
        x_label='Feature 1', y_label='Feature 2',
        optimal_k=optimal_k,
        metadata={'kind': kind, 'generated': True}
    )


def get_normal_preset(key: str) -> NormalPreset:
    """
    Look up a normal distribution preset; raises KeyError for unknown keys.
    """
    if key not in NORMAL_PRESETS:
        raise KeyError(f"Unknown normal preset: {key}")
    return NORMAL_PRESETS[key]


def list_datasets() -> List[Dict[str, Any]]:
    """
    Summaries of every dataset get_dataset accepts.

    Returns:
        List of dictionaries with key, name, description and kind
    """
    summaries = [
        {
            'key': dataset.key,
            'name': dataset.name,
            'description': dataset.description,
            'kind': dataset.metadata.get('kind'),
            'generated': False
        }
        for dataset in builtin_datasets().values()
    ]

    for key, (name, description, kind, _) in GENERATED.items():
        summaries.append({'key': key, 'name': name, 'description': description, 'kind': kind, 'generated': True})

    return summaries
