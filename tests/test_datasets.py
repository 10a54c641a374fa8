"""
Tests for the datasets module.
"""

import pytest
import numpy as np
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from mlsims.datasets import (
    NORMAL_PRESETS, get_dataset, get_normal_preset, list_datasets,
    make_blobs, make_circles, make_linear, make_moons, make_regression_data
)
from mlsims.math.corr import pearson_correlation
from mlsims.math.points import Sample
from mlsims.utils.general import InvalidInputError


class TestBuiltinDatasets:
    """Tests for the static datasets."""

    def test_list(self):
        """Every listed key can be loaded."""
        keys = [entry['key'] for entry in list_datasets()]

        for key in ('ice-cream-drowning', 'shoe-size-reading', 'temperature-ice-cream', 'interactive',
                    'customer', 'iris-2d', 'synthetic', 'churn', 'iris',
                    'moons', 'circles', 'linear', 'blobs', 'regression', 'and-gate', 'or-gate', 'xor-gate'):
            assert key in keys

        for key in keys:
            assert get_dataset(key, rng=0).key == key

    def test_unknown_key(self):
        """Unknown keys raise KeyError."""
        with pytest.raises(KeyError):
            get_dataset('no-such-dataset')

    def test_sizes(self):
        """The static tables have their documented sizes."""
        assert len(get_dataset('ice-cream-drowning')) == 12
        assert len(get_dataset('shoe-size-reading')) == 7
        assert len(get_dataset('temperature-ice-cream')) == 6
        assert len(get_dataset('interactive')) == 8
        assert len(get_dataset('customer')) == 40
        assert len(get_dataset('iris-2d')) == 30
        assert len(get_dataset('synthetic')) == 24
        assert len(get_dataset('churn')) == 45
        assert len(get_dataset('iris')) == 15

    def test_ice_cream_correlation(self):
        """The spurious-correlation example is strongly positive."""
        r = pearson_correlation(get_dataset('ice-cream-drowning').points)
        assert np.isclose(r, 0.9856, atol=1e-3)

    def test_interactive_is_a_line(self):
        """The interactive starting points lie on a line."""
        assert np.isclose(pearson_correlation(get_dataset('interactive').points), 1.0)

    def test_tree_datasets(self):
        """Tree datasets hold samples over their named features."""
        churn = get_dataset('churn')

        assert churn.features == ['tenure_months', 'monthly_charges', 'total_charges',
                                  'contract_type', 'internet_service']
        assert all(isinstance(sample, Sample) for sample in churn)
        assert set(churn.labels()) == {'Stay', 'Churn'}
        assert set(get_dataset('iris').labels()) == {'Setosa', 'Versicolor', 'Virginica'}

    def test_cluster_metadata(self):
        """Cluster datasets carry their known group count."""
        assert get_dataset('customer').optimal_k == 4
        assert get_dataset('iris-2d').optimal_k == 3
        assert get_dataset('synthetic').optimal_k == 3

    @pytest.mark.parametrize("key, outputs", [
        ('and-gate', [0, 0, 0, 1]),
        ('or-gate', [0, 1, 1, 1]),
        ('xor-gate', [0, 1, 1, 0]),
    ])
    def test_logic_gates(self, key, outputs):
        """Gates list the four binary inputs in order with their outputs."""
        dataset = get_dataset(key)

        assert [(p.x, p.y) for p in dataset.points] == [(0, 0), (0, 1), (1, 0), (1, 1)]
        assert [p.label for p in dataset.points] == outputs
        assert dataset.metadata['linearly_separable'] == (key != 'xor-gate')

    def test_fresh_copies(self):
        """Callers cannot change the shared tables."""
        dataset = get_dataset('synthetic')
        dataset.points.clear()
        assert len(get_dataset('synthetic')) == 24

    def test_to_frame(self):
        """Datasets convert to DataFrames indexed by point id."""
        frame = get_dataset('churn').to_frame()
        assert frame.shape == (45, 6)
        assert frame.loc['1', 'tenure_months'] == 60
        assert frame.loc['1', 'label'] == 'Stay'

        frame = get_dataset('customer').to_frame()
        assert list(frame.columns) == ['x', 'y', 'label']

    def test_to_dict(self):
        """Datasets serialize with their points."""
        data = get_dataset('iris-2d').to_dict()
        assert data['name'] == 'Iris Dataset (2D Projection)'
        assert len(data['points']) == 30
        assert data['points'][0] == {'x': 1.4, 'y': 0.2, 'label': 0, 'id': '1'}


class TestNormalPresets:
    """Tests for the normal distribution presets."""

    def test_presets(self):
        """The five presets carry their mean and stddev."""
        assert set(NORMAL_PRESETS) == {'height', 'iq', 'temperature', 'test', 'weight'}
        assert (get_normal_preset('height').mean, get_normal_preset('height').stddev) == (170, 10)
        assert (get_normal_preset('temperature').mean, get_normal_preset('temperature').stddev) == (36.8, 0.4)
        assert get_normal_preset('weight').to_dict()['unit'] == 'grams'

    def test_unknown_preset(self):
        with pytest.raises(KeyError):
            get_normal_preset('shoe-size')


class TestGenerators:
    """Tests for the random dataset generators."""

    def test_moons(self):
        """Two labeled moons of n points each."""
        points = make_moons(30, rng=1)

        assert len(points) == 60
        assert [p.label for p in points].count(0) == 30
        assert len({p.id for p in points}) == 60

    def test_circles(self):
        """Inner points sit within 0.15 of the center, outer ones beyond 0.25."""
        for point in make_circles(25, rng=2):
            radius = np.hypot(point.x - 0.5, point.y - 0.5)
            if point.label == 0:
                assert radius <= 0.15 + 1e-9
            else:
                assert 0.25 - 1e-9 <= radius <= 0.40 + 1e-9

    def test_linear(self):
        """Labels follow the line x + y = 1."""
        for point in make_linear(40, rng=3):
            assert point.label == (1 if point.x + point.y > 1 else 0)

    def test_blobs(self):
        """Blobs stay in [5, 95] and respect explicit sizes."""
        points = make_blobs(rng=4, n_clusters=3, points_per_cluster=10)

        assert len(points) == 30
        assert {p.label for p in points} == {0, 1, 2}
        assert all(5 <= p.x <= 95 and 5 <= p.y <= 95 for p in points)

    def test_blobs_random_sizes(self):
        """Without explicit sizes there are 2 to 4 clusters of 8 to 22 points."""
        points = make_blobs(rng=5)
        n_clusters = len({p.label for p in points})

        assert 2 <= n_clusters <= 4
        assert 8 <= len(points) / n_clusters <= 22

    def test_regression_data(self):
        """Regression points stay within the noise band of y = 2x + 3."""
        for point in make_regression_data(50, rng=6):
            assert 0 <= point.x < 10
            assert abs(point.y - (2 * point.x + 3)) <= 1.0

    def test_seeded(self):
        """The same seed reproduces the same dataset."""
        first = get_dataset('moons', rng=9).to_dict()
        second = get_dataset('moons', rng=9).to_dict()
        other = get_dataset('moons', rng=10).to_dict()

        assert first == second
        assert first != other

    def test_generated_metadata(self):
        """Generated cluster sets report the number of clusters drawn."""
        dataset = get_dataset('blobs', rng=7)
        assert dataset.optimal_k == len(set(dataset.labels()))
        assert dataset.metadata['generated']

    def test_invalid_count(self):
        with pytest.raises(InvalidInputError):
            make_moons(0)
