"""
Built-in datasets for the mlsims pages.

Every table here is static; the random datasets live in
mlsims.datasets.generators.
"""

from typing import Dict

from mlsims.math.points import Dataset, Point, Sample


# (x, y, label) rows
ICE_CREAM_ROWS = [
    (50, 12, 'Jan'), (65, 18, 'Feb'), (80, 25, 'Mar'), (120, 35, 'Apr'),
    (150, 45, 'May'), (180, 55, 'Jun'), (200, 65, 'Jul'), (190, 60, 'Aug'),
    (160, 40, 'Sep'), (100, 25, 'Oct'), (70, 15, 'Nov'), (45, 10, 'Dec'),
]

SHOE_SIZE_ROWS = [
    (3, 20, 'Age 4'), (4, 35, 'Age 5'), (5, 50, 'Age 6'), (6, 65, 'Age 7'),
    (7, 80, 'Age 8'), (8, 90, 'Age 9'), (9, 95, 'Age 10'),
]

TEMPERATURE_ROWS = [
    (32, 10, '32°F'), (45, 25, '45°F'), (60, 50, '60°F'),
    (75, 100, '75°F'), (85, 150, '85°F'), (95, 200, '95°F'),
]

INTERACTIVE_ROWS = [(20 * i, 20 * i + 10, f'Point {i}') for i in range(1, 9)]

# (x, y, true group) rows
CUSTOMER_ROWS = [
    # Young high spenders
    (25, 85, 0), (22, 90, 0), (28, 88, 0), (24, 92, 0),
    (26, 87, 0), (23, 89, 0), (27, 91, 0), (25, 86, 0),
    # Young low spenders
    (24, 15, 1), (26, 12, 1), (23, 18, 1), (25, 14, 1),
    (27, 16, 1), (22, 13, 1), (24, 17, 1), (26, 11, 1),
    # Middle-aged high spenders
    (45, 88, 2), (48, 85, 2), (42, 90, 2), (46, 87, 2),
    (44, 89, 2), (47, 86, 2), (43, 91, 2), (45, 88, 2),
    # Middle-aged low spenders
    (44, 16, 3), (46, 13, 3), (43, 18, 3), (45, 14, 3),
    (47, 16, 3), (42, 12, 3), (44, 17, 3), (46, 15, 3),
    # Senior conservative
    (65, 25, 4), (68, 22, 4), (62, 28, 4), (66, 24, 4),
    (64, 26, 4), (67, 23, 4), (63, 27, 4), (65, 25, 4),
]

IRIS_2D_ROWS = [
    # Setosa
    (1.4, 0.2, 0), (1.4, 0.2, 0), (1.3, 0.2, 0), (1.5, 0.2, 0), (1.4, 0.2, 0),
    (1.7, 0.4, 0), (1.4, 0.3, 0), (1.5, 0.2, 0), (1.4, 0.2, 0), (1.5, 0.1, 0),
    # Versicolor
    (4.7, 1.4, 1), (4.5, 1.5, 1), (4.9, 1.5, 1), (4.0, 1.3, 1), (4.6, 1.5, 1),
    (4.5, 1.3, 1), (4.7, 1.6, 1), (3.3, 1.0, 1), (4.6, 1.3, 1), (3.9, 1.4, 1),
    # Virginica
    (6.0, 2.5, 2), (5.1, 1.9, 2), (5.9, 2.1, 2), (5.6, 1.8, 2), (5.8, 2.2, 2),
    (6.6, 2.1, 2), (4.5, 1.7, 2), (6.3, 1.8, 2), (5.8, 1.8, 2), (6.1, 2.5, 2),
]

SYNTHETIC_ROWS = [
    # Top left
    (20, 80, 0), (25, 85, 0), (18, 82, 0), (22, 88, 0),
    (24, 83, 0), (19, 86, 0), (21, 84, 0), (23, 87, 0),
    # Bottom right
    (75, 20, 1), (78, 25, 1), (72, 18, 1), (76, 22, 1),
    (74, 24, 1), (77, 19, 1), (73, 21, 1), (75, 23, 1),
    # Center
    (50, 50, 2), (52, 48, 2), (48, 52, 2), (51, 49, 2),
    (49, 51, 2), (53, 47, 2), (47, 53, 2), (50, 50, 2),
]

CHURN_FEATURES = ['tenure_months', 'monthly_charges', 'total_charges', 'contract_type', 'internet_service']

# contract_type: 0 monthly, 1 yearly, 2 two-year; internet_service: 1 DSL, 2 fiber, 3 premium
CHURN_ROWS = [
    (60, 20, 1200, 2, 1, 'Stay'),
    (48, 25, 1200, 2, 1, 'Stay'),
    (72, 18, 1296, 2, 1, 'Stay'),
    (36, 30, 1080, 1, 2, 'Stay'),
    (24, 35, 840, 1, 2, 'Stay'),
    (3, 80, 240, 0, 3, 'Churn'),
    (6, 75, 450, 0, 3, 'Churn'),
    (1, 90, 90, 0, 3, 'Churn'),
    (2, 85, 170, 0, 3, 'Churn'),
    (4, 78, 312, 0, 3, 'Churn'),
    (12, 50, 600, 1, 2, 'Stay'),
    (15, 55, 825, 1, 2, 'Stay'),
    (18, 60, 1080, 1, 2, 'Churn'),
    (9, 65, 585, 0, 3, 'Churn'),
    (21, 45, 945, 1, 2, 'Stay'),
    (30, 70, 2100, 2, 3, 'Stay'),
    (42, 75, 3150, 2, 3, 'Churn'),
    (54, 68, 3672, 2, 3, 'Stay'),
    (66, 72, 4752, 2, 3, 'Churn'),
    (78, 65, 5070, 2, 3, 'Stay'),
    (5, 30, 150, 0, 1, 'Stay'),
    (7, 35, 245, 0, 1, 'Stay'),
    (4, 40, 160, 0, 2, 'Churn'),
    (8, 25, 200, 0, 1, 'Stay'),
    (6, 45, 270, 0, 2, 'Churn'),
    (14, 55, 770, 1, 2, 'Stay'),
    (16, 58, 928, 1, 2, 'Churn'),
    (20, 52, 1040, 1, 2, 'Stay'),
    (22, 48, 1056, 1, 2, 'Stay'),
    (26, 62, 1612, 1, 2, 'Churn'),
    (10, 42, 420, 0, 1, 'Stay'),
    (11, 38, 418, 0, 1, 'Stay'),
    (13, 44, 572, 0, 2, 'Churn'),
    (17, 46, 782, 1, 2, 'Stay'),
    (19, 49, 931, 1, 2, 'Churn'),
    (25, 51, 1275, 1, 2, 'Stay'),
    (28, 47, 1316, 1, 2, 'Stay'),
    (32, 53, 1696, 1, 2, 'Churn'),
    (35, 56, 1960, 2, 3, 'Stay'),
    (38, 59, 2242, 2, 3, 'Churn'),
    (40, 41, 1640, 2, 1, 'Stay'),
    (44, 43, 1892, 2, 1, 'Stay'),
    (47, 45, 2115, 2, 2, 'Churn'),
    (50, 39, 1950, 2, 1, 'Stay'),
    (52, 37, 1924, 2, 1, 'Stay'),
]

IRIS_FEATURES = ['sepal_length', 'sepal_width', 'petal_length', 'petal_width']

IRIS_ROWS = [
    (5.1, 3.5, 1.4, 0.2, 'Setosa'),
    (4.9, 3.0, 1.4, 0.2, 'Setosa'),
    (4.7, 3.2, 1.3, 0.2, 'Setosa'),
    (4.6, 3.1, 1.5, 0.2, 'Setosa'),
    (5.0, 3.6, 1.4, 0.2, 'Setosa'),
    (7.0, 3.2, 4.7, 1.4, 'Versicolor'),
    (6.4, 3.2, 4.5, 1.5, 'Versicolor'),
    (6.9, 3.1, 4.9, 1.5, 'Versicolor'),
    (5.5, 2.3, 4.0, 1.3, 'Versicolor'),
    (6.5, 2.8, 4.6, 1.5, 'Versicolor'),
    (6.3, 3.3, 6.0, 2.5, 'Virginica'),
    (5.8, 2.7, 5.1, 1.9, 'Virginica'),
    (7.1, 3.0, 5.9, 2.1, 'Virginica'),
    (6.3, 2.9, 5.6, 1.8, 'Virginica'),
    (6.5, 3.0, 5.8, 2.2, 'Virginica'),
]


GATE_INPUTS = [(0, 0), (0, 1), (1, 0), (1, 1)]

# key -> (name, description, outputs for GATE_INPUTS)
GATES = {
    'and-gate': ('AND Gate', 'Classic AND logic gate, linearly separable', (0, 0, 0, 1)),
    'or-gate': ('OR Gate', 'Classic OR logic gate, linearly separable', (0, 1, 1, 1)),
    'xor-gate': ('XOR Gate', 'XOR logic gate, not linearly separable', (0, 1, 1, 0)),
}


def _points(rows, color=None):
    return [Point(x, y, label=label, id=str(i + 1), color=color) for i, (x, y, label) in enumerate(rows)]


def _samples(rows, features):
    return [
        Sample(dict(zip(features, row[:-1])), row[-1], id=str(i + 1))
        for i, row in enumerate(rows)
    ]


def builtin_datasets() -> Dict[str, Dataset]:
    """
    Build a fresh copy of every static dataset, keyed by dataset key.
    """
    datasets = [
        Dataset(
            'ice-cream-drowning', 'Ice Cream & Drowning',
            'Classic example of spurious correlation',
            _points(ICE_CREAM_ROWS, '#3b82f6'),
            x_label='Ice Cream Sales (gallons)', y_label='Drowning Deaths',
            metadata={
                'kind': 'correlation',
                'causation': 'spurious',
                'confounding_variables': ['Temperature', 'Season', 'Swimming Activity'],
                'context': 'Both ice cream sales and drowning increase in hot weather'
            }
        ),
        Dataset(
            'shoe-size-reading', 'Shoe Size & Reading Ability',
            'Age as a confounding variable',
            _points(SHOE_SIZE_ROWS, '#ef4444'),
            x_label='Shoe Size', y_label='Reading Test Score',
            metadata={
                'kind': 'correlation',
                'causation': 'spurious',
                'confounding_variables': ['Age', 'Developmental Stage', 'School Grade'],
                'context': 'Both shoe size and reading ability increase with age'
            }
        ),
        Dataset(
            'temperature-ice-cream', 'Temperature & Ice Cream Sales',
            'Direct causation example',
            _points(TEMPERATURE_ROWS, '#22c55e'),
            x_label='Temperature (°F)', y_label='Ice Cream Sales (gallons)',
            metadata={
                'kind': 'correlation',
                'causation': 'direct',
                'confounding_variables': [],
                'context': 'Hot weather directly causes increased ice cream sales'
            }
        ),
        Dataset(
            'interactive', 'Interactive Experiment',
            'Drag points to explore correlation and causation',
            _points(INTERACTIVE_ROWS, '#8b5cf6'),
            x_label='Variable X', y_label='Variable Y',
            metadata={'kind': 'correlation', 'causation': 'none', 'confounding_variables': []}
        ),
        Dataset(
            'customer', 'Customer Segmentation',
            'Customer data with age and spending patterns',
            _points(CUSTOMER_ROWS),
            x_label='Age', y_label='Spending Score', optimal_k=4,
            metadata={
                'kind': 'clustering',
                'segments': ['Young High Spenders', 'Young Low Spenders', 'Middle-aged High Spenders',
                             'Middle-aged Low Spenders', 'Senior Conservative']
            }
        ),
        Dataset(
            'iris-2d', 'Iris Dataset (2D Projection)',
            'Classic machine learning dataset showing natural flower groupings',
            _points(IRIS_2D_ROWS),
            x_label='Petal Length', y_label='Petal Width', optimal_k=3,
            metadata={'kind': 'clustering', 'segments': ['Setosa', 'Versicolor', 'Virginica']}
        ),
        Dataset(
            'synthetic', 'Synthetic Blobs',
            'Clearly separated clusters for learning the basics of K-Means',
            _points(SYNTHETIC_ROWS),
            x_label='Feature 1', y_label='Feature 2', optimal_k=3,
            metadata={'kind': 'clustering'}
        ),
        Dataset(
            'churn', 'Customer Churn Prediction',
            'Five features with overlapping patterns that need deep trees',
            _samples(CHURN_ROWS, CHURN_FEATURES),
            features=CHURN_FEATURES,
            metadata={'kind': 'tree', 'target': 'churned'}
        ),
        Dataset(
            'iris', 'Iris Dataset',
            'Classic flower classification dataset with 4 features',
            _samples(IRIS_ROWS, IRIS_FEATURES),
            features=IRIS_FEATURES,
            metadata={'kind': 'tree', 'target': 'species'}
        ),
    ]

    for key, (name, description, outputs) in GATES.items():
        rows = [(x, y, label) for (x, y), label in zip(GATE_INPUTS, outputs)]
        datasets.append(Dataset(
            key, name, description, _points(rows),
            x_label='Input 1', y_label='Input 2',
            metadata={'kind': 'perceptron', 'linearly_separable': key != 'xor-gate'}
        ))

    return {dataset.key: dataset for dataset in datasets}
