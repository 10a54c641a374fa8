"""
Setup script for mlsims package.
"""

from setuptools import setup, find_packages

setup(
    name="mlsims",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        # Core numerical dependencies
        "numpy>=1.20.0",
        "pandas>=1.3.0",
        "scipy>=1.7.0",
        "scikit-learn>=1.0.0",

        # Web server
        "fastapi>=0.70.0",
        "uvicorn>=0.15.0",
        "pydantic>=1.8.0",

        # Utilities
        "pyyaml>=6.0.0",
    ],
    extras_require={
        # Testing
        "test": [
            "pytest>=6.0.0",
            "httpx>=0.23.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'mlsims=mlsims.__main__:main',
        ],
    },
    description="Statistics and machine-learning kernels behind the ML simulations teaching pages",
    keywords="statistics, machine learning, teaching, knn, kmeans, decision tree, regularization",
    python_requires=">=3.8",
)
