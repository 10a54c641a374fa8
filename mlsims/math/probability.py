"""
Probability kernels for mlsims.

This module covers Bayes' theorem for a single hypothesis and the
sampling experiment behind the central limit theorem page: draw a bounded
population from one of several shapes, take repeated samples without
replacement and collect their means.
"""

import logging
import math
import numpy as np
from typing import Any, Callable, Dict, Iterable

from mlsims.math.normal import sample_normal
from mlsims.utils.general import InvalidInputError, resolve_rng

# Set up logging
logger = logging.getLogger(__name__)

# Population values are clamped to this range
POPULATION_RANGE = (0.0, 100.0)


def _check_probability(name: str, value: float) -> None:
    if value is None or not 0.0 <= value <= 1.0:
        raise InvalidInputError(f"{name} must be within [0, 1], got {value}")


def bayes_posterior(prior: float, likelihood_true: float, likelihood_false: float) -> Dict[str, float]:
    """
    Apply Bayes' theorem to a hypothesis H and evidence E.

    Args:
        prior: P(H)
        likelihood_true: P(E | H)
        likelihood_false: P(E | not H)

    Returns:
        Dictionary with 'posterior' P(H | E) (0.0 when the evidence has zero
        probability), 'evidence' P(E) and 'likelihood_ratio'
        P(E | H) / P(E | not H) (infinite when P(E | not H) is zero)
    """
    _check_probability('prior', prior)
    _check_probability('likelihood_true', likelihood_true)
    _check_probability('likelihood_false', likelihood_false)

    evidence = likelihood_true * prior + likelihood_false * (1 - prior)
    posterior = likelihood_true * prior / evidence if evidence > 0 else 0.0
    ratio = likelihood_true / likelihood_false if likelihood_false > 0 else math.inf

    return {'posterior': float(posterior), 'evidence': float(evidence), 'likelihood_ratio': float(ratio)}


def _uniform(generator: np.random.Generator, size: int) -> np.ndarray:
    return generator.random(size) * 100


def _exponential(generator: np.random.Generator, size: int) -> np.ndarray:
    return -np.log(1 - generator.random(size)) * 20


def _bimodal(generator: np.random.Generator, size: int) -> np.ndarray:
    # Each value picks a mode, then adds a uniform spread and a jitter
    first_mode = generator.random(size) < 0.5
    base = np.where(first_mode, 20.0, 60.0)
    return base + generator.random(size) * 20 + (generator.random(size) - 0.5) * 10


def _skewed(generator: np.random.Generator, size: int) -> np.ndarray:
    return generator.random(size) ** 2 * 100


def _normal(generator: np.random.Generator, size: int) -> np.ndarray:
    return sample_normal(50, 15, size, rng=generator)


POPULATION_DISTRIBUTIONS: Dict[str, Dict[str, Any]] = {
    'uniform': {
        'name': 'Uniform Distribution',
        'description': 'All values equally likely',
        'generate': _uniform
    },
    'exponential': {
        'name': 'Exponential Distribution',
        'description': 'Skewed toward low values, like waiting times',
        'generate': _exponential
    },
    'bimodal': {
        'name': 'Bimodal Distribution',
        'description': 'Two distinct peaks around 30 and 70',
        'generate': _bimodal
    },
    'skewed': {
        'name': 'Right-Skewed Distribution',
        'description': 'Most values low, few high, like incomes',
        'generate': _skewed
    },
    'normal': {
        'name': 'Normal Distribution',
        'description': 'Bell curve with mean 50 and standard deviation 15',
        'generate': _normal
    }
}


def list_distributions() -> list:
    return [
        {'key': key, 'name': entry['name'], 'description': entry['description']}
        for key, entry in POPULATION_DISTRIBUTIONS.items()
    ]


def generate_population(distribution: str = 'uniform', size: int = 1000, rng: Any = None) -> np.ndarray:
    """
    Draw a population of values from a named shape, clamped to [0, 100].

    Args:
        distribution: Key of POPULATION_DISTRIBUTIONS
        size: Number of values, must be positive
        rng: numpy Generator or int seed

    Returns:
        Array of size values
    """
    if distribution not in POPULATION_DISTRIBUTIONS:
        raise InvalidInputError(f"Unknown distribution: {distribution} "
                                f"(expected one of {', '.join(POPULATION_DISTRIBUTIONS)})")
    if size is None or size < 1:
        raise InvalidInputError(f"size must be at least 1, got {size}")

    generate: Callable[[np.random.Generator, int], np.ndarray] = POPULATION_DISTRIBUTIONS[distribution]['generate']
    values = generate(resolve_rng(rng), int(size))
    return np.clip(values, *POPULATION_RANGE)


def take_sample(population: Iterable[float], size: int, rng: Any = None) -> np.ndarray:
    """
    Draw size distinct members of the population uniformly at random.
    """
    values = np.asarray(list(population), dtype=float)
    if size is None or size < 1 or size > values.size:
        raise InvalidInputError(f"Sample size must be between 1 and {values.size}, got {size}")
    return resolve_rng(rng).choice(values, size=int(size), replace=False)


def sample_mean(sample: Iterable[float]) -> float:
    values = np.asarray(list(sample), dtype=float)
    if values.size == 0:
        raise InvalidInputError("Cannot take the mean of an empty sample")
    return float(np.mean(values))


def sampling_distribution(population: Iterable[float],
                          sample_size: int = 30,
                          n_samples: int = 100,
                          rng: Any = None) -> np.ndarray:
    """
    Means of n_samples independent samples of sample_size values each.

    Args:
        population: Values to sample from
        sample_size: Values per sample, at most the population size
        n_samples: Number of samples to draw, must be positive
        rng: numpy Generator or int seed

    Returns:
        Array of n_samples sample means, in draw order
    """
    values = np.asarray(list(population), dtype=float)
    if n_samples is None or n_samples < 1:
        raise InvalidInputError(f"n_samples must be at least 1, got {n_samples}")

    generator = resolve_rng(rng)
    means = np.array([sample_mean(take_sample(values, sample_size, generator)) for _ in range(int(n_samples))])

    logger.debug(f"Drew {n_samples} samples of size {sample_size} from a population of {values.size}")

    return means


def standard_error(population: Iterable[float], sample_size: int, finite: bool = True) -> float:
    """
    Predicted standard deviation of the sample mean.

    Uses sigma / sqrt(n), multiplied by the finite population correction
    sqrt((N - n) / (N - 1)) when finite is set.
    """
    values = np.asarray(list(population), dtype=float)
    if sample_size is None or sample_size < 1 or sample_size > values.size:
        raise InvalidInputError(f"Sample size must be between 1 and {values.size}, got {sample_size}")

    error = float(np.std(values)) / math.sqrt(sample_size)
    if finite and values.size > 1:
        error *= math.sqrt((values.size - sample_size) / (values.size - 1))
    return error
