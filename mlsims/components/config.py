"""
Configuration management for mlsims.

This module provides functionality for managing configuration,
including loading from environment variables, files and default values.
"""

import os
import json
import logging
import threading
from typing import Any, Callable, Dict, List, Optional
from copy import deepcopy
import yaml

# Set up logging
logger = logging.getLogger(__name__)


def to_int(value: Any) -> Optional[int]:
    """
    Convert a value to an integer.

    Args:
        value: Value to convert

    Returns:
        Integer value, or None if conversion failed
    """
    if value is None:
        return None

    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def to_float(value: Any) -> Optional[float]:
    """
    Convert a value to a float.

    Args:
        value: Value to convert

    Returns:
        Float value, or None if conversion failed
    """
    if value is None:
        return None

    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def to_list(value: Any, separator: str = ',') -> Optional[List[str]]:
    """
    Convert a value to a list.

    Args:
        value: Value to convert
        separator: Separator for string values

    Returns:
        List value, or None if conversion failed
    """
    if value is None:
        return None

    if isinstance(value, (list, tuple)):
        return list(value)

    if isinstance(value, str):
        return [item.strip() for item in value.split(separator) if item.strip()]

    return None


def to_float_list(value: Any, separator: str = ',') -> Optional[List[float]]:
    """
    Convert a value to a list of floats.

    Args:
        value: Value to convert
        separator: Separator for string values

    Returns:
        List of floats, or None if conversion failed
    """
    items = to_list(value, separator)

    if items is None:
        return None

    try:
        return [float(item) for item in items]
    except (ValueError, TypeError):
        return None


def env_value(name: str, convert: Callable[[Any], Any], default: Any) -> Any:
    """
    Read and convert an environment variable.

    Args:
        name: Environment variable name
        convert: Conversion function returning None on failure
        default: Value used when the variable is unset or unparseable

    Returns:
        Converted value, or default
    """
    if name not in os.environ:
        return default

    value = convert(os.environ[name])
    if value is None:
        logger.warning(f"Ignoring unparseable value for {name}: {os.environ[name]!r}")
        return default

    return value


class Config:
    """
    Configuration manager for mlsims.
    """

    def __init__(self, overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            overrides: Optional configuration overrides
        """
        self._lock = threading.RLock()
        self._config = {}
        self._initialized = False

        # Load configuration
        self.load_config(overrides)

    def load_config(self, overrides: Optional[Dict[str, Any]] = None) -> None:
        """
        Load configuration from all sources.

        Args:
            overrides: Optional configuration overrides
        """
        with self._lock:
            config = self._get_defaults()
            config = self._apply_env_vars(config)

            if overrides:
                config = self._apply_overrides(config, overrides)

            config = self._apply_inferred_values(config)

            self._config = config
            self._initialized = True

            logger.info("Configuration loaded")

    def _get_defaults(self) -> Dict[str, Any]:
        """
        Get default configuration values.

        Returns:
            Default configuration
        """
        return {
            # Server
            'server': {
                'port': 8080,
                'host': 'localhost'
            },

            # Logging
            'logging': {
                'level': 'info'
            },

            # Seed for every random draw; None means fresh entropy
            'random-seed': None,

            # K-nearest neighbors
            'knn': {
                'k': 3,
                'metric': 'euclidean',
                'grid-size': 15,
                'padding': 0.1
            },

            # K-means
            'kmeans': {
                'max-iterations': 10,
                'convergence-eps': 0.1,
                'init': 'random',
                'elbow-max-k': 8
            },

            # Decision tree
            'tree': {
                'max-depth': 4,
                'min-samples-split': 3,
                'min-samples-leaf': 2
            },

            # Regularized regression
            'regression': {
                'learning-rate': 0.01,
                'iterations': 1000,
                'alpha': 0.5,
                'lambdas': [0.001, 0.01, 0.1, 0.5, 1, 2, 5, 10],
                'validation-fraction': 0.3
            },

            # Normal distribution
            'normal': {
                'percentile-ranks': [0.05, 0.10, 0.25, 0.50, 0.75, 0.90, 0.95],
                'max-samples': 100000
            },

            # Perceptron
            'perceptron': {
                'learning-rate': 0.1,
                'max-iterations': 100
            },

            # Logistic regression
            'logistic': {
                'learning-rate': 0.1,
                'iterations': 100,
                'regularization': 0.0
            },

            # Gradient-descent linear regression
            'linear': {
                'learning-rate': 0.01,
                'iterations': 100,
                'regularization': 0.0
            },

            # Central limit theorem sampling
            'clt': {
                'population-size': 1000,
                'sample-size': 30,
                'num-samples': 100,
                'max-samples': 10000
            }
        }

    def _apply_env_vars(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variables to configuration.

        Args:
            config: Current configuration

        Returns:
            Updated configuration
        """
        config = deepcopy(config)

        # Server
        config['server']['port'] = env_value('PORT', to_int, config['server']['port'])
        config['server']['host'] = os.environ.get('HOST', config['server']['host'])

        # Logging
        config['logging']['level'] = os.environ.get('LOG_LEVEL', config['logging']['level']).lower()

        # Seed
        config['random-seed'] = env_value('MLSIMS_SEED', to_int, config['random-seed'])

        # K-nearest neighbors
        config['knn']['k'] = env_value('KNN_K', to_int, config['knn']['k'])
        config['knn']['metric'] = os.environ.get('KNN_METRIC', config['knn']['metric']).lower()

        # K-means
        config['kmeans']['max-iterations'] = env_value(
            'KMEANS_MAX_ITERATIONS', to_int, config['kmeans']['max-iterations'])
        config['kmeans']['convergence-eps'] = env_value(
            'KMEANS_CONVERGENCE_EPS', to_float, config['kmeans']['convergence-eps'])

        # Decision tree
        config['tree']['max-depth'] = env_value('TREE_MAX_DEPTH', to_int, config['tree']['max-depth'])

        # Regularized regression
        config['regression']['learning-rate'] = env_value(
            'REGRESSION_LEARNING_RATE', to_float, config['regression']['learning-rate'])
        config['regression']['iterations'] = env_value(
            'REGRESSION_ITERATIONS', to_int, config['regression']['iterations'])
        config['regression']['lambdas'] = env_value(
            'REGRESSION_LAMBDAS', to_float_list, config['regression']['lambdas'])

        # Normal distribution
        config['normal']['max-samples'] = env_value(
            'NORMAL_MAX_SAMPLES', to_int, config['normal']['max-samples'])

        # Perceptron
        config['perceptron']['max-iterations'] = env_value(
            'PERCEPTRON_MAX_ITERATIONS', to_int, config['perceptron']['max-iterations'])

        # Logistic regression
        config['logistic']['iterations'] = env_value(
            'LOGISTIC_ITERATIONS', to_int, config['logistic']['iterations'])

        # Central limit theorem sampling
        config['clt']['max-samples'] = env_value('CLT_MAX_SAMPLES', to_int, config['clt']['max-samples'])

        return config

    def _apply_overrides(self, config: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply configuration overrides.

        Args:
            config: Current configuration
            overrides: Configuration overrides

        Returns:
            Updated configuration
        """
        config = deepcopy(config)

        def deep_update(d, u):
            for k, v in u.items():
                if isinstance(v, dict) and k in d and isinstance(d[k], dict):
                    d[k] = deep_update(d[k], v)
                else:
                    d[k] = v
            return d

        return deep_update(config, overrides)

    def _apply_inferred_values(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply inferred configuration values.

        Args:
            config: Current configuration

        Returns:
            Updated configuration
        """
        config = deepcopy(config)

        config['server-url'] = f"http://{config['server']['host']}:{config['server']['port']}"

        # Path steps are reported in increasing lambda order
        config['regression']['lambdas'] = sorted(float(lam) for lam in config['regression']['lambdas'])

        return config

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            path: Configuration path (dot-separated)
            default: Default value if not found

        Returns:
            Configuration value, or default if not found
        """
        if not self._initialized:
            self.load_config()

        value = self._config

        for component in path.split('.'):
            if isinstance(value, dict) and component in value:
                value = value[component]
            else:
                return default

        return value

    def set(self, path: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            path: Configuration path (dot-separated)
            value: Configuration value
        """
        with self._lock:
            if not self._initialized:
                self.load_config()

            components = path.split('.')
            config = self._config

            for component in components[:-1]:
                if component not in config:
                    config[component] = {}

                config = config[component]

            config[components[-1]] = value

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to a dictionary.

        Returns:
            Configuration dictionary
        """
        if not self._initialized:
            self.load_config()

        return deepcopy(self._config)

    def save_to_file(self, filepath: str) -> None:
        """
        Save configuration to a file.

        Args:
            filepath: Path to save configuration
        """
        if not self._initialized:
            self.load_config()

        if filepath.endswith('.json'):
            with open(filepath, 'w') as f:
                json.dump(self._config, f, indent=2)
        elif filepath.endswith('.yaml') or filepath.endswith('.yml'):
            with open(filepath, 'w') as f:
                yaml.dump(self._config, f, default_flow_style=False)
        else:
            raise ValueError(f"Unsupported file format: {filepath}")

    def load_from_file(self, filepath: str) -> None:
        """
        Load configuration from a file.

        Values in the file are applied as overrides on top of the defaults
        and the environment.

        Args:
            filepath: Path to load configuration from
        """
        if filepath.endswith('.json'):
            with open(filepath, 'r') as f:
                overrides = json.load(f)
        elif filepath.endswith('.yaml') or filepath.endswith('.yml'):
            with open(filepath, 'r') as f:
                overrides = yaml.safe_load(f)
        else:
            raise ValueError(f"Unsupported file format: {filepath}")

        self.load_config(overrides)


class ConfigManager:
    """
    Singleton manager for configuration.
    """

    _instance = None
    _lock = threading.RLock()

    @classmethod
    def get_config(cls, overrides: Optional[Dict[str, Any]] = None) -> Config:
        """
        Get the configuration instance.

        Args:
            overrides: Optional configuration overrides

        Returns:
            Config instance
        """
        with cls._lock:
            if cls._instance is None:
                cls._instance = Config(overrides)
            elif overrides:
                cls._instance.load_config(overrides)

            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """
        Drop the shared instance so the next get_config reloads from scratch.
        """
        with cls._lock:
            cls._instance = None
