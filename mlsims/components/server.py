"""
Server component for mlsims.

This module provides a FastAPI server exposing the mlsims kernels to the
simulation pages.
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Union

import fastapi
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from mlsims import datasets
from mlsims.components.config import Config, ConfigManager
from mlsims.math import (
    clusters, corr, distance, linear, logistic, normal, perceptron, probability, regularization, tree
)
from mlsims.math.points import Point
from mlsims.utils.general import InvalidInputError, as_xy_array, resolve_rng

# Set up logging
logger = logging.getLogger(__name__)


# Define API models
class PointModel(BaseModel):
    """2-D point model."""

    x: float
    y: float
    label: Optional[Union[int, str]] = None
    id: Optional[str] = None


class PointsRequest(BaseModel):
    """Points given inline or by dataset key."""

    points: Optional[List[PointModel]] = None
    dataset: Optional[str] = None
    seed: Optional[int] = None


class DistanceMatrixRequest(PointsRequest):
    metric: str = 'euclidean'


class KnnClassifyRequest(PointsRequest):
    """K-NN classification request model."""

    query: PointModel
    k: Optional[int] = None
    metric: Optional[str] = None


class KnnBoundaryRequest(PointsRequest):
    """K-NN decision boundary request model."""

    k: Optional[int] = None
    metric: Optional[str] = None
    grid_size: Optional[int] = None
    padding: Optional[float] = None


class KMeansRequest(PointsRequest):
    """K-means request model."""

    k: int
    max_iterations: Optional[int] = None
    convergence_eps: Optional[float] = None
    init: Optional[str] = None


class ElbowRequest(PointsRequest):
    max_k: Optional[int] = None
    init: Optional[str] = None


class NormalSampleRequest(BaseModel):
    """Normal sampling request model."""

    mean: float = 0.0
    stddev: float = 1.0
    n: int = 1000
    seed: Optional[int] = None
    bins: int = 30
    include_samples: bool = False


class NormalDensityRequest(BaseModel):
    """Normal density curve request model."""

    mean: float = 0.0
    stddev: float = 1.0
    x_min: Optional[float] = None
    x_max: Optional[float] = None
    n_points: int = 200


class TreeRequest(BaseModel):
    """Decision tree request model."""

    samples: Optional[List[Dict[str, Any]]] = None
    dataset: Optional[str] = None
    features: Optional[List[str]] = None
    max_depth: Optional[int] = None
    unbounded_depth: bool = False
    min_samples_split: Optional[int] = None
    min_samples_leaf: Optional[int] = None


class RegressionRequest(PointsRequest):
    """Regularized regression request model."""

    penalty: str = 'l2'
    lam: float = 0.01
    alpha: Optional[float] = None
    learning_rate: Optional[float] = None
    iterations: Optional[int] = None


class RegressionPathRequest(RegressionRequest):
    lambdas: Optional[List[float]] = None


class RegressionEvaluateRequest(RegressionRequest):
    validation_fraction: Optional[float] = None


class PerceptronRequest(PointsRequest):
    """Perceptron training request model."""

    learning_rate: Optional[float] = None
    max_iterations: Optional[int] = None


class GradientFitRequest(PointsRequest):
    """Logistic or linear gradient-descent request model."""

    learning_rate: Optional[float] = None
    iterations: Optional[int] = None
    regularization: Optional[float] = None


class BayesRequest(BaseModel):
    """Bayes' theorem request model."""

    prior: float = 0.1
    likelihood_true: float = 0.9
    likelihood_false: float = 0.1


class CltRequest(BaseModel):
    """Central limit theorem sampling request model."""

    distribution: str = 'uniform'
    population_size: Optional[int] = None
    sample_size: Optional[int] = None
    num_samples: Optional[int] = None
    seed: Optional[int] = None
    bins: int = 20
    include_population: bool = False


def _pick(value: Any, default: Any) -> Any:
    return default if value is None else value


class Server:
    """
    FastAPI server for mlsims.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize a server.

        Args:
            config: Configuration for the server
        """
        self.config = config or ConfigManager.get_config()

        # Create FastAPI app
        self.app = FastAPI(
            title="mlsims API",
            description="Numeric kernels behind the machine-learning simulations",
            version="0.1.0"
        )

        # Set up CORS
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._setup_routes()
        self._setup_validation()
        self._setup_error_handling()

        # Server status
        self._running = False
        self._server_thread = None

    def _seed(self, seed: Optional[int]) -> Optional[int]:
        return _pick(seed, self.config.get('random-seed'))

    def _dataset(self, key: str, seed: Optional[int] = None):
        try:
            return datasets.get_dataset(key, rng=self._seed(seed))
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Dataset not found: {key}")

    def _points(self, request: PointsRequest) -> List[Point]:
        """
        Resolve the points of a request, inline points taking precedence.
        """
        if request.points is not None:
            return [Point(p.x, p.y, label=p.label, id=p.id) for p in request.points]

        if request.dataset is not None:
            return self._dataset(request.dataset, request.seed).points

        raise InvalidInputError("Request needs either 'points' or 'dataset'")

    def _setup_routes(self) -> None:
        """
        Set up API routes.
        """
        # Health check
        @self.app.get("/health")
        async def health_check():
            return {"status": "ok"}

        # Datasets
        @self.app.get("/api/v1/datasets")
        async def list_datasets():
            return {
                "datasets": datasets.list_datasets(),
                "normal_presets": [preset.to_dict() for preset in datasets.NORMAL_PRESETS.values()]
            }

        @self.app.get("/api/v1/datasets/{key}")
        def get_dataset(key: str, seed: Optional[int] = None):
            return self._dataset(key, seed).to_dict()

        # Correlation
        @self.app.post("/api/v1/correlation")
        def correlation(request: PointsRequest):
            points = self._points(request)
            line = corr.trend_line(points)

            response = {"r": corr.pearson_correlation(points), "trend_line": line.to_dict()}
            if points:
                data = as_xy_array(points)
                response["trend_points"] = corr.trend_line_points(line, float(data[:, 0].min()),
                                                                  float(data[:, 0].max()))
            return response

        # Normal distribution
        @self.app.post("/api/v1/normal/sample")
        def normal_sample(request: NormalSampleRequest):
            max_samples = self.config.get('normal.max-samples')
            if request.n > max_samples:
                raise InvalidInputError(f"n must be at most {max_samples}, got {request.n}")

            samples = normal.sample_normal(request.mean, request.stddev, request.n, self._seed(request.seed))
            summary = normal.summarize(samples, self.config.get('normal.percentile-ranks'))
            summary["percentiles"] = [
                {"rank": rank, "value": value} for rank, value in summary["percentiles"].items()
            ]

            response = {"summary": summary, "histogram": normal.histogram(samples, request.bins)}
            if request.include_samples:
                response["samples"] = samples.tolist()
            return response

        @self.app.post("/api/v1/normal/density")
        def normal_density(request: NormalDensityRequest):
            xs, densities = normal.density_curve(request.mean, request.stddev, request.x_min, request.x_max,
                                                 request.n_points)
            return {"x": xs.tolist(), "density": densities.tolist()}

        # Distance and K-NN
        @self.app.post("/api/v1/distance/matrix")
        def distance_matrix(request: DistanceMatrixRequest):
            matrix = distance.distance_matrix(self._points(request), request.metric)
            return {"ids": [str(i) for i in matrix.index], "matrix": matrix.values.tolist()}

        @self.app.post("/api/v1/knn/classify")
        def knn_classify(request: KnnClassifyRequest):
            training_set = self._points(request)
            k = _pick(request.k, self.config.get('knn.k'))
            metric = _pick(request.metric, self.config.get('knn.metric'))
            query = (request.query.x, request.query.y)

            neighbors = distance.nearest_neighbors(query, training_set, k, metric)
            return {
                "label": distance.knn_classify(query, training_set, k, metric),
                "neighbors": [
                    {"point": point.to_dict(), "distance": dist} for point, dist in neighbors
                ]
            }

        @self.app.post("/api/v1/knn/boundary")
        def knn_boundary(request: KnnBoundaryRequest):
            boundary = distance.decision_boundary(
                self._points(request),
                _pick(request.k, self.config.get('knn.k')),
                _pick(request.metric, self.config.get('knn.metric')),
                _pick(request.grid_size, self.config.get('knn.grid-size')),
                _pick(request.padding, self.config.get('knn.padding'))
            )
            return {"grid": [{"x": x, "y": y, "label": label} for x, y, label in boundary]}

        # K-means
        @self.app.post("/api/v1/kmeans")
        def run_kmeans(request: KMeansRequest):
            points = self._points(request)
            result = clusters.kmeans(
                points,
                request.k,
                rng=self._seed(request.seed),
                max_iterations=_pick(request.max_iterations, self.config.get('kmeans.max-iterations')),
                convergence_eps=_pick(request.convergence_eps, self.config.get('kmeans.convergence-eps')),
                init=_pick(request.init, self.config.get('kmeans.init'))
            )

            response = result.to_dict()
            response["silhouette"] = clusters.silhouette(points, result.clusters)
            return response

        @self.app.post("/api/v1/kmeans/elbow")
        def kmeans_elbow(request: ElbowRequest):
            curve = clusters.elbow_curve(
                self._points(request),
                max_k=_pick(request.max_k, self.config.get('kmeans.elbow-max-k')),
                rng=self._seed(request.seed),
                init=_pick(request.init, self.config.get('kmeans.init'))
            )
            return {"curve": [{"k": k, "wcss": wcss} for k, wcss in curve]}

        # Decision tree
        @self.app.post("/api/v1/tree")
        def build_tree(request: TreeRequest):
            if request.samples is not None:
                samples = request.samples
                features = request.features or self._infer_features(samples)
            elif request.dataset is not None:
                dataset = self._dataset(request.dataset)
                samples = dataset.points
                features = request.features or dataset.features
            else:
                raise InvalidInputError("Request needs either 'samples' or 'dataset'")

            if request.unbounded_depth:
                max_depth = None
            else:
                max_depth = _pick(request.max_depth, self.config.get('tree.max-depth'))

            root = tree.build_tree(
                samples,
                features,
                max_depth=max_depth,
                min_samples_split=_pick(request.min_samples_split, self.config.get('tree.min-samples-split')),
                min_samples_leaf=_pick(request.min_samples_leaf, self.config.get('tree.min-samples-leaf'))
            )

            return {
                "tree": root.to_dict(),
                "accuracy": tree.accuracy(root, samples),
                "nodes": tree.count_nodes(root),
                "leaves": tree.count_leaves(root),
                "depth": tree.tree_depth(root)
            }

        # Regularized regression
        @self.app.post("/api/v1/regression/fit")
        def regression_fit(request: RegressionRequest):
            coefficients = regularization.fit_regularized(self._points(request), **self._regression_args(request))
            return {
                "coefficients": coefficients.tolist(),
                "selected_features": regularization.active_features(coefficients)
            }

        @self.app.post("/api/v1/regression/path")
        def regression_path(request: RegressionPathRequest):
            args = self._regression_args(request)
            del args['lam']

            path = regularization.coefficient_path(
                self._points(request),
                lambdas=_pick(request.lambdas, self.config.get('regression.lambdas')),
                **args
            )
            return {"path": [step.to_dict() for step in path]}

        @self.app.post("/api/v1/regression/evaluate")
        def regression_evaluate(request: RegressionEvaluateRequest):
            return regularization.evaluate_regularized(
                self._points(request),
                validation_fraction=_pick(request.validation_fraction,
                                          self.config.get('regression.validation-fraction')),
                rng=self._seed(request.seed),
                **self._regression_args(request)
            )

        # Perceptron
        @self.app.post("/api/v1/perceptron")
        def train_perceptron(request: PerceptronRequest):
            result = perceptron.train_perceptron(
                self._points(request),
                learning_rate=_pick(request.learning_rate, self.config.get('perceptron.learning-rate')),
                max_iterations=_pick(request.max_iterations, self.config.get('perceptron.max-iterations'))
            )
            return result.to_dict()

        # Logistic regression
        @self.app.post("/api/v1/logistic")
        def fit_logistic(request: GradientFitRequest):
            result = logistic.fit_logistic(self._points(request), **self._gradient_args(request, 'logistic'))
            return result.to_dict()

        # Gradient-descent linear regression
        @self.app.post("/api/v1/linear")
        def fit_linear(request: GradientFitRequest):
            fit = linear.fit_linear_regression(self._points(request), **self._gradient_args(request, 'linear'))
            return fit.to_dict()

        # Bayes' theorem
        @self.app.post("/api/v1/bayes")
        def bayes(request: BayesRequest):
            result = probability.bayes_posterior(request.prior, request.likelihood_true, request.likelihood_false)
            # JSON has no infinity
            if result["likelihood_ratio"] == float("inf"):
                result["likelihood_ratio"] = None
            return result

        # Central limit theorem
        @self.app.get("/api/v1/clt/distributions")
        async def clt_distributions():
            return {"distributions": probability.list_distributions()}

        @self.app.post("/api/v1/clt/sample")
        def clt_sample(request: CltRequest):
            num_samples = _pick(request.num_samples, self.config.get('clt.num-samples'))
            max_samples = self.config.get('clt.max-samples')
            if num_samples > max_samples:
                raise InvalidInputError(f"num_samples must be at most {max_samples}, got {num_samples}")

            sample_size = _pick(request.sample_size, self.config.get('clt.sample-size'))
            rng = resolve_rng(self._seed(request.seed))

            population = probability.generate_population(
                request.distribution,
                _pick(request.population_size, self.config.get('clt.population-size')),
                rng=rng
            )
            means = probability.sampling_distribution(population, sample_size, num_samples, rng=rng)

            response = {
                "population": {"mean": float(population.mean()), "std": float(population.std()),
                               "size": int(population.size)},
                "means": means.tolist(),
                "mean_of_means": float(means.mean()),
                "std_of_means": float(means.std()),
                "standard_error": probability.standard_error(population, sample_size),
                "histogram": normal.histogram(means, request.bins)
            }
            if request.include_population:
                response["population"]["values"] = population.tolist()
            return response

    def _gradient_args(self, request: GradientFitRequest, section: str) -> Dict[str, Any]:
        return {
            'learning_rate': _pick(request.learning_rate, self.config.get(f'{section}.learning-rate')),
            'iterations': _pick(request.iterations, self.config.get(f'{section}.iterations')),
            'regularization': _pick(request.regularization, self.config.get(f'{section}.regularization'))
        }

    def _regression_args(self, request: RegressionRequest) -> Dict[str, Any]:
        return {
            'penalty': request.penalty,
            'lam': request.lam,
            'alpha': _pick(request.alpha, self.config.get('regression.alpha')),
            'learning_rate': _pick(request.learning_rate, self.config.get('regression.learning-rate')),
            'iterations': _pick(request.iterations, self.config.get('regression.iterations'))
        }

    @staticmethod
    def _infer_features(samples: List[Dict[str, Any]]) -> List[str]:
        """
        Feature names of the first sample: its 'features' keys, or every
        key except label, id and color.
        """
        if not samples:
            return []

        first = samples[0]
        if isinstance(first.get('features'), dict):
            return list(first['features'])
        return [key for key in first if key not in ('label', 'id', 'color')]

    def _setup_validation(self) -> None:
        """
        Set up request validation.
        """
        @self.app.exception_handler(fastapi.exceptions.RequestValidationError)
        async def validation_exception_handler(request, exc):
            return JSONResponse(
                status_code=422,
                content={"detail": str(exc)}
            )

    def _setup_error_handling(self) -> None:
        """
        Set up error handling.
        """
        @self.app.exception_handler(InvalidInputError)
        async def invalid_input_handler(request, exc):
            logger.info(f"Rejected request to {request.url.path}: {exc}")
            return JSONResponse(
                status_code=400,
                content={"detail": str(exc)}
            )

        @self.app.exception_handler(Exception)
        async def generic_exception_handler(request, exc):
            logger.exception("Unhandled exception")
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error"}
            )

    def run(self) -> None:
        """
        Serve in the calling thread until interrupted.
        """
        import uvicorn

        port = self.config.get('server.port', 8080)
        host = self.config.get('server.host', '0.0.0.0')

        self._running = True
        logger.info(f"Server starting at http://{host}:{port}")

        try:
            uvicorn.run(
                self.app,
                host=host,
                port=port,
                log_level=self.config.get('logging.level', 'info')
            )
        finally:
            self._running = False

    def start(self) -> None:
        """
        Start the server in a background thread.
        """
        if self._running:
            return

        self._server_thread = threading.Thread(
            target=self.run,
            daemon=True
        )
        self._server_thread.start()

        self._running = True

    def stop(self) -> None:
        """
        Stop the server.
        """
        if not self._running:
            return

        # uvicorn.run offers no handle to stop it, so only the flag changes
        self._running = False

        logger.info("Server stopping (full shutdown requires process restart)")


class ServerManager:
    """
    Singleton manager for the server.
    """

    _instance = None
    _lock = threading.RLock()

    @classmethod
    def get_server(cls, config: Optional[Config] = None) -> Server:
        """
        Get the server instance.

        Args:
            config: Configuration

        Returns:
            Server instance
        """
        with cls._lock:
            if cls._instance is None:
                cls._instance = Server(config)

            return cls._instance

    @classmethod
    def shutdown(cls) -> None:
        """
        Shut down the server.
        """
        with cls._lock:
            if cls._instance is not None:
                cls._instance.stop()
                cls._instance = None
