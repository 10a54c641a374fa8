"""
Numeric kernels for mlsims.

Each module is a set of pure functions over plain points and samples:
correlation, normal sampling, distances and K-NN, K-means, decision trees,
regularized and gradient-descent regression, the perceptron, logistic
regression, Bayes' theorem and the sampling distribution of the mean.
"""
