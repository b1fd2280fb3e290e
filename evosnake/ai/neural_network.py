import numpy as np

from .matrix import Matrix


def sigmoid(x):
    """Logistic function 1 / (1 + e^-x), works on scalars and numpy arrays"""
    # Split by sign so large magnitudes never overflow exp()
    x = np.asarray(x, dtype=float)
    result = np.empty_like(x)
    positive = x >= 0
    result[positive] = 1.0 / (1.0 + np.exp(-x[positive]))
    exp_x = np.exp(x[~positive])
    result[~positive] = exp_x / (1.0 + exp_x)
    if result.ndim == 0:
        return float(result)
    return result


class NeuralNetwork:
    """Fixed-topology feed-forward network with sigmoid activations.

    weights[i] is a shape[i] x shape[i+1] matrix and biases[i] a
    1 x shape[i+1] row. Networks are never modified after construction:
    merge() and mutate() build new networks and leave their parents intact.
    """

    def __init__(self, shape, weights=None, biases=None, rng=None):
        # Args:
        #   shape: layer widths, input layer first (at least 2 entries)
        #   weights, biases: existing layer matrices; sampled from N(0, 1) when omitted
        #   rng: numpy Generator used for the initial sampling
        shape = tuple(int(size) for size in shape)
        if len(shape) < 2:
            raise ValueError(f"A network needs at least an input and an output layer, got shape {shape}")
        if any(size <= 0 for size in shape):
            raise ValueError(f"Layer widths must be positive, got shape {shape}")
        self._shape = shape

        if weights is None or biases is None:
            rng = rng if rng is not None else np.random.default_rng()
            weights = [Matrix.new_map(n_in, n_out, lambda row, col: rng.standard_normal())
                       for n_in, n_out in zip(shape, shape[1:])]
            biases = [Matrix.new_map(1, n_out, lambda row, col: rng.standard_normal())
                      for n_out in shape[1:]]

        self._weights = tuple(weights)
        self._biases = tuple(biases)
        self._check_layers()

    def _check_layers(self):
        layers = len(self._shape) - 1
        if len(self._weights) != layers or len(self._biases) != layers:
            raise ValueError(f"Shape {self._shape} needs {layers} weight and bias matrices, "
                             f"got {len(self._weights)} and {len(self._biases)}")
        for i, (n_in, n_out) in enumerate(zip(self._shape, self._shape[1:])):
            if self._weights[i].shape != (n_in, n_out):
                raise ValueError(f"weights[{i}] should be {n_in}x{n_out}, got "
                                 f"{self._weights[i].height}x{self._weights[i].width}")
            if self._biases[i].shape != (1, n_out):
                raise ValueError(f"biases[{i}] should be 1x{n_out}, got "
                                 f"{self._biases[i].height}x{self._biases[i].width}")

    @property
    def shape(self):
        return self._shape

    @property
    def weights(self):
        return self._weights

    @property
    def biases(self):
        return self._biases

    def parameter_count(self):
        return sum(w.height * w.width + b.width for w, b in zip(self._weights, self._biases))

    def evaluate(self, inputs):
        """Feed inputs forward and return the output layer as a list of floats in (0, 1)"""
        inputs = [float(value) for value in inputs]
        if len(inputs) != self._shape[0]:
            raise ValueError(f"Network expects {self._shape[0]} inputs, got {len(inputs)}")

        value = Matrix.from_rows([inputs], dtype=float)
        for weight, bias in zip(self._weights, self._biases):
            value = (value @ weight + bias).map(sigmoid, vectorized=True)
        return value.flatten()

    def act(self, inputs):
        """Index of the strongest output (lowest index wins ties)"""
        outputs = self.evaluate(inputs)
        return int(np.argmax(outputs))

    def merge(self, other, rng=None):
        """Uniform crossover: every scalar comes from self or other with a fair coin flip"""
        if not isinstance(other, NeuralNetwork):
            raise TypeError(f"Cannot merge a network with {type(other).__name__}")
        if self._shape != other._shape:
            raise ValueError(f"Cannot merge networks of shape {self._shape} and {other._shape}")
        rng = rng if rng is not None else np.random.default_rng()

        def pick(layer_one, layer_two):
            return Matrix.new_map(
                layer_one.height, layer_one.width,
                lambda row, col: layer_one[row, col] if rng.random() < 0.5 else layer_two[row, col],
                dtype=float,
            )

        weights = [pick(w1, w2) for w1, w2 in zip(self._weights, other._weights)]
        biases = [pick(b1, b2) for b1, b2 in zip(self._biases, other._biases)]
        return NeuralNetwork(self._shape, weights, biases)

    def mutate(self, mutation_prob, mutation_amount, rng=None):
        """Add U(-amount, amount) noise to each scalar with probability mutation_prob"""
        if not 0.0 <= mutation_prob <= 1.0:
            raise ValueError(f"Mutation probability must be in [0, 1], got {mutation_prob}")
        if mutation_amount < 0:
            raise ValueError(f"Mutation amount must be non-negative, got {mutation_amount}")
        rng = rng if rng is not None else np.random.default_rng()

        def perturb(layer):
            def cell(row, col):
                value = layer[row, col]
                if rng.random() < mutation_prob:
                    value += rng.uniform(-mutation_amount, mutation_amount)
                return value
            return Matrix.new_map(layer.height, layer.width, cell, dtype=float)

        weights = [perturb(w) for w in self._weights]
        biases = [perturb(b) for b in self._biases]
        return NeuralNetwork(self._shape, weights, biases)

    def copy(self):
        return NeuralNetwork(self._shape,
                             [w.copy() for w in self._weights],
                             [b.copy() for b in self._biases])

    def __eq__(self, other):
        if not isinstance(other, NeuralNetwork):
            return NotImplemented
        return (self._shape == other._shape
                and all(a == b for a, b in zip(self._weights, other._weights))
                and all(a == b for a, b in zip(self._biases, other._biases)))

    __hash__ = None

    def __repr__(self):
        return f"NeuralNetwork(shape={list(self._shape)})"
