import math
from collections import namedtuple

from tqdm import tqdm

from backprop.exceptions import DimensionMismatchError, LayerStateError
from backprop.layers import LayerState, connect_layers
from backprop.loss import QuadraticCost
from backprop.utils import as_matrix, as_vector


DEFAULT_LEARNING_RATE = 0.5
DEFAULT_MOMENTUM = 0.9
DEFAULT_LOG_INTERVAL = 1000


class TrainingExample(namedtuple("TrainingExample", ["input", "expected_output"])):
    __slots__ = ()

    def __new__(cls, input_, expected_output):
        return super().__new__(cls, as_vector(input_, "input"), as_vector(expected_output, "expected output"))

    @classmethod
    def from_pairs(cls, pairs):
        return [cls(input_, expected_output) for input_, expected_output in pairs]


TrainingProgress = namedtuple("TrainingProgress", ["epoch", "epochs", "example", "examples", "mean_cost", "cost"])
TrainingProgress.__doc__ = """
Snapshot taken after every trained example. `epoch` counts from 0, `example`
from 1, and `mean_cost` is the running mean over the current epoch.
"""


class ExampleContext:
    """
    The per-layer states of a single example, threaded through
    feed_forward -> back_propagate -> perform_gradient_descent.
    """

    def __init__(self, n_layers):
        self.states = [LayerState() for _ in range(n_layers)]
        self.output = None


class NN:

    def __init__(self, layers):
        self.layers = list(layers)
        if not self.layers:
            raise ValueError("[nn.py] A network needs at least one layer.")
        connect_layers(self.layers)
        self.loss = QuadraticCost()

    def __repr__(self):
        sizes = [self.input_size] + [layer.output_size for layer in self.layers]
        return f"<NN {'-'.join(str(size) for size in sizes)}>"

    @property
    def first_layer(self):
        return self.layers[0]

    @property
    def last_layer(self):
        return self.layers[-1]

    @property
    def input_size(self):
        return self.first_layer.input_size

    @property
    def output_size(self):
        return self.last_layer.output_size

    def new_context(self):
        return ExampleContext(len(self.layers))

    def _check_context(self, context):
        if len(context.states) != len(self.layers):
            raise LayerStateError(f"[nn.py] Context holds {len(context.states)} layer states but the network has "
                                  f"{len(self.layers)} layers.")

    def feed_forward(self, input_, context=None):
        context = self.new_context() if context is None else context
        self._check_context(context)
        res = input_
        for layer, state in zip(self.layers, context.states):
            res = layer.feed_forward(res, state)
        context.output = res
        return res

    def back_propagate(self, context, cost_derivative):
        """
        Walks the layers from the output back to the first one; each layer's
        input gradient is the cost derivative of the layer before it.
        """
        self._check_context(context)
        gradient_output = cost_derivative
        for layer, state in zip(reversed(self.layers), reversed(context.states)):
            gradient_output = layer.back_propagate(state, gradient_output)

    def perform_gradient_descent(self, context, learning_rate, momentum):
        self._check_context(context)
        for layer, state in zip(self.layers, context.states):
            layer.perform_gradient_descent(state, learning_rate, momentum)

    def query(self, input_):
        return self.feed_forward(input_)

    def cost(self, output, expected_output):
        return self.loss.f(as_vector(output, "output"), as_vector(expected_output, "expected output"))

    def _as_example(self, example):
        if not isinstance(example, TrainingExample):
            example = TrainingExample(*example)
        if example.input.size(0) != self.input_size:
            raise DimensionMismatchError(f"[nn.py] Example input has length {example.input.size(0)}, the network "
                                         f"takes {self.input_size} inputs.")
        if example.expected_output.size(0) != self.output_size:
            raise DimensionMismatchError(f"[nn.py] Example expected output has length "
                                         f"{example.expected_output.size(0)}, the network outputs "
                                         f"{self.output_size} values.")
        return example

    def train_example(self, example, learning_rate=DEFAULT_LEARNING_RATE, momentum=DEFAULT_MOMENTUM):
        """
        One online gradient descent step. Returns the cost of the output
        computed before the update.
        """
        example = self._as_example(example)
        context = self.new_context()
        output = self.feed_forward(example.input, context)
        self.back_propagate(context, self.loss.der(output, example.expected_output))
        self.perform_gradient_descent(context, learning_rate, momentum)
        return self.loss.f(output, example.expected_output)

    def training_steps(self, examples, epochs, learning_rate=DEFAULT_LEARNING_RATE, momentum=DEFAULT_MOMENTUM):
        """
        Lazily trains the network, yielding a TrainingProgress after every
        example. Examples are visited in the given order, every epoch.
        """
        examples = [self._as_example(example) for example in examples]
        n_examples = len(examples)
        for epoch in range(epochs):
            total_cost = 0.0
            for i, example in enumerate(examples, start=1):
                cost = self.train_example(example, learning_rate, momentum)
                total_cost += cost
                yield TrainingProgress(epoch, epochs, i, n_examples, total_cost / i, cost)

    def train(self, examples, epochs, learning_rate=DEFAULT_LEARNING_RATE, momentum=DEFAULT_MOMENTUM,
              on_progress=None, logger=None, verbose=False, log_interval=DEFAULT_LOG_INTERVAL):
        """
        Parameters
        ----------
        examples: iterable of TrainingExample or (input, expected_output) pairs
            Trained one at a time, in order, every epoch.

        epochs: int
            Number of passes over `examples`.

        learning_rate, momentum: float
            See Layer.perform_gradient_descent.

        on_progress: callable, default=None
            Called with a TrainingProgress after every example.

        logger: backprop.logger.TrainingLogger, default=None
            Receives a progress line every `log_interval` epochs and on the
            last one.

        verbose: bool, default=False
            Show a progress bar over the epochs.

        Returns
        -------
        mean_cost: float
            Mean cost over the examples of the last epoch.
        """
        if log_interval < 1:
            raise ValueError(f"[nn.py] log_interval must be at least 1, got {log_interval}.")
        mean_cost = 0.0
        with tqdm(total=epochs, desc="[nn.py] Training", disable=not verbose) as bar:
            for progress in self.training_steps(examples, epochs, learning_rate, momentum):
                mean_cost = progress.mean_cost
                if on_progress is not None:
                    on_progress(progress)
                if progress.example < progress.examples:
                    continue
                bar.update(1)
                bar.set_postfix(cost=f"{mean_cost:.6f}")
                epoch = progress.epoch + 1
                if logger is not None and (epoch % log_interval == 0 or epoch == epochs):
                    logger.progress(f"Epoch done -> mean cost: {mean_cost:.6f}", epoch, epochs)
                    if math.isnan(mean_cost):
                        logger.warning("[nn.py] Mean cost is NaN, try a smaller learning rate.")
        return mean_cost

    def get_parameters(self):
        return [(layer.weights.clone(), layer.biases.clone()) for layer in self.layers]

    def set_parameters(self, parameters):
        """
        Installs new (weights, biases) per layer. Momentum is reset, the previous
        steps belong to the discarded parameters.
        """
        parameters = list(parameters)
        if len(parameters) != len(self.layers):
            raise DimensionMismatchError(f"[nn.py] Got parameters for {len(parameters)} layers, the network has "
                                         f"{len(self.layers)}.")
        for layer, (weights, biases) in zip(self.layers, parameters):
            weights = as_matrix(weights, "weights")
            biases = as_vector(biases, "biases")
            if weights.shape != layer.weights.shape or biases.shape != layer.biases.shape:
                raise DimensionMismatchError(f"[nn.py] Parameters do not fit {layer!r}.")
            layer.weights = weights.clone()
            layer.biases = biases.clone()
            layer.reset_momentum()
