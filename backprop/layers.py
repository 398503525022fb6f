from enum import Enum

import torch

from backprop.activations import resolve_activation
from backprop.exceptions import DimensionMismatchError, LayerStateError
from backprop.utils import DTYPE, as_matrix, as_vector


class Stage(Enum):
    IDLE = "idle"
    FED_FORWARD = "fed forward"
    BACK_PROPAGATED = "back propagated"
    UPDATED = "updated"


class LayerState:
    """
    Working values of one layer for one example: what the forward pass saw
    and produced, and the gradients the backward pass derived from them.
    The layer itself only keeps its parameters and momentum.
    """

    def __init__(self):
        self.stage = Stage.IDLE
        self.input_state = None  # i
        self.output_state = None  # o
        self.weight_gradient = None  # io
        self.bias_gradient = None  # o
        self.upstream_gradient = None  # i

    def __repr__(self):
        return f"<LayerState stage={self.stage.value}>"


class Layer:
    """
    Fully connected layer o = f(x @ W + b), where W is an input x output matrix,
    b is the bias and f a pointwise activation.
    """

    def __init__(self, weights, biases, activation):
        self.weights = as_matrix(weights, "weights").clone()
        self.biases = as_vector(biases, "biases").clone()
        if self.weights.size(0) < 1 or self.weights.size(1) < 1:
            raise DimensionMismatchError(f"[layers.py] Layer sizes must be positive, got "
                                         f"{self.weights.size(0)} x {self.weights.size(1)}.")
        if self.weights.size(1) != self.biases.size(0):
            raise DimensionMismatchError(f"[layers.py] Weights have {self.weights.size(1)} columns but there are "
                                         f"{self.biases.size(0)} biases.")
        self.activation = resolve_activation(activation)

        # momentum accumulators, carried from one training step to the next
        self.previous_delta_weights = torch.zeros_like(self.weights)
        self.previous_delta_biases = torch.zeros_like(self.biases)

        self.has_previous = False
        self.has_next = False
        self.is_connected = False

    @classmethod
    def from_initializer(cls, input_size, output_size, initializer, activation):
        if input_size < 1 or output_size < 1:
            raise ValueError(f"[layers.py] Layer sizes must be positive, got {input_size} x {output_size}.")
        weights = torch.tensor([[initializer.get_weight(row, col) for col in range(output_size)]
                                for row in range(input_size)], dtype=DTYPE)
        biases = torch.tensor([initializer.get_bias(i) for i in range(output_size)], dtype=DTYPE)
        return cls(weights, biases, activation)

    def __repr__(self):
        return f"<Layer {self.input_size} -> {self.output_size}, activation={self.activation.name}>"

    @property
    def input_size(self):
        return self.weights.size(0)

    @property
    def output_size(self):
        return self.weights.size(1)

    def connect(self, previous, next_):
        """
        Registers the neighbours of the layer. Only their existence is kept,
        the network owns the ordering. Widths must chain.
        """
        if previous is not None and previous.output_size != self.input_size:
            raise DimensionMismatchError(f"[layers.py] Previous layer outputs {previous.output_size} values but "
                                         f"this layer takes {self.input_size} inputs.")
        if next_ is not None and next_.input_size != self.output_size:
            raise DimensionMismatchError(f"[layers.py] Next layer takes {next_.input_size} inputs but this layer "
                                         f"outputs {self.output_size} values.")
        self.has_previous = previous is not None
        self.has_next = next_ is not None
        self.is_connected = True

    def feed_forward(self, input_, state=None):
        if not self.is_connected:
            raise LayerStateError("[layers.py] Layer used before being connected. Call .connect first.")
        input_ = as_vector(input_, "input")
        if input_.size(0) != self.input_size:
            raise DimensionMismatchError(f"[layers.py] Expected {self.input_size} inputs, got {input_.size(0)}.")
        state = LayerState() if state is None else state

        z = torch.einsum("x,xy->y", input_, self.weights) + self.biases  # o
        output = self.activation.f(z)  # o

        state.input_state = input_
        state.output_state = output
        state.weight_gradient = None
        state.bias_gradient = None
        state.upstream_gradient = None
        state.stage = Stage.FED_FORWARD
        return output

    def back_propagate(self, state, cost_derivative):
        """
        cost_derivative is dC/do for this layer's output o. Returns dC/dx for the
        layer's input x, which is the cost derivative of the previous layer, or
        None if there is no previous layer.
        """
        if state.stage is not Stage.FED_FORWARD:
            raise LayerStateError("[layers.py] No state saved. Probably caused by calling .back_propagate without "
                                  f"previously calling .feed_forward (stage: {state.stage.value}).")
        cost_derivative = as_vector(cost_derivative, "cost derivative")
        if cost_derivative.size(0) != self.output_size:
            raise DimensionMismatchError(f"[layers.py] Expected a cost derivative of length {self.output_size}, "
                                         f"got {cost_derivative.size(0)}.")

        activation_slope = self.activation.der(state.output_state)  # do/dz
        node_delta = torch.einsum("y,y->y", activation_slope, cost_derivative)  # dC/dz

        state.weight_gradient = torch.einsum("x,y->xy", state.input_state, node_delta)
        state.bias_gradient = node_delta  # dz/db = 1
        if self.has_previous:
            state.upstream_gradient = torch.einsum("xy,y->x", self.weights, node_delta)
        else:
            state.upstream_gradient = None
        state.stage = Stage.BACK_PROPAGATED
        return state.upstream_gradient

    def perform_gradient_descent(self, state, learning_rate, momentum):
        """
        Each step is the gradient step plus a fraction `momentum` of the
        previous step: delta = learning_rate * gradient + momentum * previous_delta.
        """
        if state.stage is not Stage.BACK_PROPAGATED:
            raise LayerStateError("[layers.py] No gradients saved. Probably caused by calling "
                                  ".perform_gradient_descent without previously calling .back_propagate "
                                  f"(stage: {state.stage.value}).")
        delta_weights = learning_rate * state.weight_gradient + momentum * self.previous_delta_weights
        self.weights -= delta_weights
        self.previous_delta_weights = delta_weights

        delta_biases = learning_rate * state.bias_gradient + momentum * self.previous_delta_biases
        self.biases -= delta_biases
        self.previous_delta_biases = delta_biases

        state.stage = Stage.UPDATED

    def reset_momentum(self):
        self.previous_delta_weights = torch.zeros_like(self.weights)
        self.previous_delta_biases = torch.zeros_like(self.biases)


def connect_layers(layers):
    for i, layer in enumerate(layers):
        previous = layers[i - 1] if i > 0 else None
        next_ = layers[i + 1] if i < len(layers) - 1 else None
        layer.connect(previous, next_)
    return layers
