"""
Compares the backpropagated gradients against central finite differences
of the cost.
"""
import itertools

import torch

from backprop.nn import TrainingExample


def _as_example(example):
    return example if isinstance(example, TrainingExample) else TrainingExample(*example)


def analytic_gradients(network, example):
    """
    Returns [(weight_gradient, bias_gradient), ...] for one example, from one
    forward and one backward pass. Parameters and momentum are left untouched.
    """
    example = _as_example(example)
    context = network.new_context()
    output = network.feed_forward(example.input, context)
    network.back_propagate(context, network.loss.der(output, example.expected_output))
    return [(state.weight_gradient, state.bias_gradient) for state in context.states]


def _cost(network, example):
    return network.loss.f(network.query(example.input), example.expected_output)


def _central_difference(network, example, parameter, index, epsilon):
    original = parameter[index].item()
    try:
        parameter[index] = original + epsilon
        cost_plus = _cost(network, example)
        parameter[index] = original - epsilon
        cost_minus = _cost(network, example)
    finally:
        parameter[index] = original
    return (cost_plus - cost_minus) / (2 * epsilon)


def numeric_gradients(network, example, epsilon=1e-5):
    example = _as_example(example)
    gradients = []
    for layer in network.layers:
        weight_gradient = torch.zeros_like(layer.weights)
        for index in itertools.product(range(layer.input_size), range(layer.output_size)):
            weight_gradient[index] = _central_difference(network, example, layer.weights, index, epsilon)
        bias_gradient = torch.zeros_like(layer.biases)
        for index in range(layer.output_size):
            bias_gradient[index] = _central_difference(network, example, layer.biases, index, epsilon)
        gradients.append((weight_gradient, bias_gradient))
    return gradients


def max_gradient_error(network, example, epsilon=1e-5):
    error = 0.0
    for (aw, ab), (nw, nb) in zip(analytic_gradients(network, example),
                                  numeric_gradients(network, example, epsilon)):
        error = max(error, (aw - nw).abs().max().item(), (ab - nb).abs().max().item())
    return error
