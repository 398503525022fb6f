"""
JSON persistence of trained networks.

    {
        "layers": [
            {"weights": [[...], ...], "biases": [...], "activation": "Sigmoid"},
            ...
        ]
    }

Weights are stored row-major, one row per input of the layer. Reading a
document rebuilds the layers from these values directly (no initializer)
and connects them in array order.
"""
import json
import logging

from backprop.activations import activation_name, get_activation
from backprop.exceptions import DimensionMismatchError, SerializationError, UnknownActivationError
from backprop.layers import Layer
from backprop.nn import NN


logger = logging.getLogger(__name__)


def to_dict(network):
    return {
        "layers": [
            {
                "weights": layer.weights.tolist(),
                "biases": layer.biases.tolist(),
                "activation": activation_name(layer.activation),
            }
            for layer in network.layers
        ]
    }


def from_dict(document):
    try:
        layer_documents = document["layers"]
    except (KeyError, TypeError):
        raise SerializationError("[serialization.py] Document has no \"layers\" entry.") from None
    if not isinstance(layer_documents, list) or not layer_documents:
        raise SerializationError("[serialization.py] \"layers\" must be a non empty list.")

    layers = []
    for i, layer_document in enumerate(layer_documents):
        try:
            weights = layer_document["weights"]
            biases = layer_document["biases"]
            name = layer_document["activation"]
        except (KeyError, TypeError) as e:
            raise SerializationError(f"[serialization.py] Layer {i} is missing {e}.") from None
        # unknown activation names fail here, before any layer is built
        activation = get_activation(name)
        if not isinstance(weights, list) or not weights or \
                any(not isinstance(row, list) or len(row) != len(weights[0]) for row in weights):
            raise SerializationError(f"[serialization.py] Layer {i} weights are not a rectangular matrix.")
        try:
            layers.append(Layer(weights, biases, activation))
        except (DimensionMismatchError, UnknownActivationError):
            raise
        except (TypeError, ValueError, RuntimeError) as e:
            raise SerializationError(f"[serialization.py] Layer {i} holds invalid values: {e}") from e
    return NN(layers)


def serialize(network):
    return json.dumps(to_dict(network), indent=4)


def deserialize(text):
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise SerializationError(f"[serialization.py] Not a valid JSON document: {e}") from e
    return from_dict(document)


def save(network, path):
    with open(path, "w") as f:
        f.write(serialize(network))
    logger.info("[serialization.py] Network %r saved to %s", network, path)


def load(path):
    with open(path, "r") as f:
        network = deserialize(f.read())
    logger.info("[serialization.py] Network %r loaded from %s", network, path)
    return network
