from backprop.activations import resolve_activation
from backprop.initializers import RandomInitializer
from backprop.layers import Layer, connect_layers
from backprop.nn import NN


class NetworkLayout:
    """
    Topology of a network: the number of inputs, then one (neurons, activation)
    pair per layer. Activations can be given as instances, classes or names.

    >>> NetworkLayout(2, [(2, "Sigmoid"), (1, "Sigmoid")]).build()
    <NN 2-2-1>
    """

    def __init__(self, input_size, layers, initializer=None):
        if input_size < 1:
            raise ValueError(f"[layout.py] A network needs at least one input, got {input_size}.")
        self.input_size = input_size
        self.layer_specs = [(int(neurons), resolve_activation(activation)) for neurons, activation in layers]
        if not self.layer_specs:
            raise ValueError("[layout.py] A network needs at least one layer.")
        self.initializer = RandomInitializer() if initializer is None else initializer

    def get_layers(self):
        layers = []
        n_inputs = self.input_size
        for n_neurons, activation in self.layer_specs:
            layers.append(Layer.from_initializer(n_inputs, n_neurons, self.initializer, activation))
            n_inputs = n_neurons
        return connect_layers(layers)

    def build(self):
        return NN(self.get_layers())
