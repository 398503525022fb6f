from backprop.activations import ReLU, Sigmoid, Softplus, Tanh, get_activation
from backprop.exceptions import (DimensionMismatchError, LayerStateError, NetworkError, SerializationError,
                                 UnknownActivationError)
from backprop.initializers import ConstantInitializer, GaussianInitializer, RandomInitializer
from backprop.layers import Layer, LayerState, Stage, connect_layers
from backprop.layout import NetworkLayout
from backprop.loss import QuadraticCost
from backprop.nn import NN, ExampleContext, TrainingExample, TrainingProgress
