"""
Pointwise activation functions.

Every derivative is written in terms of the already activated value
y = f(x), since that is what a layer keeps after its forward pass.
"""
import torch
import torch.nn.functional as F

from backprop.exceptions import UnknownActivationError


class Activation:
    name = None

    def f(self, x):
        raise NotImplementedError

    def der(self, y):
        raise NotImplementedError

    def transform(self, x):
        return self.f(x)

    def derivative(self, y):
        return self.der(y)

    def __eq__(self, other):
        return type(self) is type(other)

    def __hash__(self):
        return hash(type(self))

    def __repr__(self):
        return f"{type(self).__name__}()"


class Sigmoid(Activation):
    """
    s(x) = 1 / (1 + e^-x)
    """
    name = "Sigmoid"

    def f(self, x):
        return 1 / (1 + torch.exp(-x))

    def der(self, y):
        """
        s'(x) = s(x) * (1 - s(x))
        """
        return y * (1 - y)


class Tanh(Activation):
    name = "Tanh"

    def f(self, x):
        return torch.tanh(x)

    def der(self, y):
        return 1 - y ** 2


class ReLU(Activation):
    """
    r(x) = max(0, x).
    """
    name = "ReLU"

    def f(self, x):
        return torch.clamp(x, min=0)

    def der(self, y):
        """
        The derivative is zero if x <= 0 and 1 if x > 0. The function is not
        differentiable in 0, we take zero there.
        """
        return (y > 0).to(y.dtype)


class Softplus(Activation):
    """
    p(x) = ln(1 + e^x), a smooth version of ReLU.
    """
    name = "Softplus"

    def f(self, x):
        return F.softplus(x)

    def der(self, y):
        """
        p'(x) = sigmoid(x) = 1 - e^-p(x)
        """
        return -torch.expm1(-y)


ACTIVATIONS = {activation.name: activation for activation in (Sigmoid, Tanh, ReLU, Softplus)}


def get_activation(name):
    try:
        return ACTIVATIONS[name]()
    except (KeyError, TypeError):
        raise UnknownActivationError(f"[activations.py] {name!r} is not a known activation function. "
                                     f"Known: {', '.join(ACTIVATIONS)}.") from None


def activation_name(activation):
    name = getattr(activation, "name", None)
    if name not in ACTIVATIONS or not isinstance(activation, ACTIVATIONS[name]):
        raise UnknownActivationError(f"[activations.py] {activation!r} has no known activation name.")
    return name


def resolve_activation(activation):
    """
    Accepts an activation instance, an activation class or an activation name.
    """
    if isinstance(activation, Activation):
        activation_name(activation)
        return activation
    if isinstance(activation, type) and issubclass(activation, Activation):
        return get_activation(activation.name)
    return get_activation(activation)
