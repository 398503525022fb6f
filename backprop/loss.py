import torch


class QuadraticCost:
    """
    C = 0.5 * sum((y - o)^2), where o is the network output and y the expected output.
    """

    def f(self, output, expected):
        return 0.5 * torch.einsum("x->", (expected - output) ** 2).item()

    def der(self, output, expected):
        """
        dC/do, the gradient of the cost with respect to the output activation.
        """
        return output - expected
