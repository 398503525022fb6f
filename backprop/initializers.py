"""
Layer initializers: something that can be asked for the starting value of
every weight (row, col) and every bias (index) of a layer.
"""
import torch

from backprop.utils import DTYPE, random_in_interval


class Initializer:

    def get_weight(self, row, col):
        raise NotImplementedError

    def get_bias(self, index):
        raise NotImplementedError


class RandomInitializer(Initializer):
    """
    Uniform values in [min_, max_). Pass a seed for reproducible layers.
    """

    def __init__(self, min_=-1, max_=1, seed=None):
        self.min_ = min_
        self.max_ = max_
        self.generator = torch.Generator()
        if seed is None:
            self.generator.seed()
        else:
            self.generator.manual_seed(seed)

    def _draw(self):
        return random_in_interval((), self.min_, self.max_, generator=self.generator).item()

    def get_weight(self, row, col):
        return self._draw()

    def get_bias(self, index):
        return self._draw()


class GaussianInitializer(Initializer):

    def __init__(self, mean=0.0, std=1.0, seed=None):
        self.mean = mean
        self.std = std
        self.generator = torch.Generator()
        if seed is None:
            self.generator.seed()
        else:
            self.generator.manual_seed(seed)

    def _draw(self):
        return (self.mean + self.std * torch.randn((), generator=self.generator, dtype=DTYPE)).item()

    def get_weight(self, row, col):
        return self._draw()

    def get_bias(self, index):
        return self._draw()


class ConstantInitializer(Initializer):

    def __init__(self, weight=0.0, bias=0.0):
        self.weight = weight
        self.bias = bias

    def get_weight(self, row, col):
        return self.weight

    def get_bias(self, index):
        return self.bias
