import torch

from backprop.exceptions import DimensionMismatchError


DTYPE = torch.float64


def random_in_interval(dims, min_=-1, max_=1, generator=None):
    return (max_ - min_) * torch.rand(dims, generator=generator, dtype=DTYPE) + min_


def as_vector(values, name="vector"):
    """
    Converts a list, tuple or tensor into a 1D float64 tensor.
    """
    vector = torch.as_tensor(values, dtype=DTYPE)
    if vector.dim() != 1:
        raise DimensionMismatchError(f"[utils.py] Expected {name} to be 1D, got shape {tuple(vector.shape)}.")
    return vector


def as_matrix(values, name="matrix"):
    matrix = torch.as_tensor(values, dtype=DTYPE)
    if matrix.dim() != 2:
        raise DimensionMismatchError(f"[utils.py] Expected {name} to be 2D, got shape {tuple(matrix.shape)}.")
    return matrix
