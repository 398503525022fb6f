class NetworkError(Exception):
    """ Base class of every error raised by the package
    """


class UnknownActivationError(NetworkError, ValueError):
    """ Raised when an activation name (or object) is not one of the known
    activations, e.g. while reading a persisted network
    """


class DimensionMismatchError(NetworkError, ValueError):
    """ Raised when a vector or matrix does not have the width the layer
    (or the neighbouring layer) expects
    """


class LayerStateError(NetworkError, RuntimeError):
    """ Raised when the forward / backward / update steps are called out of
    order, or when a layer is used before being connected
    """


class SerializationError(NetworkError, ValueError):
    """ Raised when a persisted network document is malformed
    """
