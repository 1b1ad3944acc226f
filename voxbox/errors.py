"""Exceptions raised at the voxbox core boundary."""


class InvalidArgument(ValueError):
    """Input value outside the range accepted by the core."""


class GeneratorBusyError(RuntimeError):
    """Generator reconfiguration requested while a batch pass is running."""
