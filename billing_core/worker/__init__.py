from .cancellation_finalizer import CancellationFinalizerWorker

__all__ = ["CancellationFinalizerWorker"]
