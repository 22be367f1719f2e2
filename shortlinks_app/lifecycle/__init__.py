from .monitor import LifecycleMonitor

__all__ = ["LifecycleMonitor"]
