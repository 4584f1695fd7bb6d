from .fanout import StatePublisher, Subscriber

__all__ = ["StatePublisher", "Subscriber"]
