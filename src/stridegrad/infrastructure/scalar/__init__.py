from ._graph import ScalarGraph, ScalarNode, Value

__all__ = [ScalarGraph.__name__, ScalarNode.__name__, Value.__name__]
