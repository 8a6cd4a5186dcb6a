"""querygraph -- dependency-graph core for data-transformation builds."""

__version__ = "0.1.0"
