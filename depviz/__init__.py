"""depviz - dependency graphs and layouts for ECMAScript source trees."""

__version__ = "0.3.0"
