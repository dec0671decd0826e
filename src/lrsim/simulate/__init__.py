"""Long-read simulation module."""

from lrsim.simulate.runner import run_simulation

__all__ = [
    "run_simulation",
]
