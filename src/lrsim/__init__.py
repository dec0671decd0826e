"""
lrsim: A long-read sequencing simulator.

This package provides tools for:
- Fragment selection from linear and circular references
- Error injection driven by k-mer substitution/indel models and glitches
- Context-aware quality score assignment
- Reproducible parallel read generation
"""

__version__ = "0.1.0"
__author__ = "lrsim Team"
