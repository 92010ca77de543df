"""Compiler core lowering a C-like syntax tree through an optimizing IR to qproc and HyperCPU assembly."""

__version__ = "0.1.0"