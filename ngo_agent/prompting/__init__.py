"""Prompting package.

This package contains deterministic prompt-construction helpers used by the core
capability router. It does not perform provider selection, model invocation or
result extraction.
"""
