"""Ngram statistics, metric results and layout optimizers for keyboard layouts."""

__version__ = "0.1.0"