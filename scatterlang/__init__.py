"""Tokenizer, parser and namespace model for the Scatter stack language."""

__version__ = "0.1.0"