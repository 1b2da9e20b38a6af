"""Clarifyr: beginner-friendly explanations of text and web pages."""

__version__ = "0.1.0"
