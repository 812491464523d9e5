"""
Language-specific code generators.

This module contains generators for the supported target languages.
"""

from .java import JavaGenerator, create_generator as create_java_generator

__all__ = ["JavaGenerator", "create_java_generator"]
