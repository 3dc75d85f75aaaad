"""CLI package for the library lending tracker"""
from .main import cli

__all__ = ['cli']
