"""
Slate recommender.

Builds ranked, diversity-constrained slates from a user's saved items:
candidate annotation, explainable scoring, greedy selection with repair
swaps, and transactional persistence with a single retry.
"""

from .version import API_VERSION

__version__ = API_VERSION
