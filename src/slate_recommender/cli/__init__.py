"""
CLI module for the slate recommender.
"""

from slate_recommender.cli.recommend import main as recommend_main

__all__ = ["recommend_main"]
