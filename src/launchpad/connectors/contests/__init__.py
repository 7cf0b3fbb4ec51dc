"""Connectors for public coding-contest and hackathon listing APIs."""

from .codechef import CodeChefConnector
from .codeforces import CodeforcesConnector
from .hackerearth import HackerEarthConnector
from .kontests import KontestsConnector

__all__ = [
    "CodeChefConnector",
    "CodeforcesConnector",
    "HackerEarthConnector",
    "KontestsConnector",
]
