"""Candidate scoring, sanitization, and collision handling."""

from .models import ACCEPTABLE_SCORE, HIGH_QUALITY_SCORE, Candidate, FileAnalysis, NameSource
from .sanitizer import CollisionResolver, sanitize, with_extension
from .scorer import make_candidate, score, select_best

__all__ = [
    "ACCEPTABLE_SCORE",
    "Candidate",
    "CollisionResolver",
    "FileAnalysis",
    "HIGH_QUALITY_SCORE",
    "NameSource",
    "make_candidate",
    "sanitize",
    "score",
    "select_best",
    "with_extension",
]
