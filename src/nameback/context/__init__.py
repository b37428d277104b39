"""Context providers that derive names from paths and long text."""

from .directory import directory_context, is_generic_directory
from .key_phrases import extract_key_phrases, top_key_phrase
from .stem import StemAnalysis, analyze_stem

__all__ = [
    "StemAnalysis",
    "analyze_stem",
    "directory_context",
    "extract_key_phrases",
    "is_generic_directory",
    "top_key_phrase",
]
