"""
Cœur du correcteur : retry, parsing, classification, pipeline et conseils d'étude.
"""

from .advisor import StudyAdvisor, collect_items
from .classifier import classify_correction, resolve_type
from .parser import extract_json_object, parse_correction_response, parse_study_advice
from .pipeline import CorrectionPipeline
from .retry import RetryController, exponential_backoff, is_rate_limited

__all__ = [
    "StudyAdvisor",
    "collect_items",
    "classify_correction",
    "resolve_type",
    "extract_json_object",
    "parse_correction_response",
    "parse_study_advice",
    "CorrectionPipeline",
    "RetryController",
    "exponential_backoff",
    "is_rate_limited",
]
