"""Services package for the analysis gateway.

This package provides:
- Response sanitizing (JSON extraction from model output)
- Schema validation of decoded payloads
- Prompt templates
- The analysis gateway pipeline
"""

from resumegate.app.services.analysis_gateway import (
    AnalysisGateway,
    AnalysisKind,
    AnalysisOutcome,
    PipelineStage,
)
from resumegate.app.services.sanitizer import extract_payload, parse_payload, strip_code_fence
from resumegate.app.services.validation import (
    SUGGESTION_BUCKETS,
    AnalysisSection,
    MatchResult,
    OptimizationReport,
    Suggestions,
    validate_match_result,
    validate_optimization_report,
)

__all__ = [
    # Gateway
    "AnalysisGateway",
    "AnalysisKind",
    "AnalysisOutcome",
    "PipelineStage",
    # Sanitizer
    "extract_payload",
    "parse_payload",
    "strip_code_fence",
    # Validation
    "SUGGESTION_BUCKETS",
    "AnalysisSection",
    "MatchResult",
    "OptimizationReport",
    "Suggestions",
    "validate_match_result",
    "validate_optimization_report",
]
