"""Schema validation of decoded model payloads.

Score and keyword lists are structural: any violation fails the whole call
and nothing partial is returned. Suggestion buckets are advisory: a missing
or mistyped bucket is replaced with an empty list instead of failing.
Unrecognized top-level fields are dropped.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from resumegate.app.core.logging import get_logger
from resumegate.app.exceptions import SchemaViolationError

logger = get_logger(__name__)

SUGGESTION_BUCKETS = ("skills", "experience", "education", "projects")

SCORE_MIN = 0
SCORE_MAX = 100


class Suggestions(BaseModel):
    """Section-specific resume improvement suggestions."""
    skills: list[str] = Field(default_factory=list)
    experience: list[str] = Field(default_factory=list)
    education: list[str] = Field(default_factory=list)
    projects: list[str] = Field(default_factory=list)


class MatchResult(BaseModel):
    """Validated resume / job description match analysis."""
    model_config = ConfigDict(populate_by_name=True)

    score: int = Field(..., ge=SCORE_MIN, le=SCORE_MAX)
    present_keywords: list[str] = Field(..., alias="presentKeywords")
    missing_keywords: list[str] = Field(..., alias="missingKeywords")
    suggestions: Suggestions = Field(default_factory=Suggestions)

    def to_payload(self) -> dict[str, Any]:
        """Serialize using the camelCase wire names."""
        return self.model_dump(by_alias=True)


class AnalysisSection(BaseModel):
    """One titled section of a resume optimization report."""
    title: str
    content: str | list[str]


class OptimizationReport(BaseModel):
    """Validated resume optimization report."""
    analysis: list[AnalysisSection]

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump()


def _require_object(value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise SchemaViolationError(message="Model response is not a JSON object")
    return value


def _validate_score(value: Any) -> int:
    # bool is an int subclass but never a valid score
    if isinstance(value, bool):
        raise SchemaViolationError("score")
    if isinstance(value, float):
        if not value.is_integer():
            raise SchemaViolationError("score")
        value = int(value)
    if not isinstance(value, int) or not SCORE_MIN <= value <= SCORE_MAX:
        raise SchemaViolationError("score")
    return value


def _validate_string_list(payload: dict[str, Any], field: str) -> list[str]:
    value = payload.get(field)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise SchemaViolationError(field)
    return list(value)


def _normalize_suggestions(value: Any) -> Suggestions:
    if not isinstance(value, dict):
        if value is not None:
            logger.debug(f"suggestions is {type(value).__name__}, defaulting all buckets")
        return Suggestions()

    buckets: dict[str, list[str]] = {}
    for name in SUGGESTION_BUCKETS:
        bucket = value.get(name)
        if isinstance(bucket, list):
            buckets[name] = [item for item in bucket if isinstance(item, str)]
        else:
            buckets[name] = []
    return Suggestions(**buckets)


def validate_match_result(value: Any) -> MatchResult:
    """Validate a decoded job match payload.

    Args:
        value: Decoded JSON value from the sanitizer

    Returns:
        MatchResult with every suggestion bucket present

    Raises:
        SchemaViolationError: If score or keyword lists are missing or invalid
    """
    payload = _require_object(value)
    if "score" not in payload:
        raise SchemaViolationError("score")

    return MatchResult(
        score=_validate_score(payload["score"]),
        present_keywords=_validate_string_list(payload, "presentKeywords"),
        missing_keywords=_validate_string_list(payload, "missingKeywords"),
        suggestions=_normalize_suggestions(payload.get("suggestions")),
    )


def validate_optimization_report(value: Any) -> OptimizationReport:
    """Validate a decoded resume optimization payload.

    ``analysis`` must be a non-empty list of sections, each with a non-empty
    string title and content that is a string or a list of strings.

    Raises:
        SchemaViolationError: On any structural violation
    """
    payload = _require_object(value)
    sections = payload.get("analysis")
    if not isinstance(sections, list) or not sections:
        raise SchemaViolationError("analysis")

    validated: list[AnalysisSection] = []
    for index, section in enumerate(sections):
        if not isinstance(section, dict):
            raise SchemaViolationError(f"analysis[{index}]")
        title = section.get("title")
        if not isinstance(title, str) or not title.strip():
            raise SchemaViolationError(f"analysis[{index}].title")
        content = section.get("content")
        if isinstance(content, list):
            if not all(isinstance(item, str) for item in content):
                raise SchemaViolationError(f"analysis[{index}].content")
        elif not isinstance(content, str):
            raise SchemaViolationError(f"analysis[{index}].content")
        validated.append(AnalysisSection(title=title.strip(), content=content))

    return OptimizationReport(analysis=validated)
