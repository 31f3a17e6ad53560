"""
Structured-output contract shared with the generative model.

The same contract is used twice:
- RESPONSE_SCHEMA is sent to the model as its response-format constraint
- validate_analysis_payload() checks what came back before it is trusted

The schema is advisory to the model, so parsing fails closed: fenced or empty
completions, invalid JSON, wrong types, missing fields and inconsistent
hasSignals flags are all rejected.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from leadintel.core.exceptions import (
    EmptyModelResponseError,
    MalformedModelResponseError,
    SchemaViolationError,
)
from leadintel.models.enums import Tier1Status, Tier2Status
from leadintel.models.schemas import AnalysisResult


# =============================================================================
# Model instructions
# =============================================================================

SYSTEM_INSTRUCTION: str = f"""
You are an Executive Search Intelligence Analyst. Your task is to analyze the provided merged web content related to a target lead. Only focus on **executive-level** insights (VP and above).

Adhere strictly to these rules for extraction:

1. **Immediate Executive Search Triggers (Tier 1 Signals):**
   - News in last 12 months: C-Suite appointments/departures, succession planning.
   - News in last 12 months: Major M&A, Funding, IPOs, Activist investor pressure.
   - News in last 12 months: Major restructuring, reorganization, layoffs affecting leadership.
   - Logic: If found, status is "{Tier1Status.URGENT.value}". Otherwise status is "{Tier1Status.NONE.value}" and items is empty.

2. **Strategic Growth & Future Roles (Tier 2 Signals):**
   - News in last 12 months: New market entries, Digital/ESG transformation, New regional HQ.
   - News in last 12 months: Hiring for "Head of", "Global", "President", "GM".
   - Logic: If found, status is "{Tier2Status.FUTURE_OPPORTUNITY.value}". Otherwise status is "{Tier2Status.NONE.value}" and items is empty.

3. **Actionable Executive Search Insight:**
   - Synthesize a concise, single-paragraph pitch angle based on the above.
   - State WHAT role is needed and WHY based on facts.
   - If there is not enough information, say so briefly and set hasSignals to false.

Set every hasSignals flag to true only when the matching items (or insight content) carry real signals.
""".strip()


def build_user_prompt(content_text: str) -> str:
    return f"Analyze this content:\n\n{content_text}"


# =============================================================================
# Response schema (OpenAPI subset understood by the Gemini API)
# =============================================================================

def _tier_schema(status_values: List[str]) -> Dict[str, Any]:
    return {
        "type": "OBJECT",
        "properties": {
            "status": {"type": "STRING", "enum": status_values},
            "items": {"type": "ARRAY", "items": {"type": "STRING"}},
            "hasSignals": {"type": "BOOLEAN"},
        },
        "required": ["status", "items", "hasSignals"],
    }


RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "tier1": _tier_schema([s.value for s in Tier1Status]),
        "tier2": _tier_schema([s.value for s in Tier2Status]),
        "insight": {
            "type": "OBJECT",
            "properties": {
                "content": {"type": "STRING"},
                "hasSignals": {"type": "BOOLEAN"},
            },
            "required": ["content", "hasSignals"],
        },
    },
    "required": ["tier1", "tier2", "insight"],
}


# =============================================================================
# Extraction and validation
# =============================================================================

# ```json ... ``` (language tag optional), anchored to the whole completion
_FENCE_RE = re.compile(r"^```[\w-]*[ \t]*\r?\n?(?P<body>.*?)\r?\n?```$", re.DOTALL)


def strip_code_fences(raw: str) -> str:
    """Remove a single enclosing triple-backtick fence, if present."""
    text = raw.strip()
    match = _FENCE_RE.match(text)
    if match:
        return match.group("body").strip()
    return text


@dataclass(frozen=True)
class SchemaCheck:
    """
    Tagged outcome of validating a parsed payload.

    Exactly one of `result` / `violations` is meaningful: `ok` is True iff
    `result` is set.
    """
    result: Optional[AnalysisResult] = None
    violations: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.result is not None


def _describe(error: Dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
    return f"{location}: {error.get('msg', 'invalid')}"


def validate_analysis_payload(payload: Any) -> SchemaCheck:
    """
    Check a parsed JSON payload against the AnalysisResult contract.

    Never raises; schema problems are reported as violations.
    """
    if not isinstance(payload, dict):
        return SchemaCheck(violations=[f"<root>: expected object, got {type(payload).__name__}"])
    try:
        return SchemaCheck(result=AnalysisResult.model_validate(payload))
    except ValidationError as e:
        return SchemaCheck(violations=[_describe(err) for err in e.errors()])


def parse_model_completion(raw: Optional[str]) -> AnalysisResult:
    """
    Turn a raw model completion into a validated AnalysisResult.

    Raises:
        EmptyModelResponseError: The completion is empty or whitespace (also
            after removing a code fence).
        MalformedModelResponseError: The completion is not valid JSON.
        SchemaViolationError: Valid JSON that does not satisfy the contract.
    """
    if raw is None or not raw.strip():
        raise EmptyModelResponseError()

    text = strip_code_fences(raw)
    if not text:
        raise EmptyModelResponseError("AI returned an empty code fence")

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedModelResponseError(f"AI response is not valid JSON: {e.msg}")

    check = validate_analysis_payload(payload)
    if not check.ok:
        raise SchemaViolationError(
            "AI response did not match the analysis schema: " + "; ".join(check.violations)
        )
    return check.result
