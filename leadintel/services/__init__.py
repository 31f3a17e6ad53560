"""
Lead Intelligence Services Module

Business logic for the analysis path. Each service receives its collaborators
through its constructor and holds no module-level clients.

Services:
- analysis_schema: structured-output contract, fence stripping, validation
- quota_ledger: per-principal usage quota on the profiles table
- identity: bearer-token verification against the identity provider
- generative: schema-constrained Gemini completions
- analysis: the quota-gated invoker tying the above together
"""

from leadintel.services.analysis_schema import (
    SYSTEM_INSTRUCTION,
    RESPONSE_SCHEMA,
    SchemaCheck,
    build_user_prompt,
    strip_code_fences,
    validate_analysis_payload,
    parse_model_completion,
)

from leadintel.services.quota_ledger import (
    QuotaLedger,
    admit,
)

from leadintel.services.identity import (
    IdentityVerifier,
    Principal,
    extract_bearer_token,
)

from leadintel.services.generative import (
    GeminiBackend,
    permissive_safety_settings,
)

from leadintel.services.analysis import AnalysisInvoker


__all__ = [
    'SYSTEM_INSTRUCTION',
    'RESPONSE_SCHEMA',
    'SchemaCheck',
    'build_user_prompt',
    'strip_code_fences',
    'validate_analysis_payload',
    'parse_model_completion',
    'QuotaLedger',
    'admit',
    'IdentityVerifier',
    'Principal',
    'extract_bearer_token',
    'GeminiBackend',
    'permissive_safety_settings',
    'AnalysisInvoker',
]
