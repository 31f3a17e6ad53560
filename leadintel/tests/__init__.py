'''
Lead Intelligence Backend Test Suite

Test Modules:
-------------
- test_analysis_schema.py: Structured-output contract
  - Code-fence stripping
  - Empty / malformed / schema-violating completions
  - hasSignals and status consistency

- test_quota_ledger.py: asyncpg quota ledger against a mocked pool
  - Conditional increment and floored release
  - Missing or invalid profile rows and statement timeouts
  - Administrative reset / limit / VIP / listing

- test_analysis.py: AnalysisInvoker pipeline
  - Exhausted accounts never reach the model
  - Exactly one winner when racing for the last unit
  - Refunds on model failure and cancellation

- test_api.py: HTTP surface through TestClient
  - Status codes 200 / 400 / 401 / 402 / 403 / 500 and error bodies
  - Error bodies carry no internal detail
  - Health check and CORS preflight

- test_identity.py: Bearer-token verification (httpx.MockTransport)
- test_generative.py: Gemini request configuration and error mapping
- test_client_adapter.py: Caller-side error normalization and health check
- test_history.py: Capped, self-healing client history
- test_sources.py: Every module compiles without warnings

Running Tests:
--------------
    pip install -e ".[test]"
    pytest leadintel/tests/ -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []
