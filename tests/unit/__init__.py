"""
Unit tests for Elelem.

Test individual components in isolation:
- JSON extraction and the validation stages
- Retry engine (attempt spans, backoff, permanent-failure short-circuit)
- Cache backends and fingerprints
- Provider clients (mock HTTP transport) and cost tables
- Generate, action and session pipeline (mock provider, in-memory spans)
"""
