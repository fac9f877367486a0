"""
Pydantic models used by the interview runtime.

Split into:
- session_models: Session + transcript entries + SessionStatus + results
- api_models: HTTP request/response envelopes
"""
