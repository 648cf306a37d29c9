"""
Real HTTP integration clients.

These clients talk to real EOR provider quote endpoints over HTTP.

Important:
- Must expose the same ``create_quote(payload)`` coroutine as the mock clients
- Must return the provider's raw response; normalization happens in
  src/integrations/policy/response_wrappers.py

Switching:
The selection of mock vs real clients happens in src/quotes/engine.py only.
"""
