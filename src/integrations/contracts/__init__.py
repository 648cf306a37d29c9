"""
Contracts (data models).

This folder defines the shapes shared by the quote engine and its provider
integrations:
- country rate tables and provider adjustment specs
- cost breakdowns, async contracts and quote records

Why this exists:
- Ensures consistent data structures across mock and real provider clients
- Prevents "guessing" payload formats in multiple places
- Lets the engine rely on stable models, not on ad-hoc dicts

Both mock and real HTTP clients should use these contracts.
"""
