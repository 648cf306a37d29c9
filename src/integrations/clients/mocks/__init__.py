"""
Mock integration clients.

These clients return fake (but internally consistent) provider quotes without
calling any external API. They are used when:
- provider sandbox APIs are not available
- we want to test comparisons end-to-end without external dependencies

Important:
- Mock clients must follow the SAME interface as real HTTP clients.
- Mock clients return provider-shaped responses built from src/integrations/contracts/*

Switching to real:
Set INTEGRATIONS_MODE=real and EOR_<PROVIDER>_API_URL to use
clients/real_http/* implementations instead.
"""
