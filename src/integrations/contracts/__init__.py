"""
Contracts (data models).

This folder defines the request/response shapes used at the provider boundary:
- Credential and the PaymentGateway interface (interfaces.py)
- Payment code payloads, resource paths and input validation (payments.py)

Both mock and live gateways use these contracts, so the API layer sees the same
shapes whichever implementation is wired in.
"""
