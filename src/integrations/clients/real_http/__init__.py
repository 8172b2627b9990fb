"""
Real HTTP integration clients.

These clients sign and forward calls to the PayPay API.

Important:
- Must implement the same PaymentGateway interface as the mock clients
- Must return data shaped according to src/integrations/contracts/*

Switching:
The selection of mock vs live gateway happens in src/api/main.py only.
"""
