"""
Mock integration clients.

These clients return fake (but realistic) responses without calling the
PayPay API. They are used when:
- PayPay credentials are not available yet
- We want to test the mobile flow end-to-end without external dependencies

Important:
- Mock clients must follow the SAME PaymentGateway interface as the live one.
- Mock clients should return data shaped according to src/integrations/contracts/*

Switching to real:
Unset PAYPAY_MOCK_MODE and provide credentials; src/api/main.py then wires the
LiveGateway from clients/real_http/payments.py instead.
"""
