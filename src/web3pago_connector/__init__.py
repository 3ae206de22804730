"""Web3Pago payment connector.

Bridges a checkout platform speaking the Payment Provider Protocol and the
Web3Pago processor:
- Flow classification and simulated authorization outcomes
- Pending payment-app transactions reconciled through approve/deny webhooks
- FastAPI surface, SQL-backed key-value store and operational CLI
"""

__version__ = "0.1.0"
