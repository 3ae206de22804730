"""Flow configuration.

Explicit, immutable configuration for flow classification and the
responses flows produce.

Rules:
    1. No env vars here. The service layer maps settings onto this object.
    2. Immutable after creation (frozen dataclass).
    3. Validated on construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FlowConfig:
    """
    Flow behavior configuration.

    Attributes:
        app_name: Payment app that renders payment-app pending responses.
        callback_base_url: Public base URL of this connector. Approve/deny
            links handed to the payment app are built from it.
        external_app_payment_methods: Payment methods routed to the
            payment app. Default is the deferred-invoice method.
        external_app_custom_codes: Custom payment method codes routed to
            the payment app.
        bank_invoice_payment_method: Payment method that identifies a bank
            invoice authorization.
        async_delay_to_cancel_ms: Cancellation hint for async, redirect and
            bank invoice pending responses.
        payment_app_delay_to_cancel_ms: Cancellation hint for payment-app
            pending responses. Long, since a person has to act.
        checkout_url_base: Base of generated redirect and invoice URLs.
        default_currency: Currency reported when the request omits one.
        crypto_currency: Settlement asset advertised to the payment app.
        network_id: Chain id advertised to the payment app.
        wallet_address: Receiving wallet advertised to the payment app.
    """

    app_name: str = "web3pago.payment-app"
    callback_base_url: str = "http://localhost:8000"
    external_app_payment_methods: frozenset[str] = field(
        default_factory=lambda: frozenset({"Promissories"})
    )
    external_app_custom_codes: frozenset[str] = field(
        default_factory=lambda: frozenset({"Web3Pago", "ExternalApp"})
    )
    bank_invoice_payment_method: str = "BankInvoice"
    async_delay_to_cancel_ms: int = 1000
    payment_app_delay_to_cancel_ms: int = 300_000
    checkout_url_base: str = "https://web3pago.example.com/checkout"
    default_currency: str = "USD"
    crypto_currency: str = "ETH"
    network_id: str = "1"
    wallet_address: str = ""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.app_name:
            raise ValueError("app_name is required")
        if not self.callback_base_url.startswith(("http://", "https://")):
            raise ValueError("callback_base_url must be an http(s) URL")
        if self.async_delay_to_cancel_ms < 1:
            raise ValueError("async_delay_to_cancel_ms must be positive")
        if self.payment_app_delay_to_cancel_ms < 1:
            raise ValueError("payment_app_delay_to_cancel_ms must be positive")

    def approve_url(self, correlation_id: str) -> str:
        return f"{self.callback_base_url.rstrip('/')}/approve-payment/{correlation_id}"

    def deny_url(self, correlation_id: str) -> str:
        return f"{self.callback_base_url.rstrip('/')}/deny-payment/{correlation_id}"
