"""Constantes del dominio de reservas hoteleras."""

# Endpoints del backend de proveedor (todas las llamadas son POST con JSON)
ENDPOINT_PREBOOK = "/api/ratehawk/prebook"
ENDPOINT_PREBOOK_MULTIROOM = "/api/ratehawk/prebook/multiroom"
ENDPOINT_ORDER_FORM = "/api/ratehawk/order/form"
ENDPOINT_ORDER_FORM_MULTIROOM = "/api/ratehawk/order/form/multiroom"
ENDPOINT_ORDER_FINISH = "/api/ratehawk/order/finish"
ENDPOINT_ORDER_FINISH_MULTIROOM = "/api/ratehawk/order/finish/multiroom"
ENDPOINT_ORDER_STATUS = "/api/ratehawk/order/status"
ENDPOINT_ORDER_INFO = "/api/ratehawk/order/info"
ENDPOINT_ORDERS_BATCH = "/api/ratehawk/order/info/batch"
ENDPOINT_ORDER_CANCEL = "/api/ratehawk/order/cancel"
ENDPOINT_ORDER_DOCUMENTS = "/api/ratehawk/order/documents"
ENDPOINT_VOUCHER_DOWNLOAD = "/api/ratehawk/order/document/voucher/download"
ENDPOINT_INVOICE_DOWNLOAD = "/api/ratehawk/order/document/invoice/download"
ENDPOINT_CONTRACT_DATA = "/api/ratehawk/contract/data"
ENDPOINT_FINANCIAL_INFO = "/api/ratehawk/financial/info"
ENDPOINT_CLOSING_DOCUMENTS = "/api/ratehawk/financial/closing-documents"

# Estados de orden
ORDER_STATUS_PROCESSING = "processing"
ORDER_STATUS_CONFIRMED = "confirmed"
ORDER_STATUS_FAILED = "failed"
ORDER_STATUS_CANCELLED = "cancelled"

TERMINAL_ORDER_STATUSES = frozenset(
    {ORDER_STATUS_CONFIRMED, ORDER_STATUS_FAILED, ORDER_STATUS_CANCELLED}
)

# Códigos de error de OrderForm
ERROR_DOUBLE_BOOKING_FORM = "double_booking_form"
ERROR_TIMEOUT = "timeout"
ERROR_UNKNOWN = "unknown"

ORDER_FORM_TERMINAL_ERRORS = frozenset(
    {
        "contract_mismatch",
        "duplicate_reservation",
        "hotel_not_found",
        "insufficient_b2b_balance",
        "reservation_is_not_allowed",
        "rate_not_found",
        "sandbox_restriction",
    }
)
RETRYABLE_ERRORS = frozenset({ERROR_TIMEOUT, ERROR_UNKNOWN})

# Fallos finales reportados durante el procesamiento de la orden
FINAL_BOOKING_FAILURE_ERRORS = frozenset(
    {
        "3ds",
        "block",
        "book_limit",
        "booking_finish_did_not_succeed",
        "charge",
        "soldout",
        "provider",
        "not_allowed",
    }
)

# Códigos de error generados localmente por el transporte HTTP
TRANSPORT_NETWORK_ERROR = "network_error"
TRANSPORT_HTTP_ERROR = "http_error"
TRANSPORT_INVALID_RESPONSE = "invalid_response"
TRANSPORT_CIRCUIT_OPEN = "circuit_open"

# Error del proveedor sin código: no es reintentable
SUPPLIER_ERROR = "supplier_error"

DEFAULT_PRICE_INCREASE_PERCENT = 20

DEMO_ORDER_PREFIXES = ("demo-", "DEMO-")
