"""Constants for the reservation backend."""

LOGIN_ENDPOINT = "/api/auth/login"
ME_ENDPOINT = "/api/auth/me"
RESERVATIONS_ENDPOINT = "/api/reservations"
MY_RESERVATIONS_ENDPOINT = "/api/reservations/my"
TRANSPORT_ENDPOINT = "/api/camps/{camp_id}/properties/{property_id}/transport"
TRANSPORT_CITIES_ENDPOINT = "/api/camps/{camp_id}/properties/{property_id}/transport/cities"

CONTRACT_ENDPOINT = "/api/contracts/{reservation_id}"
CONTRACT_GENERATE_ENDPOINT = "/api/contracts/{reservation_id}/generate"
RESERVATION_INVOICES_ENDPOINT = "/api/invoices/reservation/{reservation_id}"
INVOICE_PDF_ENDPOINT = "/api/invoices/{invoice_id}/pdf"
QUALIFICATION_CARD_ENDPOINT = "/api/qualification-cards/{card_id}/download"
QUALIFICATION_CARD_UPLOAD_ENDPOINT = "/api/qualification-cards/upload"
RESERVATION_PAYMENTS_ENDPOINT = "/api/manual-payments/reservation/{reservation_id}"
PAYMENT_UPLOAD_ENDPOINT = "/api/manual-payments/{payment_id}/upload"

TOKEN_KEY = "radsasfun_auth_token"
USER_KEY = "radsasfun_auth_user"

DEFAULT_PAGE_SIZE = 100

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "pycampreservation",
}

SESSION_EXPIRED_MESSAGE = "Sesja wygasła. Zaloguj się ponownie."
NETWORK_ERROR_MESSAGE = "Nie udało się połączyć z serwerem. Spróbuj ponownie."
SUBMIT_FAILED_MESSAGE = "Nie udało się utworzyć rezerwacji."
