from zoneinfo import ZoneInfo

from rechnung.settings import settings

LOCAL_TZ = ZoneInfo(settings.timezone)

DATA_VERSION = "v3"

SETTINGS_KEY = "invoice-app-settings"
INVOICES_KEY = "invoice-app-invoices"
CLIENTS_KEY = "invoice-app-clients"
VERSION_KEY = "invoice-app-version"

DATA_KEYS = (SETTINGS_KEY, INVOICES_KEY, CLIENTS_KEY)

STANDARD_VAT_RATE = 19

KLEINUNTERNEHMER_NOTICE = "Gemäß § 19 UStG wird keine Umsatzsteuer berechnet."

UNIT_LABELS = {
    "Tage": "Tage (days)",
    "Stunden": "Stunden (hours)",
    "Stück": "Stück (pieces)",
    "Pauschal": "Pauschal (flat rate)",
}

STATUS_LABELS = {
    "draft": "Entwurf",
    "pending": "Offen",
    "paid": "Bezahlt",
    "overdue": "Überfällig",
}

STATUS_STYLES = {
    "draft": "dim",
    "pending": "yellow",
    "paid": "green",
    "overdue": "red bold",
}
