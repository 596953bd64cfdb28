import pytest

from rechnung.cli.app import AppServices
from rechnung.services.client_service import ClientService
from rechnung.services.data_service import DataService
from rechnung.services.document_service import DocumentService
from rechnung.services.invoice_service import InvoiceService
from rechnung.services.settings_service import SettingsService


@pytest.fixture()
def services(gateway, tmp_path, sample_settings) -> AppServices:
    app_services = AppServices(
        invoices=InvoiceService(gateway),
        clients=ClientService(gateway),
        settings=SettingsService(gateway),
        data=DataService(gateway),
        documents=DocumentService(str(tmp_path / "invoices")),
    )
    app_services.settings.update(sample_settings)
    return app_services
