from unittest.mock import patch

from freezegun import freeze_time

from rechnung.cli.invoice_menu import (
    ADD_ITEM,
    CHANGE_ITEM,
    FILTER_INVOICES,
    ITEMS_DONE,
    REMOVE_ITEM,
    SAVE_AND_EXPORT,
    SAVE_DRAFT,
    SAVE_PENDING,
    SORT_INVOICES,
)
from rechnung.models.business_settings import BusinessSettings
from rechnung.models.invoice import InvoiceStatus
from rechnung.services.stats import filter_invoices


class TestShowDashboard:
    @freeze_time("2025-01-10")
    def test_runs_with_invoices(self, services, sample_invoice):
        from rechnung.cli.invoice_menu import show_dashboard

        services.invoices.add(sample_invoice)
        show_dashboard(services)

    def test_runs_empty(self, services):
        from rechnung.cli.invoice_menu import show_dashboard

        show_dashboard(services)


class TestListInvoicesMenu:
    @patch("rechnung.cli.invoice_menu.questionary")
    def test_empty_returns(self, mock_q, services):
        from rechnung.cli.invoice_menu import list_invoices_menu

        list_invoices_menu(services)
        mock_q.select.assert_not_called()

    @patch("rechnung.cli.invoice_menu._invoice_detail_menu")
    @patch("rechnung.cli.invoice_menu.questionary")
    def test_select_opens_detail(self, mock_q, mock_detail, services, sample_invoice):
        from rechnung.cli.invoice_menu import list_invoices_menu

        services.invoices.add(sample_invoice)
        mock_q.select.return_value.ask.side_effect = ["1. 2025-001 - Acme GmbH (100,00 €)", "Zurück"]

        list_invoices_menu(services)
        mock_detail.assert_called_once_with("inv-1", services)

    @patch("rechnung.cli.invoice_menu.filter_invoices", wraps=filter_invoices)
    @patch("rechnung.cli.invoice_menu.questionary")
    def test_filter_and_sort_are_applied(self, mock_q, mock_filter, services, sample_invoice):
        from rechnung.cli.invoice_menu import list_invoices_menu

        services.invoices.add(sample_invoice)
        mock_q.select.return_value.ask.side_effect = [FILTER_INVOICES, "paid", SORT_INVOICES, "amount", "Zurück"]
        mock_q.text.return_value.ask.return_value = "acme"
        mock_q.confirm.return_value.ask.return_value = True

        list_invoices_menu(services)

        assert mock_filter.call_args_list[1].args[1:] == ("acme", InvoiceStatus.PAID, "date", "desc")
        assert mock_filter.call_args_list[2].args[1:] == ("acme", InvoiceStatus.PAID, "amount", "asc")


@freeze_time("2025-01-10")
class TestInvoiceDetailMenu:
    @patch("rechnung.cli.invoice_menu.questionary")
    def test_mark_as_paid_updates_client_total(self, mock_q, services, sample_client, sample_invoice):
        from rechnung.cli.invoice_menu import _invoice_detail_menu

        services.clients.add(sample_client)
        services.invoices.add(sample_invoice)
        mock_q.select.return_value.ask.side_effect = ["Als bezahlt markieren", "Zurück"]

        _invoice_detail_menu("inv-1", services)

        invoice = services.invoices.get("inv-1")
        assert invoice.status == InvoiceStatus.PAID
        assert invoice.paid_date == "2025-01-10"
        assert services.clients.get(sample_client.id).total_invoiced == 100.0

    @patch("rechnung.cli.invoice_menu.questionary")
    def test_paid_invoice_offers_no_mark_as_paid(self, mock_q, services, make_invoice):
        from rechnung.cli.invoice_menu import _invoice_detail_menu

        services.invoices.add(make_invoice(status=InvoiceStatus.PAID, paid_date="2025-01-08"))
        mock_q.select.return_value.ask.return_value = "Zurück"

        _invoice_detail_menu("inv-1", services)
        choices = mock_q.select.call_args.kwargs["choices"]
        assert "Als bezahlt markieren" not in choices

    @patch("rechnung.cli.invoice_menu.questionary")
    def test_delete(self, mock_q, services, sample_invoice):
        from rechnung.cli.invoice_menu import _invoice_detail_menu

        services.invoices.add(sample_invoice)
        mock_q.select.return_value.ask.return_value = "Löschen"
        mock_q.confirm.return_value.ask.return_value = True

        _invoice_detail_menu("inv-1", services)
        assert services.invoices.list() == []

    @patch("rechnung.cli.invoice_menu.questionary")
    def test_export_pdf(self, mock_q, services, sample_invoice, tmp_path):
        from rechnung.cli.invoice_menu import _invoice_detail_menu

        services.invoices.add(sample_invoice)
        mock_q.select.return_value.ask.side_effect = ["PDF exportieren", "Zurück"]

        _invoice_detail_menu("inv-1", services)
        assert (tmp_path / "invoices" / "Rechnung-2025-001-06-01-2025.pdf").exists()

    def test_missing_invoice(self, services):
        from rechnung.cli.invoice_menu import _invoice_detail_menu

        _invoice_detail_menu("missing", services)


class TestEditLineItems:
    @patch("rechnung.cli.invoice_menu.ask_amount", return_value=650.0)
    @patch("rechnung.cli.invoice_menu.ask_number", return_value=2.0)
    @patch("rechnung.cli.invoice_menu.questionary")
    def test_add_item(self, mock_q, mock_number, mock_amount):
        from rechnung.cli.invoice_menu import _edit_line_items

        mock_q.select.return_value.ask.side_effect = [ADD_ITEM, "Tage", ITEMS_DONE]
        mock_q.text.return_value.ask.side_effect = ["Entwicklung", ""]

        items = _edit_line_items([])

        assert len(items) == 1
        assert items[0].description == "Entwicklung"
        assert items[0].sub_description is None
        assert items[0].total == 1300.0

    @patch("rechnung.cli.invoice_menu.ask_amount", return_value=80.0)
    @patch("rechnung.cli.invoice_menu.ask_number", return_value=3.0)
    @patch("rechnung.cli.invoice_menu.questionary")
    def test_change_item_recomputes_total(self, mock_q, mock_number, mock_amount, make_item):
        from rechnung.cli.invoice_menu import _edit_line_items

        mock_q.select.return_value.ask.side_effect = [CHANGE_ITEM, "1. Beratung (100,00 €)", ITEMS_DONE]

        items = _edit_line_items([make_item()])

        assert items[0].id == "item-1"
        assert items[0].total == 240.0
        mock_amount.assert_called_once_with("  Einzelpreis:", default="100.00")

    @patch("rechnung.cli.invoice_menu.questionary")
    def test_remove_item(self, mock_q, make_item):
        from rechnung.cli.invoice_menu import _edit_line_items

        mock_q.select.return_value.ask.side_effect = [REMOVE_ITEM, "1. Beratung (100,00 €)", ITEMS_DONE]

        assert _edit_line_items([make_item()]) == []


@freeze_time("2025-01-06 12:00:00")
class TestInvoiceForm:
    @patch("rechnung.cli.invoice_menu.questionary")
    def test_requires_business_info(self, mock_q, services):
        from rechnung.cli.invoice_menu import invoice_form

        services.settings.update(BusinessSettings())

        assert invoice_form(services) is None
        mock_q.text.assert_not_called()

    def _fill_form(self, mock_q, action, client, item):
        mock_q.text.return_value.ask.side_effect = ["2025-001", "Danke!"]
        mock_q.confirm.return_value.ask.return_value = True
        mock_q.select.return_value.ask.return_value = action
        return [
            patch("rechnung.cli.invoice_menu.ask_date", side_effect=["2025-01-06", "2025-01-01", "2025-01-05"]),
            patch("rechnung.cli.invoice_menu.ask_int", return_value=14),
            patch("rechnung.cli.invoice_menu._select_client", return_value=client),
            patch("rechnung.cli.invoice_menu._edit_line_items", return_value=[item]),
        ]

    @patch("rechnung.cli.invoice_menu.questionary")
    def test_create_pending(self, mock_q, services, sample_client, make_item):
        from rechnung.cli.invoice_menu import invoice_form

        services.clients.add(sample_client)
        patches = self._fill_form(mock_q, SAVE_PENDING, sample_client, make_item())
        with patches[0], patches[1], patches[2], patches[3]:
            invoice = invoice_form(services)

        assert invoice.status == InvoiceStatus.PENDING
        assert invoice.total == 100.0
        assert invoice.vat_rate == 0
        assert invoice.service_period_start == "2025-01-01"
        assert invoice.due_date == "2025-01-20"
        assert invoice.notes == "Danke!"
        assert [inv.id for inv in services.invoices.list()] == [invoice.id]
        assert services.clients.get(sample_client.id).total_invoiced == 100.0

    @patch("rechnung.cli.invoice_menu.questionary")
    def test_create_draft(self, mock_q, services, sample_client, make_item):
        from rechnung.cli.invoice_menu import invoice_form

        services.clients.add(sample_client)
        patches = self._fill_form(mock_q, SAVE_DRAFT, sample_client, make_item())
        with patches[0], patches[1], patches[2], patches[3]:
            invoice = invoice_form(services)

        assert invoice.status == InvoiceStatus.DRAFT
        assert services.clients.get(sample_client.id).total_invoiced == 0.0

    @patch("rechnung.cli.invoice_menu.questionary")
    def test_save_and_export(self, mock_q, services, sample_client, make_item, tmp_path):
        from rechnung.cli.invoice_menu import invoice_form

        services.clients.add(sample_client)
        patches = self._fill_form(mock_q, SAVE_AND_EXPORT, sample_client, make_item())
        with patches[0], patches[1], patches[2], patches[3]:
            invoice_form(services)

        assert (tmp_path / "invoices" / "Rechnung-2025-001-06-01-2025.pdf").exists()

    @patch("rechnung.cli.invoice_menu.questionary")
    def test_edit_keeps_id(self, mock_q, services, sample_client, sample_invoice, make_item):
        from rechnung.cli.invoice_menu import invoice_form

        services.clients.add(sample_client)
        services.invoices.add(sample_invoice)
        patches = self._fill_form(mock_q, SAVE_PENDING, sample_client, make_item(quantity=2, total=200.0))
        with patches[0], patches[1], patches[2], patches[3]:
            invoice = invoice_form(services, existing=sample_invoice)

        assert invoice.id == sample_invoice.id
        assert invoice.total == 200.0
        assert len(services.invoices.list()) == 1

    @patch("rechnung.cli.invoice_menu.questionary")
    def test_paid_invoice_stays_paid(self, mock_q, services, sample_client, make_invoice, make_item):
        from rechnung.cli.invoice_menu import invoice_form

        services.clients.add(sample_client)
        paid = services.invoices.add(make_invoice(status=InvoiceStatus.PAID, paid_date="2025-01-08"))
        patches = self._fill_form(mock_q, SAVE_DRAFT, sample_client, make_item())
        with patches[0], patches[1], patches[2], patches[3]:
            invoice = invoice_form(services, existing=paid)

        offered = mock_q.select.call_args.kwargs["choices"]
        assert SAVE_DRAFT not in offered
        assert SAVE_PENDING not in offered
        assert invoice.status == InvoiceStatus.PAID
        assert services.invoices.get(paid.id).paid_date == "2025-01-08"

    @patch("rechnung.cli.invoice_menu.questionary")
    def test_discard(self, mock_q, services, sample_client, make_item):
        from rechnung.cli.invoice_menu import invoice_form

        patches = self._fill_form(mock_q, "Verwerfen", sample_client, make_item())
        with patches[0], patches[1], patches[2], patches[3]:
            assert invoice_form(services) is None
        assert services.invoices.list() == []
