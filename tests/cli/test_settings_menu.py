import json
from unittest.mock import patch

from rechnung.constants import CLIENTS_KEY


class TestSettingsMenu:
    @patch("rechnung.cli.settings_menu.ask_int")
    @patch("rechnung.cli.settings_menu.questionary")
    def test_edit_preferences(self, mock_q, mock_ask_int, services):
        from rechnung.cli.settings_menu import settings_menu

        mock_q.select.return_value.ask.side_effect = ["Voreinstellungen bearbeiten", "Zurück"]
        mock_q.confirm.return_value.ask.return_value = False
        mock_q.text.return_value.ask.return_value = "RE-"
        mock_ask_int.side_effect = [30, 5]

        settings_menu(services)

        prefs = services.settings.get().preferences
        assert prefs.default_payment_terms == 30
        assert prefs.is_kleinunternehmer is False
        assert prefs.invoice_prefix == "RE-"
        assert prefs.starting_invoice_number == 5

    @patch("rechnung.cli.settings_menu.questionary")
    def test_edit_bank_strips_iban_spaces(self, mock_q, services):
        from rechnung.cli.settings_menu import settings_menu

        mock_q.select.return_value.ask.side_effect = ["Bankverbindung bearbeiten", "Zurück"]
        mock_q.text.return_value.ask.side_effect = ["Erika Muster", "GLS Bank", "DE02 4306 0967 1234 5678 00", "GENODEM1GLS"]

        settings_menu(services)

        bank = services.settings.get().bank_details
        assert bank.iban == "DE02430609671234567800"
        assert bank.bank_name == "GLS Bank"

    @patch("rechnung.cli.settings_menu.questionary")
    def test_reset_requires_confirmation(self, mock_q, services):
        from rechnung.cli.settings_menu import settings_menu

        mock_q.select.return_value.ask.side_effect = ["Auf Standard zurücksetzen", "Zurück"]
        mock_q.confirm.return_value.ask.return_value = False

        settings_menu(services)
        assert services.settings.get().name == "Max Mustermann"

    @patch("rechnung.cli.settings_menu.questionary")
    def test_reset(self, mock_q, services):
        from rechnung.cli.settings_menu import settings_menu

        mock_q.select.return_value.ask.side_effect = ["Auf Standard zurücksetzen", "Zurück"]
        mock_q.confirm.return_value.ask.return_value = True

        settings_menu(services)
        assert services.settings.get().name == ""


class TestDataMenu:
    @patch("rechnung.cli.settings_menu.questionary")
    def test_export(self, mock_q, services, sample_client, tmp_path):
        from rechnung.cli.settings_menu import data_menu

        services.clients.add(sample_client)
        target = tmp_path / "backup.json"
        mock_q.select.return_value.ask.return_value = "Exportieren"
        mock_q.text.return_value.ask.return_value = str(target)

        data_menu(services)

        data = json.loads(target.read_text(encoding="utf-8"))
        assert data["clients"][0]["name"] == "Acme GmbH"

    @patch("rechnung.cli.settings_menu.questionary")
    def test_export_to_missing_directory_is_reported(self, mock_q, services, tmp_path):
        from rechnung.cli.settings_menu import data_menu

        target = tmp_path / "missing" / "backup.json"
        mock_q.select.return_value.ask.return_value = "Exportieren"
        mock_q.text.return_value.ask.return_value = str(target)

        data_menu(services)

        assert not target.exists()

    @patch("rechnung.cli.settings_menu.questionary")
    def test_import_reloads_services(self, mock_q, services, tmp_path):
        from rechnung.cli.settings_menu import data_menu

        source = tmp_path / "import.json"
        source.write_text(json.dumps({"clients": [{"id": "c-1", "name": "Import GmbH"}]}), encoding="utf-8")
        mock_q.select.return_value.ask.return_value = "Importieren"
        mock_q.path.return_value.ask.return_value = str(source)
        mock_q.confirm.return_value.ask.return_value = True

        data_menu(services)

        assert [c.name for c in services.clients.list()] == ["Import GmbH"]

    @patch("rechnung.cli.settings_menu.questionary")
    def test_import_invalid_file_changes_nothing(self, mock_q, services, gateway, sample_client, tmp_path):
        from rechnung.cli.settings_menu import data_menu

        services.clients.add(sample_client)
        source = tmp_path / "import.json"
        source.write_text("not json", encoding="utf-8")
        mock_q.select.return_value.ask.return_value = "Importieren"
        mock_q.path.return_value.ask.return_value = str(source)
        mock_q.confirm.return_value.ask.return_value = True

        data_menu(services)

        assert gateway.get(CLIENTS_KEY)[0]["name"] == "Acme GmbH"

    @patch("rechnung.cli.settings_menu.questionary")
    def test_import_missing_file(self, mock_q, services, tmp_path):
        from rechnung.cli.settings_menu import data_menu

        mock_q.select.return_value.ask.return_value = "Importieren"
        mock_q.path.return_value.ask.return_value = str(tmp_path / "nope.json")

        data_menu(services)
        mock_q.confirm.assert_not_called()

    @patch("rechnung.cli.settings_menu.questionary")
    def test_clear(self, mock_q, services, sample_client):
        from rechnung.cli.settings_menu import data_menu

        services.clients.add(sample_client)
        mock_q.select.return_value.ask.return_value = "Alle Daten löschen"
        mock_q.confirm.return_value.ask.return_value = True

        data_menu(services)

        assert services.clients.list() == []
        assert services.settings.get().name == ""
