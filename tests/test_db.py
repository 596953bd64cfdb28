from unittest.mock import MagicMock, patch

import rechnung.db as db_module


class TestGetEngine:
    def test_creates_engine(self, monkeypatch):
        monkeypatch.setattr(db_module, "_engine", None)
        with patch.object(db_module, "settings") as mock_settings:
            mock_settings.db_url = "sqlite:///:memory:"
            engine = db_module.get_engine()
            assert engine is not None
            assert db_module._engine is engine

    def test_returns_cached_engine(self, monkeypatch):
        sentinel = MagicMock()
        monkeypatch.setattr(db_module, "_engine", sentinel)
        assert db_module.get_engine() is sentinel


class TestGetConnection:
    def test_connection_is_reused(self, monkeypatch):
        engine = MagicMock()
        monkeypatch.setattr(db_module, "_engine", engine)
        monkeypatch.setattr(db_module, "_connection", None)

        first = db_module.get_connection()
        second = db_module.get_connection()

        assert first is second
        engine.connect.assert_called_once()
