"""Unit tests for the uvicorn entry point."""

import pytest
from pytest_mock import MockerFixture, MockType

import main
from complia.core.config import Settings


@pytest.fixture
def mock_uvicorn(
    mocker: MockerFixture, mock_settings: Settings, monkeypatch: pytest.MonkeyPatch
) -> MockType:
    monkeypatch.delenv("PORT", raising=False)
    mocker.patch("main.get_settings", return_value=mock_settings)
    mocker.patch("main.setup_logging")
    return mocker.patch("main.uvicorn.run")


@pytest.mark.unit
class TestMain:
    """Test suite for main()."""

    def test_runs_app_factory(self, mock_uvicorn: MockType) -> None:
        """Test that uvicorn runs the app factory."""
        main.main()

        args, kwargs = mock_uvicorn.call_args
        assert args == ("complia.api.main:create_app",)
        assert kwargs["factory"] is True
        assert kwargs["reload"] is False
        assert kwargs["port"] == 8000

    def test_port_env_overrides_settings(
        self, mock_uvicorn: MockType, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that the PORT variable overrides the settings port."""
        monkeypatch.setenv("PORT", "9090")

        main.main()

        assert mock_uvicorn.call_args.kwargs["port"] == 9090

    def test_uvicorn_logs_are_intercepted(self, mock_uvicorn: MockType) -> None:
        """Test that uvicorn logs are routed through loguru."""
        main.main()

        log_config = mock_uvicorn.call_args.kwargs["log_config"]
        assert log_config["handlers"]["default"]["class"] == (
            "complia.core.logging.InterceptHandler"
        )
        assert set(log_config["loggers"]) == {"uvicorn", "uvicorn.error", "uvicorn.access"}
