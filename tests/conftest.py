"""Global test fixtures."""

import logfire
import pytest

# Must happen before calepin.application.api.rest.app is imported
logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep the developer's secret, config file and cache out of the tests."""
    for name in ("NOTION_SECRET", "VITE_NOTION_SECRET", "CALEPIN_CONFIG_FILE", "CALEPIN_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CALEPIN_DATA_DIR", str(tmp_path / "calepin"))
