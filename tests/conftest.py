from pathlib import Path

import pytest

from apishape_app.providers import StaticProvider

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture()
def fixture_path() -> Path:
    return FIXTURES


@pytest.fixture()
def produce_provider() -> StaticProvider:
    return StaticProvider(
        {
            "veg/v1": ["Potato", "Carrot", "Lettuce"],
            "fruit/v1": ["Apple", "Banana", "Pear"],
        }
    )


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "APISHAPE_SERVER",
        "APISHAPE_TOKEN",
        "APISHAPE_CA_BUNDLE",
        "APISHAPE_INSECURE",
        "APISHAPE_TIMEOUT",
        "APISHAPE_RETRIES",
        "APISHAPE_KIND",
        "APISHAPE_CANDIDATES",
    ):
        monkeypatch.delenv(key, raising=False)
