from pathlib import Path

import pytest

from src.platform.config.core_setting import Settings


EXAMPLE_ENV_FILE = Path(__file__).resolve().parents[3] / '.env.example'


@pytest.mark.unit
class TestCorsOrigins:
    def test_comma_separated_env_value_is_split(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv('BACKEND_CORS_ORIGINS', 'http://localhost:3000, https://box.example.com')

        settings = Settings()

        assert settings.BACKEND_CORS_ORIGINS == [
            'http://localhost:3000',
            'https://box.example.com',
        ]

    def test_single_origin_env_value_loads(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv('BACKEND_CORS_ORIGINS', 'http://localhost:3000')

        assert Settings().BACKEND_CORS_ORIGINS == ['http://localhost:3000']

    def test_json_list_env_value_is_parsed(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv('BACKEND_CORS_ORIGINS', '["http://a.example.com", "http://b.example.com"]')

        assert Settings().BACKEND_CORS_ORIGINS == ['http://a.example.com', 'http://b.example.com']

    def test_list_passed_directly_is_kept(self) -> None:
        settings = Settings(BACKEND_CORS_ORIGINS=['http://localhost:5173'])

        assert settings.BACKEND_CORS_ORIGINS == ['http://localhost:5173']

    def test_example_env_file_loads(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv('BACKEND_CORS_ORIGINS', raising=False)

        settings = Settings(_env_file=EXAMPLE_ENV_FILE)  # type: ignore[call-arg]

        assert settings.BACKEND_CORS_ORIGINS == ['http://localhost:3000']
