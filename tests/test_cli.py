"""Tests for the command line entry point."""

import image_eater.__main__ as cli
from image_eater.config import get_settings
from image_eater.main import app


def test_main_serves_app_with_settings_from_config(tmp_path, monkeypatch):
    config_file = tmp_path / "service.toml"
    config_file.write_text(f'Port = 4321\nFilesDir = "{tmp_path}/images"\n')
    served = {}

    def _run(application, host, port):
        served.update(application=application, host=host, port=port)

    monkeypatch.setattr(cli.uvicorn, "run", _run)

    try:
        cli.main(["--config", str(config_file), "--host", "127.0.0.1"])

        assert served == {"application": app, "host": "127.0.0.1", "port": 4321}
        assert app.dependency_overrides[get_settings]().files_dir == f"{tmp_path}/images"
    finally:
        app.dependency_overrides.clear()


def test_parse_args_defaults():
    args = cli.parse_args([])

    assert args.config == "config.toml"
    assert args.host == "0.0.0.0"
