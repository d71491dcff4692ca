import logging

import pytest

from ovdkargs import __main__ as cli
from ovdkargs import config


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda level: None)


def test_main_reports_configuration(caplog):
    caplog.set_level(logging.INFO, logger="ovdkargs")
    assert cli.main(["ovdk", "-p", "3", "--stats_int", "2", "--stats_core", "1"]) == 0
    assert config.get_portmask() == 3
    assert "Ports in use: [0, 1]" in caplog.text
    assert "Printing stats every 2s on core 1" in caplog.text


def test_main_fails_on_bad_frame_size(capsys):
    assert cli.main(["ovdk", "-p", "1", "-J", "0"]) == 1
    captured = capsys.readouterr()
    assert "usage: ovdk" in captured.out
    assert "Invalid frame size" in captured.err


def test_main_exits_on_unknown_option(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["ovdk", "-z"])
    assert exc.value.code == 1
    assert "Invalid option '-z'" in capsys.readouterr().err
