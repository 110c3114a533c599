import pytest

from smartassist.client.api import ApiClient
from tools import assistant_cli


@pytest.fixture
def cli(client, monkeypatch):
    monkeypatch.setattr(ApiClient, "connect", classmethod(lambda cls, base_url, timeout=90.0: cls(client)))
    return assistant_cli.main


def test_stats_on_empty_account(cli, capsys):
    assert cli(["stats"]) == 0
    out = capsys.readouterr().out
    assert out.split("Devices:")[1].split()[0] == "0"


def test_add_device_then_list(cli, capsys):
    assert cli(["add-device", "--name", "Garage Freezer", "--type", "refrigerator", "--brand", "GE"]) == 0
    assert "* Device Added" in capsys.readouterr().out
    assert cli(["devices", "--search", "ge"]) == 0
    assert "Garage Freezer [refrigerator] GE" in capsys.readouterr().out


def test_technician_search(cli, capsys, technicians):
    assert cli(["technicians", "--city", "Oakland"]) == 0
    out = capsys.readouterr().out
    assert "Michael Johnson" in out
    assert "unavailable" in out


def test_failed_booking_exits_nonzero(cli, capsys, technicians):
    tid = technicians["sarah.chen@example.com"]
    code = cli(["book", tid, "--date", "2000-01-01", "--time", "9:00 AM",
                "--service-type", "repair", "--description", "Dryer squeaks"])
    assert code == 1
    assert "! Invalid Date" in capsys.readouterr().out


def test_one_shot_diagnose(cli, capsys, fake_ai):
    assert cli(["diagnose", "Fridge is not cooling"]) == 0
    out = capsys.readouterr().out
    assert "You: Fridge is not cooling" in out
    assert fake_ai.reply in out
