import pytest

from main import parse_args


def test_default_port():
    assert parse_args([]).port == 1401


def test_port_argument():
    assert parse_args(["8081"]).port == 8081


@pytest.mark.parametrize("value", ["abc", "-1", "70000"])
def test_invalid_port_exits_non_zero(value):
    with pytest.raises(SystemExit) as exc_info:
        parse_args([value])
    assert exc_info.value.code != 0


def test_module_level_app_serves_chat_and_health():
    from main import app

    paths = {route.path for route in app.routes}
    assert {"/chat", "/health"} <= paths
