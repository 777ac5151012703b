import pytest

from peerless.domain.config import Config, ConfigError, is_valid_hostname


def test_config_defaults_valid():
    config = Config().validate()

    assert config.host == "localhost"
    assert config.port == 9091
    assert config.rpc_url == "http://localhost:9091/transmission/rpc"


def test_config_host_trimmed():
    config = Config(host="  nas.local ").validate()

    assert config.host == "nas.local"


def test_config_ipv6_url():
    config = Config(host="::1").validate()

    assert config.rpc_url == "http://[::1]:9091/transmission/rpc"


@pytest.mark.parametrize(
    "host,message",
    [
        ("", "host is required"),
        ("   ", "host cannot be empty or whitespace"),
        ("bad host", "host must be a valid IP address or hostname"),
        ("a..b", "host must be a valid IP address or hostname"),
        ("-leading", "host must be a valid IP address or hostname"),
    ],
)
def test_config_invalid_host(host, message):
    with pytest.raises(ConfigError) as e:
        Config(host=host).validate()

    assert [error.message for error in e.value.errors] == [message]


@pytest.mark.parametrize("port", [0, 65536, -1])
def test_config_invalid_port(port):
    with pytest.raises(ConfigError) as e:
        Config(port=port).validate()

    assert str(e.value) == f"port: port must be between 1 and 65535, got {port}"


def test_config_user_without_password():
    with pytest.raises(ConfigError) as e:
        Config(user="admin").validate()

    assert str(e.value) == "password: password is required when username is provided"


def test_config_weak_password():
    with pytest.raises(ConfigError) as e:
        Config(user="me", password="Admin").validate()

    assert str(e.value) == "password: weak password detected: 'admin' should not be used"


def test_config_duplicate_dirs():
    with pytest.raises(ConfigError) as e:
        Config(dirs=["/a", "/b", "/a"]).validate()

    assert str(e.value) == "dirs: duplicate directory: /a"


def test_config_collects_all_errors():
    with pytest.raises(ConfigError) as e:
        Config(host="", port=0, user="me").validate()

    assert [error.field for error in e.value.errors] == ["host", "port", "password"]


def test_is_valid_hostname():
    assert is_valid_hostname("my-host.example.com")
    assert not is_valid_hostname("trailing-")
    assert not is_valid_hostname("a" * 254)
