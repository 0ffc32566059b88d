"""
Unit tests for application settings.

Tests verify defaults, environment overrides and namecoin.conf parsing.
"""

from pathlib import Path

import pytest

from namereg.config.settings import (
    CONFIGFILE_VAR,
    DEFAULT_PORT_MAINNET,
    DEFAULT_PORT_TESTNET,
    Settings,
    default_namecoin_conf,
    read_namecoin_conf,
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep the real namecoin.conf and NAMEREG_* variables out of tests."""
    monkeypatch.setenv(CONFIGFILE_VAR, str(tmp_path / "missing.conf"))
    monkeypatch.chdir(tmp_path)
    for var in ("NAMEREG_RPC_HOST", "NAMEREG_RPC_PORT", "NAMEREG_RPC_USER", "NAMEREG_RPC_PASSWORD"):
        monkeypatch.delenv(var, raising=False)


def write_conf(path: Path, *lines: str) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


class TestReadNamecoinConf:
    """Tests for read_namecoin_conf()."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file yields no values."""
        assert read_namecoin_conf(tmp_path / "nope.conf") == {}

    def test_reads_rpc_keys(self, tmp_path: Path) -> None:
        """Known keys map to settings fields; others are ignored."""
        conf = write_conf(
            tmp_path / "namecoin.conf",
            "rpcuser=alice",
            "rpcpassword=s3cret=x",
            "rpcconnect=10.0.0.2",
            "rpcport=9000",
            "server=1",
            "# comment",
        )

        assert read_namecoin_conf(conf) == {
            "rpc_user": "alice",
            "rpc_password": "s3cret=x",
            "rpc_host": "10.0.0.2",
            "rpc_port": 9000,
        }

    def test_testnet_default_port(self, tmp_path: Path) -> None:
        """testnet=1 selects the testnet port."""
        conf = write_conf(tmp_path / "namecoin.conf", "testnet=1")

        assert read_namecoin_conf(conf) == {"rpc_port": DEFAULT_PORT_TESTNET}

    def test_explicit_port_beats_testnet(self, tmp_path: Path) -> None:
        """An rpcport line before testnet wins."""
        conf = write_conf(tmp_path / "namecoin.conf", "rpcport=9000", "testnet=1")

        assert read_namecoin_conf(conf) == {"rpc_port": 9000}

    def test_invalid_port_ignored(self, tmp_path: Path) -> None:
        """A malformed rpcport is skipped; other keys still apply."""
        conf = write_conf(tmp_path / "namecoin.conf", "rpcport=abc", "rpcuser=alice", "testnet=1")

        assert read_namecoin_conf(conf) == {"rpc_user": "alice", "rpc_port": DEFAULT_PORT_TESTNET}

    def test_invalid_port_keeps_settings_loadable(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """Settings still build with the default port."""
        conf = write_conf(tmp_path / "namecoin.conf", "rpcport=")
        monkeypatch.setenv(CONFIGFILE_VAR, str(conf))

        assert Settings().rpc_port == DEFAULT_PORT_MAINNET

    def test_testnet_zero_is_mainnet(self, tmp_path: Path) -> None:
        """testnet=0 keeps the mainnet port."""
        conf = write_conf(tmp_path / "namecoin.conf", "testnet=0")

        assert read_namecoin_conf(conf) == {"rpc_port": DEFAULT_PORT_MAINNET}


class TestDefaultConf:
    """Tests for default_namecoin_conf()."""

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The config file variable wins."""
        monkeypatch.setenv(CONFIGFILE_VAR, "/etc/namecoin.conf")

        assert default_namecoin_conf() == Path("/etc/namecoin.conf")

    def test_home_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without the variable, ~/.namecoin/namecoin.conf is used."""
        monkeypatch.delenv(CONFIGFILE_VAR)
        monkeypatch.setenv("HOME", "/home/alice")

        assert default_namecoin_conf() == Path("/home/alice/.namecoin/namecoin.conf")


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self) -> None:
        """Defaults point at a local mainnet daemon and a state file."""
        settings = Settings()

        assert settings.rpc_url == f"http://127.0.0.1:{DEFAULT_PORT_MAINNET}"
        assert settings.checkpoint_backend == "file"
        assert settings.state_file == Path("registrations.json")

    def test_conf_file_values_used(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """namecoin.conf supplies the RPC credentials."""
        conf = write_conf(tmp_path / "namecoin.conf", "rpcuser=alice", "rpcpassword=pw", "testnet=1")
        monkeypatch.setenv(CONFIGFILE_VAR, str(conf))

        settings = Settings()

        assert settings.rpc_user == "alice"
        assert settings.rpc_password == "pw"
        assert settings.rpc_port == DEFAULT_PORT_TESTNET

    def test_env_beats_conf_file(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Environment variables override namecoin.conf."""
        conf = write_conf(tmp_path / "namecoin.conf", "rpcuser=alice")
        monkeypatch.setenv(CONFIGFILE_VAR, str(conf))
        monkeypatch.setenv("NAMEREG_RPC_USER", "bob")

        assert Settings().rpc_user == "bob"

    def test_init_beats_everything(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Constructor arguments have the highest priority."""
        monkeypatch.setenv("NAMEREG_RPC_PORT", "1234")

        assert Settings(rpc_port=4321).rpc_port == 4321
