import click
import pytest
import structlog
from click.testing import CliRunner

from rabin_zsig.cli import cli, select_source
from rabin_zsig.entropy import DeviceRandomSource, SecretsRandomSource, SeededRandomSource
from rabin_zsig.errors import InvariantViolation
from rabin_zsig.models import ScenarioConfig

SMALL_RUN = ["run", "--prime-bits", "128", "--element-bits", "256", "-n", "200", "--no-progress"]


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    # ``run`` points structlog at the runner's stderr, which is closed afterwards.
    structlog.reset_defaults()


@pytest.fixture
def runner():
    return CliRunner()


class TestRunCommand:
    """Test suite for the run command"""

    def test_seeded_run(self, runner):
        """Test seeded run"""
        result = runner.invoke(cli, SMALL_RUN + ["--seed", "00ff"])
        assert result.exit_code == 0, result.output
        assert "zsig" in result.output
        assert "verify time" in result.output

    def test_json_logs(self, runner):
        """Test json logs"""
        result = runner.invoke(cli, SMALL_RUN + ["--seed", "abcd", "--log-format", "json"])
        assert result.exit_code == 0, result.output
        assert '"event": "generated prime"' in result.output

    def test_log_level_filters_info(self, runner):
        """Test log level filters info"""
        result = runner.invoke(cli, SMALL_RUN + ["--seed", "0102", "--log-format", "json", "--log-level", "warning"])
        assert result.exit_code == 0, result.output
        assert "generated prime" not in result.output

    def test_invalid_config(self, runner):
        """Test invalid config"""
        result = runner.invoke(cli, ["run", "--prime-bits", "512", "--element-bits", "512"])
        assert result.exit_code == 2
        assert "element_bits" in result.output

    def test_bad_seed(self, runner):
        """Test that a non-hex seed is a usage error"""
        result = runner.invoke(cli, SMALL_RUN + ["--seed", "not-hex"])
        assert result.exit_code == 2

    def test_short_entropy_device(self, runner, tmp_path):
        """Test short entropy device"""
        device = tmp_path / "device"
        device.write_bytes(b"\x01" * 4)
        result = runner.invoke(cli, SMALL_RUN + ["--entropy-device", str(device)])
        assert result.exit_code == 1
        assert "short read" in result.output


class TestDefaultInvocation:
    """Test suite for running without a subcommand"""

    def test_runs_reference_scenario(self, runner, monkeypatch):
        """Test that no arguments runs the reference scenario configuration"""
        captured = []

        def fake_run_scenario(source, config):
            captured.append(config)
            raise InvariantViolation("stopped before key generation")

        monkeypatch.setattr("rabin_zsig.cli.run_scenario", fake_run_scenario)
        result = runner.invoke(cli, [])

        assert result.exit_code == 1
        assert "stopped before key generation" in result.output
        assert len(captured) == 1
        config = captured[0]
        assert isinstance(config, ScenarioConfig)
        assert config.prime_bits == 512
        assert (config.p_mod8, config.q_mod8) == (3, 7)
        assert config.element_bits == 1024
        assert config.iterations == 1_000_000


class TestVerifyCommand:
    """Test suite for the verify command"""

    def test_valid(self, runner):
        """Test that a valid compressed signature prints its root"""
        result = runner.invoke(cli, ["verify", "--zsig", "5", "--element", "85", "--modulus", "fd"])
        assert result.exit_code == 0, result.output
        assert "valid: root 6" in result.output

    def test_prefixed_hex(self, runner):
        """Test prefixed hex"""
        result = runner.invoke(cli, ["verify", "--zsig", "0x5", "-e", "0x85", "-m", "0xfd"])
        assert result.exit_code == 0, result.output

    def test_invalid(self, runner):
        """Test that an invalid compressed signature exits with an error"""
        result = runner.invoke(cli, ["verify", "--zsig", "6", "--element", "85", "--modulus", "fd"])
        assert result.exit_code == 1
        assert "not a perfect square" in result.output

    def test_bad_hex(self, runner):
        """Test that malformed hex is rejected by the option parser"""
        result = runner.invoke(cli, ["verify", "--zsig", "zz", "--element", "85", "--modulus", "fd"])
        assert result.exit_code == 2


class TestSelectSource:
    """Test suite for select_source"""

    def test_default_is_secrets(self):
        """Test default is secrets"""
        assert isinstance(select_source(None, None), SecretsRandomSource)

    def test_seed(self):
        """Test that a seed selects SeededRandomSource"""
        assert isinstance(select_source("00", None), SeededRandomSource)

    def test_device(self):
        """Test that a device path selects DeviceRandomSource"""
        assert isinstance(select_source(None, "/dev/urandom"), DeviceRandomSource)

    def test_exclusive(self):
        """Test that seed and device cannot be combined"""
        with pytest.raises(click.UsageError):
            select_source("00", "/dev/urandom")
