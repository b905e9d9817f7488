from typing import Optional

import click
import structlog
from pydantic import ValidationError

from rabin_zsig.entropy import DeviceRandomSource, RandomSource, SecretsRandomSource, SeededRandomSource
from rabin_zsig.errors import RabinError
from rabin_zsig.log import configure_logging
from rabin_zsig.models import ScenarioConfig
from rabin_zsig.pipeline import run_benchmark, run_scenario
from rabin_zsig.algorithm.verify import verify_compressed
from rabin_zsig.ui import benchmark_progress, get_console, render
from rabin_zsig.utils import from_hex, seed_from_hex, to_hex

log = structlog.get_logger()


def select_source(seed: Optional[str], entropy_device: Optional[str]) -> RandomSource:
    """Pick the randomness source from the command-line options."""
    if seed and entropy_device:
        raise click.UsageError("--seed and --entropy-device are mutually exclusive")
    if seed:
        try:
            return SeededRandomSource(seed_from_hex(seed))
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--seed")
    if entropy_device:
        return DeviceRandomSource(entropy_device)
    return SecretsRandomSource()


@click.group(invoke_without_command=True)
@click.pass_context
def cli(ctx: click.Context):
    """Rabin signature keygen, signing, compression and verification benchmark."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@cli.command()
@click.option("--prime-bits", default=512, show_default=True, help="Size of each prime in bits")
@click.option("--element-bits", default=1024, show_default=True, help="Bits sampled for the message element")
@click.option("--iterations", "-n", default=1_000_000, show_default=True, help="Number of timed verifications")
@click.option("--seed", default=None, help="Hex seed for a reproducible run")
@click.option("--entropy-device", default=None, type=click.Path(exists=True, dir_okay=False), help="Read entropy from this device")
@click.option("--log-format", type=click.Choice(["console", "json"]), default="console", show_default=True)
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False), default="INFO", show_default=True)
@click.option("--no-progress", is_flag=True, help="Do not draw a progress bar during the benchmark")
def run(
    prime_bits: int,
    element_bits: int,
    iterations: int,
    seed: Optional[str],
    entropy_device: Optional[str],
    log_format: str,
    log_level: str,
    no_progress: bool,
):
    """Generate a group, sign, compress and benchmark verification."""
    configure_logging(log_format, log_level)
    try:
        config = ScenarioConfig(prime_bits=prime_bits, element_bits=element_bits, iterations=iterations)
    except ValidationError as e:
        raise click.UsageError(str(e))

    source = select_source(seed, entropy_device)
    console = get_console()
    try:
        result = run_scenario(source, config)
        with benchmark_progress(console, config.iterations, enabled=not no_progress) as on_progress:
            benchmark = run_benchmark(result, config.iterations, on_progress)
    except RabinError as e:
        log.error("run failed", error=str(e), kind=type(e).__name__)
        raise click.ClickException(str(e))
    finally:
        if isinstance(source, DeviceRandomSource):
            source.close()

    console.print(render(result, benchmark))


@cli.command()
@click.option("--zsig", required=True, help="Compressed signature (hex)")
@click.option("--element", "-e", required=True, help="Tweaked message element (hex)")
@click.option("--modulus", "-m", required=True, help="Composite modulus n (hex)")
def verify(zsig: str, element: str, modulus: str):
    """Check a compressed signature once."""
    try:
        zsig_value, e_value, n_value = from_hex(zsig), from_hex(element), from_hex(modulus)
    except ValueError as e:
        raise click.BadParameter(str(e))
    if n_value <= 0:
        raise click.BadParameter("modulus must be positive", param_hint="--modulus")

    try:
        root = verify_compressed(zsig_value, e_value, n_value)
    except RabinError as e:
        raise click.ClickException(f"invalid compressed signature: {e}")
    click.echo(f"valid: root {to_hex(root)}")


if __name__ == "__main__":
    cli()
