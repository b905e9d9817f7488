from typing import Optional

import structlog

from rabin_zsig.algorithm.compress import compress_signature
from rabin_zsig.algorithm.group import generate_group
from rabin_zsig.algorithm.primes import random_element
from rabin_zsig.algorithm.residue import tweak_element
from rabin_zsig.algorithm.signer import random_root_index, sign
from rabin_zsig.algorithm.verify import BenchmarkResult, ProgressFn, benchmark_verification, verify_compressed
from rabin_zsig.entropy import RandomSource
from rabin_zsig.models import ScenarioConfig
from rabin_zsig.snapshot import ScenarioResult
from rabin_zsig.utils import to_hex

log = structlog.get_logger()


def run_scenario(source: RandomSource, config: Optional[ScenarioConfig] = None) -> ScenarioResult:
    """Generate a group, sign a random element and compress the signature.

    Entropy is consumed in a fixed order: p, q, the element, then one byte
    for the root index. The same byte stream always gives the same result.
    """
    config = config or ScenarioConfig()

    log.info("generating group", bits=config.prime_bits, p_mod8=config.p_mod8, q_mod8=config.q_mod8)
    group = generate_group(
        source,
        config.prime_bits,
        config.p_mod8,
        config.q_mod8,
        max_bytes=config.max_sample_bytes,
    )

    element = random_element(source, config.element_bits, group.n, max_bytes=config.max_sample_bytes)
    log.info("picked random element", e=to_hex(element))

    tweaked, state, tweak = tweak_element(element, group)

    root_index = random_root_index(source)
    log.info("calculating root", root=root_index)
    signature = sign(tweaked, group, root_index)

    zsig = compress_signature(signature, group.n)
    # A single check here so a broken compressor fails before the benchmark.
    verify_compressed(zsig, tweaked, group.n)

    return ScenarioResult(
        group=group,
        element=element,
        residue_state=state,
        tweak=tweak,
        tweaked_element=tweaked,
        root_index=root_index,
        signature=signature,
        zsig=zsig,
    )


def run_benchmark(
    result: ScenarioResult,
    iterations: int,
    on_progress: Optional[ProgressFn] = None,
) -> BenchmarkResult:
    return benchmark_verification(
        result.zsig,
        result.tweaked_element,
        result.n,
        iterations,
        on_progress=on_progress,
    )
