import logging
import random
from pathlib import Path

from trafficmix import RandomBytes, describe, load_config
from trafficmix.payload import Distribution


logging.basicConfig(level=logging.DEBUG, format="%(name)s | %(message)s")

HERE = Path(__file__).parent


def main():
    mix = load_config(HERE / "imix.toml", rng=random.Random(0))
    for entry in mix:
        print(f"{entry.name} x{entry.quantity}: {describe(entry.packet)}")

    roll = random.Random(0)
    dist = mix[2].packet.child.child.child
    assert isinstance(dist, Distribution)
    picks = [dist.select(roll.uniform(0, dist.total_probability)) for _ in range(10)]
    sizes = [p.bounds if isinstance(p, RandomBytes) else p.data for p in picks]
    print(f"pdist picks: {sizes}")

    assert mix.total_quantity == 12, f"Expected 12, got {mix.total_quantity}"


if __name__ == "__main__":
    main()
