#!/usr/bin/env python3
"""Map a directory of TribeNet turn reports and print what was found."""

import logging
import sys

from tribemap.core.config import MapperConfig
from tribemap.engine.pipeline import MapPipeline


def main():
    if len(sys.argv) < 2:
        print("usage: map_reports.py REPORT_DIR [ORIGIN_GRID]")
        sys.exit(2)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = MapperConfig(origin_grid=sys.argv[2] if len(sys.argv) > 2 else "RR")
    pipeline = MapPipeline(config)
    count = pipeline.add_directory(sys.argv[1])

    print(f"=== tribemap: {count} reports from {sys.argv[1]} ===")
    for failure in pipeline.failures:
        print(f"FAILED {failure.report_id}: {failure.error}")
    print()

    result = pipeline.run()

    print(f"{'Turn':>8} {'Unit':>8} {'Type':>8} {'Start':>8} {'End':>8} {'Steps':>5}")
    print("-" * 52)
    for turn in result.turns:
        for movement in turn.ordered_units():
            print(
                f"{turn.id:>8} {movement.unit_id:>8} {movement.movement_type.value:>8} "
                f"{movement.starting_coords:>8} {movement.ending_coords:>8} "
                f"{len(movement.steps):5d}"
            )

    print()
    print(f"=== Map: {len(result.hex_map)} hexes ===")
    bounds = result.hex_map.bounds()
    if bounds:
        print(f"Upper left:  {bounds[0].to_grid_text()}")
        print(f"Lower right: {bounds[1].to_grid_text()}")
    origin = result.hex_map.origin()
    if origin:
        print(f"Origin:      {origin.grid_text}")
    settlements = [hx for hx in result.hex_map if hx.settlement]
    for hx in settlements:
        print(f"Settlement {hx.settlement!r} at {hx.grid_text}")


if __name__ == "__main__":
    main()
