from __future__ import annotations

import logging


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    # every host-runner invocation is logged by the transport at DEBUG
    logging.getLogger("hs_client").setLevel(level)
