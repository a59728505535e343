"""Full WLE analysis: fetch the tables, fit both forests, predict, report."""

import logging

from ..config import RunConfig
from ..logging_config import setup_logging
from ..paths import PATHS
from .runner import PipelineRunner


def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)

    PATHS.ensure_directories()
    config = RunConfig.from_settings()

    results = PipelineRunner(config).run()

    logger.info("OOB error (full model): %.4f", results["oob_error"])
    logger.info("OOB error (reduced model): %.4f", results["reduced_oob_error"])
    logger.info("Predictions:\n%s", results["predictions"].to_string())


if __name__ == "__main__":
    main()
