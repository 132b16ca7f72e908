"""Series options loading."""

import json
from pathlib import Path
from typing import Union

import structlog

from ..config.options import SeriesOptions

logger = structlog.get_logger()


def load_series_options(path: Union[str, Path]) -> SeriesOptions:
    """Load and validate series options from a JSON file."""
    with open(path) as f:
        data = json.load(f)
    options = SeriesOptions.model_validate(data)
    logger.info(
        "Loaded series options",
        path=str(path),
        name=options.name,
        populations=len(options.populations),
    )
    return options
