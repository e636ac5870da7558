"""
Service-account credentials for the distribution service.

Plain-text credentials are written to a transient file that only
exists for the duration of the run.
"""

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from android_release.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CREDENTIALS_ENV_VAR = "GOOGLE_APPLICATION_CREDENTIALS"
CREDENTIALS_FILE_NAME = "serviceAccountJson.json"


@contextmanager
def service_account_credentials(
    json_path: str | None = None,
    json_plain_text: str | None = None,
    work_dir: Path | None = None,
) -> Iterator[Path]:
    """
    Provide a credentials file path for the block.

    A path is used as is. Plain text is written to
    `<work_dir>/serviceAccountJson.json` and removed on exit, whether the
    block succeeds or fails. Either way GOOGLE_APPLICATION_CREDENTIALS
    points at the file while the block runs.

    Raises:
        ConfigurationError: If neither input is supplied
    """
    if json_path and json_plain_text:
        logger.warning(
            "Both 'serviceAccountJsonPlainText' and 'serviceAccountJson' were "
            "supplied; using 'serviceAccountJsonPlainText'"
        )

    if json_plain_text:
        path = (work_dir or Path.cwd()) / CREDENTIALS_FILE_NAME
        path.write_text(json_plain_text, encoding="utf-8")
        os.environ[CREDENTIALS_ENV_VAR] = str(path)
        try:
            yield path
        finally:
            path.unlink(missing_ok=True)
            logger.debug(f"Removed credentials file {path}")
        return

    if json_path:
        path = Path(json_path)
        os.environ[CREDENTIALS_ENV_VAR] = str(path)
        yield path
        return

    raise ConfigurationError(
        "You must provide one of 'serviceAccountJsonPlainText' or 'serviceAccountJson' to use this action",
        config_key="serviceAccountJson",
    )
