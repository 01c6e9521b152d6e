"""kubectl execution helpers."""

import json
import logging
import shlex
import subprocess
from typing import Any, cast

logger = logging.getLogger(__name__)


class KubectlError(RuntimeError):
    """Raised when kubectl command execution fails."""


def kubectl_json(command: str) -> dict[str, Any]:
    """Execute ``kubectl <command> -o json`` and parse the output."""
    args = ["kubectl", *shlex.split(command), "-o", "json"]
    logger.debug("Running %s", shlex.join(args))
    try:
        result = subprocess.run(args, capture_output=True, text=True, check=True)
    except FileNotFoundError as exc:
        raise KubectlError("kubectl executable not found in PATH") from exc
    except subprocess.CalledProcessError as exc:
        stderr = exc.stderr.strip() if exc.stderr else str(exc)
        raise KubectlError(f"kubectl command failed: {stderr}") from exc

    try:
        return cast(dict[str, Any], json.loads(result.stdout) if result.stdout else {})
    except json.JSONDecodeError as exc:
        raise KubectlError(f"kubectl returned invalid JSON: {exc}") from exc
