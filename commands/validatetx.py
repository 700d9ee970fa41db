import logging

from errors import CommandError
from validation import validate_transfer

from .sendtx import parse_payload

logger = logging.getLogger(__name__)


async def execute(raw_command: str, container):
    """Dry-run validation of a transfer payload; never touches the ledger."""
    try:
        params = parse_payload(raw_command, "validatetx ")
    except CommandError as exc:
        return f"ERROR: {exc}\r\n"

    result = validate_transfer(params, container.registry)
    if result.valid:
        return "VALID\r\n"
    details = "; ".join(
        f"{error.field}: {message}" if error.field else message
        for error, message in zip(result.errors, result.messages())
    )
    logger.debug("validatetx rejected payload: %s", [kind.value for kind in result.kinds])
    return f"INVALID: {details}\r\n"
