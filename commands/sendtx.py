import json
import logging
from decimal import Decimal

from errors import CommandError

logger = logging.getLogger(__name__)


def parse_payload(raw_command: str, prefix: str):
    """Return the JSON object following ``prefix`` or raise ``CommandError``."""
    if not raw_command.lower().startswith(prefix):
        raise CommandError(f"Invalid {prefix.strip()} format. Use {prefix.strip()} '{{...}}'.")
    blob = raw_command[len(prefix):].strip()
    if len(blob) >= 2 and blob[0] == blob[-1] and blob[0] in "'\"":
        blob = blob[1:-1]
    try:
        payload = json.loads(blob, parse_float=Decimal)
    except json.JSONDecodeError as exc:
        raise CommandError(f"Invalid JSON payload: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise CommandError("Payload must be a JSON object.")
    return payload


async def execute(raw_command: str, container):
    """
    Executes the sendtx command.
    Expected format: sendtx {"from": ..., "to": ..., "amount": ..., "network": ...}
    """
    try:
        params = parse_payload(raw_command, "sendtx ")
    except CommandError as exc:
        return f"ERROR: {exc}\r\n"

    logger.debug("Received sendtx payload: %s", params)
    handler = container.build_transaction_handler()
    result = await handler.execute(params)
    if result.success:
        return f"SUCCESS: {result.signature}\r\n"
    return f"FAILURE: {result.error.kind.value}: {result.message}\r\n"
