import logging

from validation import from_smallest_units, sanitize_address
from validation.amounts import MAX_DECIMALS, is_valid_decimals

logger = logging.getLogger(__name__)


async def execute(raw_command: str, container):
    parts = raw_command.split()
    if len(parts) not in (2, 3):
        return "ERROR: Usage: getbalance <address> [decimals]\r\n"

    address = sanitize_address(parts[1])
    if address is None:
        return "ERROR: Invalid wallet address format.\r\n"

    units = int(await container.ledger.get_balance(address))
    if len(parts) == 3:
        try:
            decimals = int(parts[2])
        except ValueError:
            return "ERROR: Decimals must be an integer.\r\n"
        if not is_valid_decimals(decimals):
            return f"ERROR: Decimals must be between 0 and {MAX_DECIMALS}.\r\n"
        logger.debug("Balance lookup for %s with %s decimals", address, decimals)
        return f"BALANCE: {from_smallest_units(units, decimals)}\r\n"
    return f"BALANCE: {units}\r\n"
