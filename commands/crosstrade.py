from errors import CommandError

from .sendtx import parse_payload


async def execute(raw_command: str, container):
    try:
        params = parse_payload(raw_command, "crosstrade ")
    except CommandError as exc:
        return f"ERROR: {exc}\r\n"

    handler = container.build_transaction_handler()
    result = await handler.execute_cross_network_trade(params)
    if result.success:
        return f"SUCCESS: {result.signature}\r\n"
    return f"FAILURE: {result.error.kind.value}: {result.message}\r\n"
