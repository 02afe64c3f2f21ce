from votebooth_toolkit.utils.formatters import (
    console,
    format_address,
    format_amount,
    load_json,
    save_json_output,
)

__all__ = [
    "console",
    "format_address",
    "format_amount",
    "load_json",
    "save_json_output",
]
