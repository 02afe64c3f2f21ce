from eth_utils import is_address, to_checksum_address

from votebooth_toolkit.shared.constants import BoothConstants


def validate_eth_address(address: str, param_name: str = "address") -> str:
    """Validate and return checksum ethereum address"""
    if not address or not isinstance(address, str):
        raise ValueError(
            f"Invalid {param_name}: address must be a non-empty string"
        )
    if not is_address(address):
        raise ValueError(
            f"Invalid {param_name}: {address} is not a valid Ethereum address"
        )
    return to_checksum_address(address)


def validate_depth(depth: int) -> int:
    """Validate tree depth"""
    if not 1 <= depth <= BoothConstants.MAX_TREE_DEPTH:
        raise ValueError(
            f"Invalid depth: {depth}. Must be between 1 and "
            f"{BoothConstants.MAX_TREE_DEPTH}"
        )
    return depth


def validate_card_id(card_id: int) -> int:
    """Validate balance card id (uint256)"""
    if not 0 <= card_id < 2**256:
        raise ValueError(f"Invalid card_id: {card_id}. Must be a uint256")
    return card_id
