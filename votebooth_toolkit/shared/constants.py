"""All constants for the project"""

from dotenv import load_dotenv

load_dotenv()


class BoothConstants:
    """Global class constants for tree and ballot arithmetic"""

    # Observed deployment depth: 2^9 = 512 motions per card
    DEFAULT_TREE_DEPTH = 9
    MAX_TREE_DEPTH = 256

    # Compact proofs carry an 8-byte sibling bitmap
    COMPRESSED_PROOF_MAX_DEPTH = 64
    COMPRESSED_PROOF_BITMAP_BYTES = 8

    LEAF_SIZE = 32
    ZERO_LEAF = b"\x00" * 32

    FIXED_POINT_DECIMALS = 18
    FIXED_POINT_SCALE = 10**18

    INT256_MIN = -(2**255)
    INT256_MAX = 2**255 - 1

    ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class EnvVars:
    """Environment variables read by BoothConfig.from_env() and get_logger()"""

    BOOTH_ADDRESS = "VB_BOOTH_ADDRESS"
    VOICE_CREDITS_ADDRESS = "VB_VOICE_CREDITS_ADDRESS"
    TALLY_ADDRESS = "VB_TALLY_ADDRESS"
    CARDS_ADDRESS = "VB_CARDS_ADDRESS"
    YES_POOL_ADDRESS = "VB_YES_POOL_ADDRESS"
    NO_POOL_ADDRESS = "VB_NO_POOL_ADDRESS"
    MOTION_ID = "VB_MOTION_ID"
    AUTHORIZED_ADDRESS = "VB_AUTHORIZED_ADDRESS"
    TREE_DEPTH = "VB_TREE_DEPTH"
    RPC_URL = "VB_RPC_URL"
    LOG_LEVEL = "VB_LOG_LEVEL"
