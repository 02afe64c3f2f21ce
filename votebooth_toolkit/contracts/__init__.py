from votebooth_toolkit.contracts.reader import (
    BoothContractReader,
    encode_cast_ballot,
    encode_consolidate,
)

__all__ = ["BoothContractReader", "encode_cast_ballot", "encode_consolidate"]
