class DecodingError(Exception):
    """

    Base class for errors raised while preparing schemas or calldata for decoding

    """


class SchemaError(DecodingError):
    """

    Raised when a function schema cannot be built from ABI JSON or a textual signature.  Common causes:

        * ABI element is a constructor, event, error, fallback or receive entry
        * Parameter types that cannot be parsed by eth_abi
        * Unbalanced parentheses in a textual signature

    """
