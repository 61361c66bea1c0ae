from .function_decoders import EVMFunctionDecoder, try_decode_function
from .interface import ContractInterface
from .matcher import decode_calldata
from .schema import AbiParameter, FunctionSchema
