"""
Error codes and ProbabilityError exception for contract and configuration violations.
"""
from enum import Enum

class ErrorCode(str, Enum):
    ERR_GENERIC = "ERR_GENERIC"
    ERR_INVALID_BOARD = "ERR_INVALID_BOARD"
    ERR_INVALID_DICE = "ERR_INVALID_DICE"
    ERR_SPACE_OUT_OF_RANGE = "ERR_SPACE_OUT_OF_RANGE"
    ERR_TURN_OUT_OF_RANGE = "ERR_TURN_OUT_OF_RANGE"
    ERR_INVALID_DEPTH = "ERR_INVALID_DEPTH"
    ERR_BOARD_NOT_RESET = "ERR_BOARD_NOT_RESET"
    ERR_ROW_SUM = "ERR_ROW_SUM"
    ERR_SINGULAR_SYSTEM = "ERR_SINGULAR_SYSTEM"

class ProbabilityError(Exception):
    def __init__(self, code: ErrorCode, message: str = "", details: dict = None):
        super().__init__(message or code.value)
        self.code = code
        self.details = details or {}

    def to_dict(self):
        return {"code": self.code.value, "details": self.details}
