"""
Utility libraries for the registry server.
Contains pure functions with no Google Sheets access.
"""
from .common import normalize, unique, ok, ng, log
from .id_rules import new_record_id
from .sheet_utils import a1_range, quote_tab, index_to_col_letter, extract_spreadsheet_id
from .row_codec import decode, decode_rows, encode, get_spec
from .types import (
    Response,
    SuccessResponse,
    ErrorResponse,
    ErrorDetail,
    SheetRow,
    SheetValues,
)

__all__ = [
    # Response types
    "Response",
    "SuccessResponse",
    "ErrorResponse",
    "ErrorDetail",
    "SheetRow",
    "SheetValues",
    # Functions
    "normalize",
    "unique",
    "ok",
    "ng",
    "log",
    "new_record_id",
    "a1_range",
    "quote_tab",
    "index_to_col_letter",
    "extract_spreadsheet_id",
    "decode",
    "decode_rows",
    "encode",
    "get_spec",
]
