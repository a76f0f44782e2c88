"""Upload parsers package.

Public API
----------
BaseParser        - Abstract base; inherit to create a new upload parser.
ParseResult       - Dataclass returned by every ``parser.parse()`` call.
RowError          - Per-row validation problem.
ContratosParser   - Employee contract upload (CSV or Excel).

Usage example::

    from app.parsers import ContratosParser

    result = ContratosParser(raw_bytes, filename="empleados.csv").parse()
    print(result.summary())
    for err in result.row_errors:
        ...
"""

from .base_parser import BaseParser, ParseResult, RowError
from .contratos_parser import REQUIRED_HEADERS, ContratosParser, parse_fecha_colombiana

__all__: list[str] = [
    "BaseParser",
    "ParseResult",
    "RowError",
    "ContratosParser",
    "REQUIRED_HEADERS",
    "parse_fecha_colombiana",
]
