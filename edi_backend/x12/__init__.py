"""ANSI X12 codec: segment primitives, 837P/270 generators, 835 parser."""

from .claim_validation import ClaimFinding, validate_claim, validate_inquiry
from .control_numbers import (
    ControlNumberGenerator,
    ControlNumbers,
    RandomControlNumbers,
    SequentialControlNumbers,
)
from .envelope import GenerationResult
from .errors import (
    ClaimValidationError,
    DelimiterError,
    FormatError,
    ValidationError,
    X12Error,
)
from .generator_270 import EDI270Generator, generate_270
from .generator_837p import EDI837PGenerator, generate_837p
from .parser_835 import EDI835Parser, parse_835
from .remittance import ParseResult, Transaction835
from .segments import Delimiters, build_segment
from .tokenizer import TokenizedDocument, X12Segment, detect_delimiters, tokenize
from .validator import Diagnostic, Severity, validate_835

__all__ = [
    "ClaimFinding",
    "ClaimValidationError",
    "ControlNumberGenerator",
    "ControlNumbers",
    "DelimiterError",
    "Delimiters",
    "Diagnostic",
    "EDI270Generator",
    "EDI835Parser",
    "EDI837PGenerator",
    "FormatError",
    "GenerationResult",
    "ParseResult",
    "RandomControlNumbers",
    "SequentialControlNumbers",
    "Severity",
    "TokenizedDocument",
    "Transaction835",
    "ValidationError",
    "X12Error",
    "X12Segment",
    "build_segment",
    "detect_delimiters",
    "generate_270",
    "generate_837p",
    "parse_835",
    "tokenize",
    "validate_835",
    "validate_claim",
    "validate_inquiry",
]
