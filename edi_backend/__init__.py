"""Healthcare X12 EDI Backend Package.

This package provides the encoder/decoder for HIPAA 005010 X12
healthcare transactions and a thin FastAPI surface over it, including:

- 837P professional claim generation
- 270 eligibility inquiry generation
- 835 remittance tokenization, validation and parsing
- CARC/RARC lookups and payment posting summaries

Usage:
    # Development (from project root):
    uvicorn edi_backend.app:app --reload --port 8080

    # Parse a remittance file from the command line:
    python scripts/parse_835.py path/to/remit.835

Modules:
    app: FastAPI application entry point
    x12: Segment primitives, generators, tokenizer, validator and parser
    remittance: Reason code tables, payment summaries and text reports
    schemas: Pydantic models for generator inputs and request bodies
    templates: YAML payer profiles
    routes: API routers
    utils: Sanitization and date helpers
    rate_limit: Shared request rate limiter
    config: Environment configuration
"""

__version__ = "0.1.0"
