"""Shared configuration for the EDI backend.

This module centralizes environment variable access and default values
to prevent drift between modules.
"""

import os

# Interchange settings
# ISA15: P = production, T = test
EDI_USAGE_INDICATOR = os.getenv("EDI_USAGE_INDICATOR", "P")
# ISA05/ISA07: ZZ = mutually defined
EDI_INTERCHANGE_ID_QUALIFIER = os.getenv("EDI_INTERCHANGE_ID_QUALIFIER", "ZZ")

# Control numbers: "random" or "sequential"
EDI_CONTROL_NUMBER_MODE = os.getenv("EDI_CONTROL_NUMBER_MODE", "random")
EDI_CONTROL_NUMBER_START = int(os.getenv("EDI_CONTROL_NUMBER_START", "1"))

# Claim and inquiry defaults
# SBR09: MC = Medicaid
EDI_CLAIM_FILING_INDICATOR = os.getenv("EDI_CLAIM_FILING_INDICATOR", "MC")
# EQ01: 30 = health benefit plan coverage
EDI_SERVICE_TYPE_CODE = os.getenv("EDI_SERVICE_TYPE_CODE", "30")

# Upload limits
EDI_MAX_UPLOAD_BYTES = int(os.getenv("EDI_MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))

# CORS origins for the API, comma separated
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "EDI_CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
    ).split(",")
    if origin.strip()
]

# Rate limit for 835 file uploads (slowapi syntax)
EDI_UPLOAD_RATE_LIMIT = os.getenv("EDI_UPLOAD_RATE_LIMIT", "10/minute")
