"""X12 EDI routes.

Provides endpoints for:
- Generating 837P claims and 270 eligibility inquiries
- Validating and parsing 835 remittance advice
- Payment posting summaries and text reports
- Payer profiles and reason code lookups
"""

import logging
from typing import Any

from fastapi import APIRouter, File, HTTPException, Query, Request, UploadFile
from pydantic import ValidationError as PydanticValidationError

from .. import config
from ..rate_limit import limiter
from ..remittance import format_payment_report, summarize_remittance
from ..remittance.reason_codes import CodeKind, is_known_code, lookup_code
from ..schemas import RawDocumentRequest
from ..templates import apply_payer_profile, get_payer_profile, list_payer_profiles
from ..utils import sanitize_filename
from ..x12 import (
    ClaimValidationError,
    EDI270Generator,
    EDI837PGenerator,
    X12Error,
    parse_835,
    validate_835,
)
from ..x12.validator import has_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/edi", tags=["edi"])


def _pydantic_findings(e: PydanticValidationError) -> list[dict[str, str]]:
    """Flatten pydantic errors into the same shape as claim findings."""
    findings = []
    for err in e.errors():
        field = ".".join(
            f"[{part}]" if isinstance(part, int) else str(part) for part in err["loc"]
        ).replace(".[", "[")
        findings.append({"field": field, "message": err["msg"], "severity": "error"})
    return findings


def _with_profile(payload: dict[str, Any], payer_profile: str | None) -> dict[str, Any]:
    if not payer_profile:
        return payload
    try:
        return apply_payer_profile(payer_profile, payload)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _generate(
    generator_class: type[EDI837PGenerator] | type[EDI270Generator],
    payload: dict[str, Any],
):
    label = generator_class.transaction_set_id
    try:
        return generator_class().generate(payload).to_dict()
    except PydanticValidationError as e:
        logger.warning(f"Rejected {label} request: invalid input")
        raise HTTPException(status_code=422, detail=_pydantic_findings(e))
    except ClaimValidationError as e:
        logger.warning(f"Rejected {label} request: {e}")
        raise HTTPException(
            status_code=422, detail=[f.to_dict() for f in e.findings]
        )
    except X12Error as e:
        logger.warning(f"Rejected {label} request: {e}")
        raise HTTPException(
            status_code=422,
            detail=[{"field": "", "message": str(e), "severity": "error"}],
        )
    except Exception as e:
        logger.error(f"Failed to generate {label}: {e}", exc_info=True)
        raise HTTPException(
            status_code=500, detail=f"Failed to generate {label}: {str(e)[:200]}"
        )


@router.post("/837p")
async def generate_claim(
    payload: dict[str, Any],
    payer_profile: str | None = Query(
        default=None, description="Payer profile that fills receiver and payer"
    ),
):
    """Generate an 837P professional claim interchange.

    Returns the compact and line-formatted document, the control numbers
    used, the SE segment count and any non-blocking warnings.
    """
    return _generate(EDI837PGenerator, _with_profile(payload, payer_profile))


@router.post("/270")
async def generate_eligibility_inquiry(
    payload: dict[str, Any],
    payer_profile: str | None = Query(
        default=None, description="Payer profile that fills payer and service type"
    ),
):
    """Generate a 270 eligibility inquiry interchange."""
    return _generate(EDI270Generator, _with_profile(payload, payer_profile))


@router.post("/835/validate")
async def validate_remittance(request: RawDocumentRequest):
    """Run structural checks on an 835 without building the remittance tree."""
    try:
        diagnostics = validate_835(request.content)
        return {
            "valid": not has_errors(diagnostics),
            "diagnostics": [d.to_dict() for d in diagnostics],
        }
    except Exception as e:
        logger.error(f"Failed to validate 835: {e}", exc_info=True)
        raise HTTPException(
            status_code=500, detail=f"Failed to validate 835: {str(e)[:200]}"
        )


@router.post("/835/parse")
async def parse_remittance(request: RawDocumentRequest):
    """Parse an 835 into its envelope, transactions and diagnostics."""
    try:
        return parse_835(request.content).to_dict()
    except Exception as e:
        logger.error(f"Failed to parse 835: {e}", exc_info=True)
        raise HTTPException(
            status_code=500, detail=f"Failed to parse 835: {str(e)[:200]}"
        )


def _summarize(content: str) -> dict[str, Any]:
    try:
        result = parse_835(content)
        summaries = summarize_remittance(result)
        return {
            "valid": result.is_valid,
            "segment_count": result.segment_count,
            "summaries": [s.to_dict() for s in summaries],
            "reports": [format_payment_report(s) for s in summaries],
            "diagnostics": [d.to_dict() for d in result.diagnostics],
        }
    except Exception as e:
        logger.error(f"Failed to summarize 835: {e}", exc_info=True)
        raise HTTPException(
            status_code=500, detail=f"Failed to summarize 835: {str(e)[:200]}"
        )


@router.post("/835/summary")
async def summarize_remittance_document(request: RawDocumentRequest):
    """Build payment posting summaries and text reports for an 835."""
    return _summarize(request.content)


@router.post("/835/upload")
@limiter.limit(config.EDI_UPLOAD_RATE_LIMIT)
async def upload_remittance(request: Request, file: UploadFile = File(...)):
    """Upload an 835 file and return its payment posting summaries.

    Rate limited per client (EDI_UPLOAD_RATE_LIMIT, default 10/minute).
    """
    filename = sanitize_filename(file.filename)
    content = await file.read()

    if len(content) > config.EDI_MAX_UPLOAD_BYTES:
        logger.warning(f"Rejected 835 upload {filename}: {len(content)} bytes")
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum {config.EDI_MAX_UPLOAD_BYTES} bytes.",
        )

    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning(f"Rejected 835 upload {filename}: not UTF-8 text")
        raise HTTPException(status_code=400, detail="File must be UTF-8 text")

    logger.info(f"Processing 835 upload {filename} ({len(content)} bytes)")
    return {"filename": filename, **_summarize(text)}


@router.get("/payer-profiles")
async def get_payer_profiles(category: str | None = None):
    """List payer profiles, optionally filtered by category."""
    profiles = list_payer_profiles()
    if category:
        profiles = [p for p in profiles if p.get("category") == category]
    return {"profiles": profiles, "total": len(profiles)}


@router.get("/payer-profiles/{profile_id}")
async def get_payer_profile_detail(profile_id: str):
    """Get the full configuration for one payer profile."""
    profile = get_payer_profile(profile_id)
    if not profile:
        raise HTTPException(
            status_code=404, detail=f"Payer profile not found: {profile_id}"
        )
    return {"id": profile_id, **profile}


@router.get("/codes/{kind}/{code}")
async def get_code_description(kind: CodeKind, code: str):
    """Look up a CARC, RARC or PLB adjustment reason code."""
    code = code.strip().upper()
    return {
        "kind": kind.value,
        "code": code,
        "known": is_known_code(kind, code),
        "description": lookup_code(kind, code),
    }
