"""Pytest configuration and fixtures."""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

# Add project root to path for imports
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from edi_backend.x12.control_numbers import SequentialControlNumbers  # noqa: E402

# Two claims (one paid with CO/PR adjustments, one denied for no prior auth),
# EFT payment, Medicaid payer with address and contact, PLB recoupment.
SAMPLE_835_MULTI_CLAIM = "\n".join(
    [
        "ISA*00*          *00*          *ZZ*TMHP           *ZZ*1234567890     *240115*1230*^*00501*000000123*0*P*:~",
        "GS*HP*TMHP*1234567890*20240115*1230*000123*X*005010X221A1~",
        "ST*835*0001~",
        "BPR*C*450.00*C*ACH*CCP*01*111000025*DA*123456789*9876543210**01*222000050*DA*987654321*20240115~",
        "TRN*1*EFT20240115001*1234567890~",
        "DTM*405*20240115~",
        "N1*PR*TEXAS MEDICAID*PI*TXMCD~",
        "N3*12357 RIATA TRACE PKWY~",
        "N4*AUSTIN*TX*78727~",
        "PER*BL*TMHP PROVIDER SERVICES*TE*8005551234*UR*WWW.TMHP.COM~",
        "N1*PE*SOUTH TEXAS PT CLINIC*XX*1234567890~",
        "N3*1200 S 10TH ST~",
        "N4*MCALLEN*TX*78501~",
        "REF*TJ*741234567~",
        "CLP*CLAIM001*1*350.00*280.00*35.00*MC*TXMCD20240001*11*1~",
        "CAS*CO*45*70.00~",
        "CAS*PR*2*25.00*1*3*10.00~",
        "NM1*QC*1*DOE*JOHN*A***MI*123456789~",
        "NM1*IL*1*DOE*JOHN*A***MI*123456789~",
        "NM1*82*1*GARCIA*MARIA****XX*9876543210~",
        "MOA***MA01*MA18~",
        "DTM*232*20240115~",
        "DTM*233*20240115~",
        "REF*F8*ORIG835REF001~",
        "REF*1K*TXMCD20240001~",
        "AMT*AU*280.00~",
        "SVC*HC:97161:GP*150.00*120.00**1*1~",
        "DTM*472*20240115~",
        "CAS*CO*45*30.00~",
        "AMT*B6*120.00~",
        "SVC*HC:97110:GP*80.00*65.00**2**2~",
        "DTM*472*20240115~",
        "CAS*CO*45*15.00~",
        "AMT*B6*65.00~",
        "SVC*HC:97140:GP:59*70.00*55.00**1*1~",
        "DTM*472*20240115~",
        "CAS*CO*45*15.00~",
        "AMT*B6*55.00~",
        "SVC*HC:97530:GP*50.00*40.00**1*1~",
        "DTM*472*20240115~",
        "CAS*CO*45*10.00~",
        "AMT*B6*40.00~",
        "CLP*CLAIM002*4*200.00*0.00*0.00*MC*TXMCD20240002*11*1~",
        "CAS*CO*197*200.00~",
        "NM1*QC*1*SMITH*JANE*M***MI*987654321~",
        "DTM*232*20240110~",
        "DTM*233*20240110~",
        "REF*F8*ORIG835REF002~",
        "SVC*HC:97161:GP*150.00*0.00**1*1~",
        "DTM*472*20240110~",
        "CAS*CO*197*150.00~",
        "LQ*HE*N700~",
        "SVC*HC:97110:GP*50.00*0.00**1*1~",
        "DTM*472*20240110~",
        "CAS*CO*197*50.00~",
        "LQ*HE*N700~",
        "PLB*741234567*20240115*WO:RECOUP001*-75.00~",
        "SE*52*0001~",
        "GE*1*000123~",
        "IEA*1*000000123~",
    ]
)

# Check payment, single commercial claim with deductible, coinsurance and copay.
SAMPLE_835_CHECK_SINGLE = "\n".join(
    [
        "ISA*00*          *00*          *ZZ*BCBSTX         *ZZ*1234567890     *240201*0900*^*00501*000000456*0*P*:~",
        "GS*HP*BCBSTX*1234567890*20240201*0900*000456*X*005010X221A1~",
        "ST*835*0002~",
        "BPR*C*185.00*C*CHK*****9876543210~",
        "TRN*1*CHK000789*BCBSTX~",
        "DTM*405*20240201~",
        "N1*PR*BLUE CROSS BLUE SHIELD TX*PI*BCBSTX~",
        "N1*PE*SOUTH TEXAS PT CLINIC*XX*1234567890~",
        "REF*TJ*741234567~",
        "CLP*CLAIM003*1*350.00*185.00*95.00*BL*BCBS20240003*11*1~",
        "CAS*CO*45*70.00~",
        "CAS*PR*1*50.00*1*2*20.00*1*3*25.00~",
        "NM1*QC*1*JOHNSON*ROBERT*L***MI*JRX1234567~",
        "DTM*232*20240125~",
        "DTM*233*20240125~",
        "REF*F8*ORIG835REF003~",
        "AMT*AU*280.00~",
        "SVC*HC:97161:GP*150.00*95.00**1*1~",
        "DTM*472*20240125~",
        "CAS*CO*45*30.00~",
        "CAS*PR*1*25.00~",
        "AMT*B6*120.00~",
        "SVC*HC:97110:GP*80.00*45.00**2*2~",
        "DTM*472*20240125~",
        "CAS*CO*45*15.00~",
        "CAS*PR*2*20.00~",
        "AMT*B6*65.00~",
        "SVC*HC:97530:GP*70.00*25.00**1*1~",
        "DTM*472*20240125~",
        "CAS*CO*45*15.00~",
        "CAS*PR*1*25.00*1*2*5.00~",
        "AMT*B6*55.00~",
        "SVC*HC:97140:GP:59*50.00*20.00**1*1~",
        "DTM*472*20240125~",
        "CAS*CO*45*10.00~",
        "CAS*PR*2*20.00~",
        "AMT*B6*40.00~",
        "SE*36*0002~",
        "GE*1*000456~",
        "IEA*1*000000456~",
    ]
)

# Claim reversal (status 22) followed by the corrected claim.
SAMPLE_835_REVERSAL = "\n".join(
    [
        "ISA*00*          *00*          *ZZ*AETNA          *ZZ*1234567890     *240301*1400*^*00501*000000789*0*P*:~",
        "GS*HP*AETNA*1234567890*20240301*1400*000789*X*005010X221A1~",
        "ST*835*0003~",
        "BPR*C*65.00*C*ACH*CCP*01*333000075*DA*555555555*9876543210**01*444000080*DA*666666666*20240301~",
        "TRN*1*EFT20240301002*AETNA~",
        "DTM*405*20240301~",
        "N1*PR*AETNA*PI*60054~",
        "N1*PE*SOUTH TEXAS PT CLINIC*XX*1234567890~",
        "CLP*CLAIM004*22*200.00*-200.00*0.00*CI*AETNA20240004*11*7~",
        "NM1*QC*1*WILLIAMS*LISA****MI*AET9999999~",
        "DTM*232*20240215~",
        "REF*F8*ORIG835REF004~",
        "SVC*HC:97161:GP*150.00*-150.00**1~",
        "DTM*472*20240215~",
        "SVC*HC:97110:GP*50.00*-50.00**1~",
        "DTM*472*20240215~",
        "CLP*CLAIM004C*1*200.00*265.00*0.00*CI*AETNA20240004C*11*7~",
        "CAS*CO*45*-65.00~",
        "NM1*QC*1*WILLIAMS*LISA****MI*AET9999999~",
        "DTM*232*20240215~",
        "REF*F8*ORIG835REF004C~",
        "SVC*HC:97161:GP*150.00*165.00**1~",
        "DTM*472*20240215~",
        "CAS*CO*45*-15.00~",
        "SVC*HC:97110:GP*50.00*100.00**1~",
        "DTM*472*20240215~",
        "CAS*CO*45*-50.00~",
        "SE*26*0003~",
        "GE*1*000789~",
        "IEA*1*000000789~",
    ]
)

# Visit limit, bundled service and reduced-units denials; test usage indicator.
SAMPLE_835_PT_DENIALS = "\n".join(
    [
        "ISA*00*          *00*          *ZZ*UNITEDHC       *ZZ*1234567890     *240315*1000*^*00501*000000999*0*T*:~",
        "GS*HP*UHC*1234567890*20240315*1000*000999*X*005010X221A1~",
        "ST*835*0004~",
        "BPR*C*65.00*C*CHK*****9876543210~",
        "TRN*1*CHK001234*UHC~",
        "DTM*405*20240315~",
        "N1*PR*UNITED HEALTHCARE*PI*87726~",
        "N1*PE*SOUTH TEXAS PT CLINIC*XX*1234567890~",
        "CLP*CLAIM005*1*280.00*65.00*0.00*CI*UHC20240005*11*1~",
        "CAS*CO*45*65.00~",
        "CAS*CO*119*100.00~",
        "CAS*CO*97*50.00~",
        "NM1*QC*1*MARTINEZ*CARLOS****MI*UHC5551234~",
        "DTM*232*20240310~",
        "REF*F8*ORIG835REF005~",
        "SVC*HC:97110:GP*80.00*65.00**2**2~",
        "DTM*472*20240310~",
        "CAS*CO*45*15.00~",
        "AMT*B6*65.00~",
        "SVC*HC:97140:GP:59*70.00*0.00**1*1~",
        "DTM*472*20240310~",
        "CAS*CO*119*70.00~",
        "LQ*HE*N362~",
        "SVC*HC:97530:GP*50.00*0.00**1*1~",
        "DTM*472*20240310~",
        "CAS*CO*97*50.00~",
        "LQ*HE*M15~",
        "SVC*HC:97150:GP*80.00*0.00**2**4~",
        "DTM*472*20240310~",
        "CAS*CO*119*80.00~",
        "LQ*HE*N362~",
        "SE*30*0004~",
        "GE*1*000999~",
        "IEA*1*000000999~",
    ]
)

MINIMAL_ISA = (
    "ISA*00*          *00*          *ZZ*SENDER         *ZZ*RECEIVER       "
    "*240101*1200*^*00501*000000001*0*P*:~"
)


def minimal_835(
    transaction_set: str = "835",
    payment_amount: str = "100.00",
    iea_control: str = "000000001",
) -> str:
    """Build a small one-transaction document for validation tests."""
    return "".join(
        [
            MINIMAL_ISA,
            "GS*HP*SENDER*RECEIVER*20240101*1200*000001*X*005010X221A1~",
            f"ST*{transaction_set}*0001~",
            f"BPR*C*{payment_amount}*C*CHK~",
            "TRN*1*CHK001~",
            "SE*3*0001~",
            "GE*1*000001~",
            f"IEA*1*{iea_control}~",
        ]
    )


FIXED_NOW = datetime(2024, 3, 15, 14, 30)


@pytest.fixture
def multi_claim_835() -> str:
    return SAMPLE_835_MULTI_CLAIM


@pytest.fixture
def check_single_835() -> str:
    return SAMPLE_835_CHECK_SINGLE


@pytest.fixture
def reversal_835() -> str:
    return SAMPLE_835_REVERSAL


@pytest.fixture
def pt_denials_835() -> str:
    return SAMPLE_835_PT_DENIALS


@pytest.fixture
def fixed_clock():
    """Clock that always returns 2024-03-15 14:30."""
    return lambda: FIXED_NOW


@pytest.fixture
def control_numbers() -> SequentialControlNumbers:
    """Sequential control numbers starting at 1."""
    return SequentialControlNumbers(start=1)


@pytest.fixture
def sample_claim() -> dict[str, Any]:
    """Sample 837P claim for a physical therapy evaluation and treatment."""
    return {
        "submitter": {
            "name": "SOUTH TEXAS PT CLINIC",
            "submitter_id": "STPT001",
            "contact_name": "BILLING DEPT",
            "contact_phone": "(956) 555-0100",
            "contact_email": "billing@stptclinic.example",
        },
        "receiver": {"name": "TMHP", "identifier": "TMHP"},
        "billing_provider": {
            "name": "SOUTH TEXAS PT CLINIC",
            "npi": "1234567890",
            "tax_id": "74-1234567",
            "taxonomy_code": "225100000X",
            "address1": "1200 S 10th St",
            "city": "McAllen",
            "state": "tx",
            "zip": "78501",
        },
        "rendering_provider": {
            "npi": "9876543210",
            "last_name": "Garcia",
            "first_name": "Maria",
            "taxonomy_code": "225100000X",
        },
        "payer": {"name": "TEXAS MEDICAID", "identifier": "TXMCD"},
        "patient": {
            "first_name": "John",
            "last_name": "Doe",
            "date_of_birth": "1980-05-20",
            "gender": "male",
            "member_id": "123456789",
            "address1": "500 Main St",
            "address2": "Apt 4",
            "city": "Edinburg",
            "state": "TX",
            "zip": "78539",
        },
        "claim": {
            "claim_id": "CLAIM001",
            "total_charge": "230.00",
            "place_of_service": "11",
            "date_of_service": "2024-01-15",
            "prior_auth_number": "PA123456",
            "diagnosis_codes": ["M54.5", "m62.81"],
        },
        "service_lines": [
            {
                "cpt_code": "97161",
                "modifiers": ["GP"],
                "charge_amount": "150.00",
                "units": 1,
                "diagnosis_pointers": [1, 2],
            },
            {
                "cpt_code": "97110",
                "modifiers": ["GP", "59"],
                "charge_amount": "80.00",
                "units": 2,
                "date_of_service": "2024-01-16",
            },
        ],
    }


@pytest.fixture
def sample_inquiry() -> dict[str, Any]:
    """Sample 270 eligibility inquiry."""
    return {
        "submitter_id": "STPT001",
        "payer": {"name": "TEXAS MEDICAID", "identifier": "TXMCD"},
        "provider": {"name": "SOUTH TEXAS PT CLINIC", "npi": "1234567890"},
        "subscriber": {
            "member_id": "123456789",
            "first_name": "Jane",
            "last_name": "Smith",
            "date_of_birth": "1975-11-02",
            "gender": "female",
        },
        "date_of_service": "2024-03-15",
    }
