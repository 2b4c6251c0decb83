"""API route modules for the EDI backend.

Routers:
- edi: 837P/270 generation, 835 validation, parsing and payment summaries
"""

from .edi import router as edi_router

__all__ = ["edi_router"]
