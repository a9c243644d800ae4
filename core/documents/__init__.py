"""
Rewardify Documents - Public API
================================
"""

from core.documents.pdf_renderer import INVOICE_COLUMNS, render_invoice_pdf

__all__ = [
    "INVOICE_COLUMNS",
    "render_invoice_pdf",
]
