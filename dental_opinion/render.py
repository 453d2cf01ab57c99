from datetime import datetime
from pathlib import Path
from typing import List, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

from dental_opinion.flow import SubmissionFlow
from dental_opinion.intake import ACCEPT_ATTRIBUTE

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
UPLOAD_HINT = "PNG, JPG, DICOM up to 10MB"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render_page(request: Request, flow: SubmissionFlow, warnings: Optional[List[str]] = None):
    """Full page for the current flow state: form, error banner and result card."""
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "flow": flow,
            "warnings": warnings or [],
            "accept": ACCEPT_ATTRIBUTE,
            "upload_hint": UPLOAD_HINT,
            "year": datetime.now().year,
        },
    )
