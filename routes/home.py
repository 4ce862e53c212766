# routes/home.py
# Static usage page served at the root. Not part of the JSON API.

from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["home"])

USAGE_TEMPLATE_PATH = Path(__file__).resolve().parent.parent / "templates" / "usage.html"


@router.get("/", response_class=HTMLResponse)
def usage_page():
    try:
        html = USAGE_TEMPLATE_PATH.read_text(encoding="utf-8")
    except FileNotFoundError as exc:  # pragma: no cover - setup issue
        raise HTTPException(status_code=500, detail="Usage page template missing") from exc
    return HTMLResponse(html)
