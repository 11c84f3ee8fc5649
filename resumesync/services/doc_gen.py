# resumesync/services/doc_gen.py
from __future__ import annotations

from pathlib import Path
from typing import Dict, Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..config import settings


# --------------------------
# Templates
# --------------------------
def _env(tmpl_dir: Path | None = None) -> Environment:
    return Environment(
        loader=FileSystemLoader(str(tmpl_dir or settings.template_path)),
        autoescape=select_autoescape(["html", "j2", "jinja"]),
        enable_async=False,
    )


# --------------------------
# Public API
# --------------------------
def render_resume_html(ctx: Dict[str, Any], tmpl_dir: Path | None = None) -> str:
    """Render resume HTML from templates/resume.html.j2 with context."""
    return _env(tmpl_dir).get_template("resume.html.j2").render(**ctx)


def html_to_pdf_bytes(html: str) -> bytes:
    """Print HTML to PDF with headless Chromium. Blocking; call from a worker thread."""
    from playwright.sync_api import sync_playwright
    with sync_playwright() as p:
        browser = p.chromium.launch(headless=True)
        try:
            page = browser.new_page()
            page.set_content(html, wait_until="load")
            page.emulate_media(media="screen")
            return page.pdf(print_background=True, prefer_css_page_size=True)
        finally:
            browser.close()
