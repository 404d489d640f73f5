import html
import logging
import re

from fpdf import FPDF

from onboarding.config import settings
from onboarding.utils.formatting import escape_html

logger = logging.getLogger(__name__)

PAGE_FORMATS = {"a3", "a4", "a5", "letter", "legal"}

PRINT_STYLESHEET = """\
* { box-sizing: border-box; }
body {
  font-family: -apple-system, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif;
  line-height: 1.55;
  color: #111827;
  margin: 0;
  padding: 20px;
  background: #fff;
}
h1, h2, h3, h4, h5, h6 { color: #0f172a; margin: 14px 0 8px; }
h1 { font-size: 24px; font-weight: 700; }
h2 { font-size: 20px; font-weight: 600; }
h3 { font-size: 18px; font-weight: 600; }
h4 { font-size: 16px; font-weight: 600; }
p { margin: 6px 0; }
table { width: 100%; border-collapse: collapse; margin: 8px 0; border: 1px solid #e2e8f0; }
th, td { padding: 8px; text-align: left; border-bottom: 1px solid #e2e8f0; font-size: 12px; color: #374151; }
th { background: #f8fafc; font-weight: 600; }
ul, ol { padding-left: 18px; margin: 6px 0; }
li { margin: 4px 0; }
.signature-block { margin: 20px 0; padding: 12px; border: 1px solid #e2e8f0; border-radius: 8px; page-break-inside: avoid; }
.addendum-block { margin: 20px 0; padding: 12px; background: #fef3c7; border: 1px solid #f59e0b; border-radius: 8px; }
.footer-block { margin-top: 30px; padding-top: 20px; border-top: 1px solid #e2e8f0; color: #6b7280; font-size: 12px; text-align: center; }
.initials-page { page-break-before: always; break-before: page; }
.document-placeholder { padding: 24px; color: #6b7280; text-align: center; }
"""

_PRINT_BUTTON_STYLE = """\
.print-button {
  position: fixed; top: 20px; right: 20px;
  background: #3b82f6; color: #fff; border: none; border-radius: 6px;
  padding: 10px 18px; font-size: 14px; cursor: pointer;
}
.print-button:hover { background: #2563eb; }
@media print {
  .no-print { display: none !important; }
  body { padding: 0; }
}
"""

_STRIP_BLOCKS = re.compile(r"<(head|style|script|button|noscript)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_ENTITY = re.compile(r"&(#[0-9]+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);")

# Core PDF fonts only cover latin-1
_TYPOGRAPHY = str.maketrans({
    "—": "-",
    "–": "-",
    "‒": "-",
    "‑": "-",
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
    "•": "-",
    "…": "...",
    "≥": ">=",
    "≤": "<=",
    "™": "(TM)",
    "€": "EUR",
})


class PDFRenderError(Exception):
    pass


def _latin1(text: str) -> str:
    """Map typographic characters to ASCII, then drop what latin-1 cannot hold."""
    return text.translate(_TYPOGRAPHY).encode("latin-1", errors="replace").decode("latin-1")


def _decode_wide_entity(match: re.Match) -> str:
    decoded = html.unescape(match.group(0))
    if len(decoded) == 1 and ord(decoded) > 255:
        return escape_html(_latin1(decoded))
    return match.group(0)


def prepare_for_pdf(markup: str) -> str:
    markup = _STRIP_BLOCKS.sub("", markup)
    markup = _ENTITY.sub(_decode_wide_entity, markup)
    return _latin1(markup)


class DocumentPDF(FPDF):
    def __init__(self, header_text: str | None = None, **kwargs):
        super().__init__(**kwargs)
        self.header_text = _latin1(header_text) if header_text else None

    def header(self):
        if not self.header_text:
            return
        self.set_font("Helvetica", "", 8)
        self.set_text_color(102, 102, 102)
        self.cell(0, 6, self.header_text, align="C", new_x="LMARGIN", new_y="NEXT")
        self.ln(2)

    def footer(self):
        self.set_y(-12)
        self.set_font("Helvetica", "", 8)
        self.set_text_color(102, 102, 102)
        self.cell(0, 6, f"Page {self.page_no()} of {{nb}}", align="C")


def normalize_page_format(page_format: str | None) -> str:
    value = (page_format or settings.pdf_format).strip().lower()
    if value not in PAGE_FORMATS:
        raise PDFRenderError(f"Unsupported page format: {page_format}")
    return value


def render_pdf(
    markup: str,
    page_format: str | None = None,
    title: str | None = None,
    header_text: str | None = None,
) -> bytes:
    """Render an HTML document or fragment to PDF bytes with fpdf2."""
    fmt = normalize_page_format(page_format)
    try:
        pdf = DocumentPDF(header_text=header_text, format=fmt)
        margin = settings.pdf_margin_mm
        pdf.set_margins(margin, margin, margin)
        pdf.set_auto_page_break(auto=True, margin=margin + 6)
        if title:
            pdf.set_title(_latin1(title))
        pdf.add_page()
        pdf.set_font("Helvetica", "", 11)
        pdf.write_html(prepare_for_pdf(markup))
        return bytes(pdf.output())
    except Exception as exc:
        logger.error("PDF rendering failed: %s", exc)
        raise PDFRenderError(str(exc)) from exc


def wrap_html_document(body: str, title: str) -> str:
    """Self-contained page with the print stylesheet inlined."""
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n<head>\n<meta charset="utf-8">\n'
        f"<title>{escape_html(title)}</title>\n"
        f"<style>\n{PRINT_STYLESHEET}</style>\n"
        f"</head>\n<body>\n{body}\n</body>\n</html>\n"
    )


def render_print_page(body: str, title: str, page_format: str | None = None, margin: str = "0.5in") -> str:
    """Browser print view: the wrapped document plus a print button hidden on paper."""
    fmt = normalize_page_format(page_format)
    page_size = fmt.upper() if fmt.startswith("a") else fmt.capitalize()
    page_rule = f"@page {{ size: {page_size} portrait; margin: {escape_html(margin)}; }}\n"
    controls = (
        '<button class="print-button no-print" type="button" onclick="window.print()">'
        "Print / Save as PDF</button>\n"
    )
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n<head>\n<meta charset="utf-8">\n'
        f"<title>{escape_html(title)}</title>\n"
        f"<style>\n{PRINT_STYLESHEET}{_PRINT_BUTTON_STYLE}{page_rule}</style>\n"
        f"</head>\n<body>\n{controls}{body}\n</body>\n</html>\n"
    )
