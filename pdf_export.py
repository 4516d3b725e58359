# pdf_export.py
"""
Maintenance history export.

The document is assembled as Pandoc markdown (title block, one pipe table
per property, page footer "Strana N z M") and compiled to PDF by Pandoc
through a LaTeX engine. Pandoc must be installed on the host, together
with the engine named by PDF_ENGINE.
"""
import logging
import os
import re
import tempfile
from datetime import date
from typing import Iterable, Optional, Sequence

from pypandoc import convert_text

from entities import MaintenanceEvent, Property
from exceptions import ExportError
from labels import format_date, translate_category, translate_period

logger = logging.getLogger(__name__)

DOCUMENT_TITLE = "Historie údržby"
TABLE_HEADER = ["Datum", "Název", "Kategorie", "Periodicita", "Poznámky"]
# Relative column widths (pipe-table dash counts).
COLUMN_WIDTHS = [5, 8, 5, 5, 14]
DEFAULT_PDF_ENGINE = "xelatex"

FOOTER_LATEX = r"""\usepackage{fancyhdr}
\usepackage{lastpage}
\pagestyle{fancy}
\fancyhf{}
\renewcommand{\headrulewidth}{0pt}
\fancyfoot[R]{\small Strana \thepage\ z \pageref{LastPage}}
\fancypagestyle{plain}{\fancyhf{}\renewcommand{\headrulewidth}{0pt}\fancyfoot[R]{\small Strana \thepage\ z \pageref{LastPage}}}"""

_MARKDOWN_SPECIAL = re.compile(r"([\\`*_{}\[\]<>#+|$~^])")


def escape_markdown(text: Optional[str]) -> str:
    if not text:
        return ""
    flat = " ".join(text.split())
    return _MARKDOWN_SPECIAL.sub(r"\\\1", flat)


def table_rows(events: Iterable[MaintenanceEvent]) -> list[list[str]]:
    return [
        [
            format_date(e.date),
            e.title,
            translate_category(e.category),
            translate_period(e.recurring_period),
            e.notes or "",
        ]
        for e in events
    ]


def group_by_property(
    events: Iterable[MaintenanceEvent], properties: Iterable[Property]
) -> list[tuple[Property, list[MaintenanceEvent]]]:
    """Groups in order of first appearance; events of unknown properties are dropped."""
    by_id = {p.id: p for p in properties}
    groups: dict[str, list[MaintenanceEvent]] = {}
    for event in events:
        if event.property_id not in by_id:
            continue
        groups.setdefault(event.property_id, []).append(event)
    return [(by_id[pid], evs) for pid, evs in groups.items()]


def _markdown_table(rows: list[list[str]]) -> str:
    lines = [
        "| " + " | ".join(TABLE_HEADER) + " |",
        "|" + "|".join("-" * w for w in COLUMN_WIDTHS) + "|",
    ]
    for row in rows:
        lines.append("| " + " | ".join(escape_markdown(cell) for cell in row) + " |")
    return "\n".join(lines)


def _front_matter(generated_on: date, subtitle: Optional[str]) -> str:
    lines = [
        "---",
        f'title: "{DOCUMENT_TITLE}"',
    ]
    if subtitle:
        lines.append(f'subtitle: "{subtitle}"')
    lines += [
        f'date: "Vygenerováno: {format_date(generated_on)}"',
        "lang: cs",
        "geometry: margin=2cm",
        "header-includes: |",
        "  ```{=latex}",
    ]
    lines += ["  " + line for line in FOOTER_LATEX.splitlines()]
    lines += ["  ```", "---"]
    return "\n".join(lines)


def _photo_section(events: Sequence[MaintenanceEvent]) -> str:
    with_photo = [e for e in events if e.photo]
    if not with_photo:
        return ""
    parts = ["## Fotografie", ""]
    for event in with_photo:
        parts.append(f"**Obrázek k údržbě: {escape_markdown(event.title)}**")
        parts.append("")
        parts.append("> Místo pro obrázek údržby")
        parts.append("")
    return "\n".join(parts)


def build_document(
    events: Sequence[MaintenanceEvent],
    properties: Sequence[Property],
    generated_on: Optional[date] = None,
    include_photos: bool = False,
) -> str:
    generated_on = generated_on or date.today()
    groups = group_by_property(events, properties)

    subtitle = None
    if len(properties) == 1:
        subtitle = f"Nemovitost: {properties[0].name}".replace("\\", "/").replace('"', "'")

    parts = [_front_matter(generated_on, subtitle), ""]

    for index, (prop, prop_events) in enumerate(groups):
        if subtitle is None:
            parts.append(f"## Nemovitost: {escape_markdown(prop.name)}")
            parts.append("")
            if prop.address:
                parts.append(f"Adresa: {escape_markdown(prop.address)}")
                parts.append("")
        parts.append(_markdown_table(table_rows(prop_events)))
        parts.append("")
        if index < len(groups) - 1:
            parts.append("---")
            parts.append("")

    if not groups:
        parts.append("Žádné záznamy o údržbě.")
        parts.append("")

    if include_photos:
        included = [e for _, evs in groups for e in evs]
        section = _photo_section(included)
        if section:
            parts.append(section)

    return "\n".join(parts)


def render_pdf(
    events: Sequence[MaintenanceEvent],
    properties: Sequence[Property],
    generated_on: Optional[date] = None,
    include_photos: bool = False,
    pdf_engine: str = DEFAULT_PDF_ENGINE,
) -> bytes:
    source = build_document(events, properties, generated_on=generated_on, include_photos=include_photos)

    fd, out_path = tempfile.mkstemp(suffix=".pdf", prefix="udrzba_")
    os.close(fd)
    try:
        convert_text(
            source,
            to="pdf",
            format="markdown",
            outputfile=out_path,
            extra_args=[f"--pdf-engine={pdf_engine}"],
        )
        with open(out_path, "rb") as fh:
            data = fh.read()
    except (OSError, RuntimeError) as e:
        logger.error("PDF generation failed: %s", e)
        raise ExportError(f"Nepodařilo se vytvořit PDF: {e}") from e
    finally:
        if os.path.exists(out_path):
            os.remove(out_path)

    if not data:
        raise ExportError("Nepodařilo se vytvořit PDF: prázdný výstup.")

    logger.info("Rendered maintenance PDF: %d events, %d bytes", len(events), len(data))
    return data


def export_filename(properties: Sequence[Property], today: Optional[date] = None) -> str:
    if len(properties) == 1:
        return f"udrzba_{properties[0].name.replace(' ', '_')}.pdf"
    today = today or date.today()
    return f"udrzba_nemovitosti_{today.isoformat()}.pdf"
