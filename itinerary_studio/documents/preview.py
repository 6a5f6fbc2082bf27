from html import escape
from typing import List

from itinerary_studio.documents.builder import DocumentSection, ItineraryDocument

PREVIEW_STYLE = """
body { font-family: system-ui, -apple-system, sans-serif; color: #1f2937; line-height: 1.5; margin: 0; background: #f8fafc; }
.page { max-width: 210mm; margin: 0 auto; background: white; padding: 15mm; }
.hero { background: #1f2937; color: white; text-align: center; padding: 48px 32px; border-radius: 12px; margin-bottom: 24px; }
.hero h1 { margin: 0 0 8px 0; font-size: 32px; }
.status { display: inline-block; background: #f97316; color: white; padding: 4px 16px; border-radius: 16px; font-size: 13px; }
.overview { background: #f8fafc; border-left: 6px solid #f97316; border-radius: 12px; padding: 20px; margin-bottom: 24px; }
section { border-radius: 8px; padding: 16px 20px; margin-bottom: 16px; box-shadow: 0 2px 10px rgba(0,0,0,0.08); }
section h2 { color: #f97316; margin: 0 0 8px 0; font-size: 20px; }
section h3 { color: #6b7280; margin: 0 0 12px 0; font-size: 14px; font-weight: 500; }
dl { display: grid; grid-template-columns: max-content 1fr; gap: 4px 16px; margin: 0 0 8px 0; }
dt { font-weight: 600; }
dd { margin: 0; }
.images img { width: 48%; border-radius: 8px; margin: 4px 1% 0 0; }
footer { color: #6b7280; font-size: 12px; text-align: center; margin-top: 24px; }
"""

# Broken images are hidden instead of showing a broken-image icon
IMG_ONERROR = "this.style.display='none'"


def _render_section(section: DocumentSection) -> str:
    parts: List[str] = [f'<section id="{escape(section.key)}">', f"<h2>{escape(section.heading)}</h2>"]
    if section.subheading:
        parts.append(f"<h3>{escape(section.subheading)}</h3>")
    if section.body:
        parts.append(f"<p>{escape(section.body)}</p>")
    if section.fields:
        parts.append("<dl>")
        for field in section.fields:
            parts.append(f"<dt>{escape(field.label)}</dt><dd>{escape(field.value)}</dd>")
        parts.append("</dl>")
    if section.items:
        parts.append("<ul>")
        parts.extend(f"<li>{escape(item)}</li>" for item in section.items)
        parts.append("</ul>")
    if section.images:
        parts.append('<div class="images">')
        parts.extend(
            f'<img src="{escape(url)}" alt="" loading="lazy" onerror="{IMG_ONERROR}">'
            for url in section.images
        )
        parts.append("</div>")
    parts.append("</section>")
    return "\n".join(parts)


def render_preview(document: ItineraryDocument) -> str:
    """
    Renders the document as a standalone HTML page for on-screen preview.
    """
    sections = "\n".join(_render_section(s) for s in document.sections)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{escape(document.title)}</title>
<style>{PREVIEW_STYLE}</style>
</head>
<body>
<div class="page">
<div class="hero">
<h1>{escape(document.title)}</h1>
<p>{escape(document.subtitle)}</p>
<span class="status">{escape(document.status)}</span>
</div>
<div class="overview"><p>{escape(document.overview)}</p></div>
{sections}
<footer>{escape(document.footer)}</footer>
</div>
</body>
</html>
"""
