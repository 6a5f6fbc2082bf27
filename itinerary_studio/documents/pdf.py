"""
PDF export of an itinerary document.

Layout follows the preview: a title block, an overview panel and one block per
section. ReportLab's frame layout breaks the content into A4 pages, page after
page until everything is placed.
"""

import logging
from io import BytesIO
from typing import Callable, List, Optional
from xml.sax.saxutils import escape

import httpx
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Image, KeepTogether, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from itinerary_studio.core.config import settings
from itinerary_studio.documents.builder import DocumentSection, ItineraryDocument

logger = logging.getLogger(__name__)

ImageFetcher = Callable[[str], Optional[bytes]]

# Built-in PDF fonts only cover Latin-1 style encodings
_PDF_REPLACEMENTS = {"→": "->", "←": "<-", "★": "*"}

MAX_IMAGE_WIDTH = 8 * cm
MAX_IMAGE_HEIGHT = 5 * cm


def fetch_image(url: str) -> Optional[bytes]:
    """
    Downloads an image for embedding. Returns None when it cannot be fetched.
    """
    try:
        response = httpx.get(url, timeout=settings.IMAGE_FETCH_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
        return response.content
    except httpx.HTTPStatusError as e:
        logger.warning("Image %s returned %s, leaving it out", url, e.response.status_code)
        return None
    except httpx.HTTPError as e:
        logger.warning("Image %s could not be fetched (%s), leaving it out", url, e)
        return None


def _plain(value: str) -> str:
    for old, new in _PDF_REPLACEMENTS.items():
        value = value.replace(old, new)
    return value


def _text(value: str) -> str:
    return escape(_plain(value))


class PDFItineraryRenderer:
    """Renders an ItineraryDocument to PDF bytes."""

    COLOR_PRIMARY = colors.HexColor('#F97316')
    COLOR_TEXT = colors.HexColor('#1F2937')
    COLOR_GRAY = colors.HexColor('#6B7280')
    COLOR_LIGHT_GRAY = colors.HexColor('#F3F4F6')

    def __init__(self, image_fetcher: Optional[ImageFetcher] = None, embed_images: Optional[bool] = None):
        self.image_fetcher = image_fetcher or fetch_image
        self.embed_images = settings.PDF_EMBED_IMAGES if embed_images is None else embed_images
        self.styles = getSampleStyleSheet()
        self._create_custom_styles()

    def _create_custom_styles(self):
        self.styles.add(ParagraphStyle(
            name='DocTitle',
            parent=self.styles['Title'],
            fontSize=26,
            textColor=self.COLOR_TEXT,
            spaceAfter=8,
            alignment=TA_CENTER,
            fontName='Helvetica-Bold'
        ))
        self.styles.add(ParagraphStyle(
            name='DocSubtitle',
            parent=self.styles['Normal'],
            fontSize=14,
            textColor=self.COLOR_PRIMARY,
            spaceAfter=20,
            alignment=TA_CENTER,
            fontName='Helvetica'
        ))
        self.styles.add(ParagraphStyle(
            name='SectionHeader',
            parent=self.styles['Heading2'],
            fontSize=16,
            textColor=self.COLOR_PRIMARY,
            spaceBefore=14,
            spaceAfter=6,
            fontName='Helvetica-Bold'
        ))
        self.styles.add(ParagraphStyle(
            name='SectionSubheader',
            parent=self.styles['Normal'],
            fontSize=10,
            textColor=self.COLOR_GRAY,
            spaceAfter=6,
            fontName='Helvetica'
        ))
        self.styles.add(ParagraphStyle(
            name='Body',
            parent=self.styles['Normal'],
            fontSize=10.5,
            textColor=self.COLOR_TEXT,
            spaceAfter=6,
            leading=14,
            fontName='Helvetica'
        ))
        self.styles.add(ParagraphStyle(
            name='FieldLabel',
            parent=self.styles['Normal'],
            fontSize=10,
            textColor=self.COLOR_TEXT,
            fontName='Helvetica-Bold'
        ))

    # --- building blocks ---

    def _fields_table(self, section: DocumentSection) -> Table:
        data = [
            [Paragraph(_text(f.label), self.styles['FieldLabel']), Paragraph(_text(f.value), self.styles['Body'])]
            for f in section.fields
        ]
        table = Table(data, colWidths=[4 * cm, 12.5 * cm])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (0, -1), self.COLOR_LIGHT_GRAY),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
            ('TOPPADDING', (0, 0), (-1, -1), 6),
            ('GRID', (0, 0), (-1, -1), 0.5, self.COLOR_GRAY),
        ]))
        return table

    def _image(self, url: str) -> Optional[Image]:
        data = self.image_fetcher(url)
        if not data:
            return None
        try:
            width, height = ImageReader(BytesIO(data)).getSize()
        except Exception as e:
            # Undecodable images are dropped the same way unreachable ones are
            logger.warning("Image %s could not be decoded (%s), leaving it out", url, e)
            return None
        scale = min(MAX_IMAGE_WIDTH / width, MAX_IMAGE_HEIGHT / height)
        return Image(BytesIO(data), width=width * scale, height=height * scale)

    def _section(self, section: DocumentSection) -> List:
        heading = [Paragraph(_text(section.heading), self.styles['SectionHeader'])]
        if section.subheading:
            heading.append(Paragraph(_text(section.subheading), self.styles['SectionSubheader']))

        elements: List = []
        if section.body:
            elements.append(Paragraph(_text(section.body), self.styles['Body']))
        if section.fields:
            elements.append(self._fields_table(section))
            elements.append(Spacer(1, 0.2 * cm))
        for item in section.items:
            elements.append(Paragraph(f"&bull; {_text(item)}", self.styles['Body']))

        if self.embed_images:
            images = [img for img in (self._image(url) for url in section.images) if img is not None]
            if images:
                row = Table([images], hAlign='LEFT')
                row.setStyle(TableStyle([('LEFTPADDING', (0, 0), (-1, -1), 0)]))
                elements.append(row)

        # keep a heading on the same page as the start of its content
        first = elements[:1]
        return [KeepTogether(heading + first)] + elements[1:]

    def _page_decorations(self, footer: str):
        def draw(canvas, doc):
            canvas.saveState()
            canvas.setFont('Helvetica', 8)
            canvas.setFillColor(self.COLOR_GRAY)
            canvas.drawString(2 * cm, 1.2 * cm, _plain(footer))
            canvas.drawRightString(A4[0] - 2 * cm, 1.2 * cm, f"Page {doc.page}")
            canvas.restoreState()
        return draw

    # --- entry point ---

    def render(self, document: ItineraryDocument) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=2 * cm,
            leftMargin=2 * cm,
            topMargin=2 * cm,
            bottomMargin=2 * cm,
            title=document.title,
        )

        story: List = [
            Paragraph(_text(document.title), self.styles['DocTitle']),
            Paragraph(_text(document.subtitle), self.styles['DocSubtitle']),
            Paragraph(_text(document.overview), self.styles['Body']),
        ]
        for section in document.sections:
            story.extend(self._section(section))

        decorate = self._page_decorations(document.footer)
        doc.build(story, onFirstPage=decorate, onLaterPages=decorate)
        return buffer.getvalue()


def render_pdf(
    document: ItineraryDocument,
    image_fetcher: Optional[ImageFetcher] = None,
    embed_images: Optional[bool] = None,
) -> bytes:
    return PDFItineraryRenderer(image_fetcher=image_fetcher, embed_images=embed_images).render(document)
