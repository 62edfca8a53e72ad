"""Pytest configuration and fixtures."""

import io
from typing import Callable

import pytest
from fastapi.testclient import TestClient
from pptx import Presentation as PptxPresentation
from pptx.dml.color import RGBColor as PptxRGBColor
from pptx.enum.shapes import MSO_CONNECTOR, MSO_SHAPE
from pptx.util import Inches, Pt

from factories import PNG_BYTES, build_deck, fragment, rect_sp, slide_xml
from pptxdom.config import Settings
from pptxdom.parser.xml_tree import XmlNode


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment."""
    return Settings(_env_file=None, max_workers=1, theme_cache_size=10)


@pytest.fixture
def parse_fragment() -> Callable[[str], XmlNode]:
    """Decode a DrawingML fragment with the a/p/r prefixes declared."""
    return fragment


@pytest.fixture
def simple_deck() -> bytes:
    """Two valid slides: a red rectangle, then a text box."""
    return build_deck(
        [
            slide_xml(rect_sp(), name="Intro"),
            slide_xml(rect_sp(3, "TextBox 2", fill="", text="Hello", tx_box=True)),
        ]
    )


@pytest.fixture
def pptx_deck() -> bytes:
    """A deck written by python-pptx with shapes, text, a connector and a picture."""
    prs = PptxPresentation()

    slide = prs.slides.add_slide(prs.slide_layouts[6])
    box = slide.shapes.add_shape(MSO_SHAPE.ROUNDED_RECTANGLE, Inches(1), Inches(1), Inches(2), Inches(1))
    box.fill.solid()
    box.fill.fore_color.rgb = PptxRGBColor(0x0D, 0x94, 0x88)

    text_box = slide.shapes.add_textbox(Inches(1), Inches(3), Inches(4), Inches(1))
    text_box.text_frame.text = "Quarterly results"
    run = text_box.text_frame.paragraphs[0].runs[0]
    run.font.bold = True
    run.font.size = Pt(28)

    slide.shapes.add_connector(MSO_CONNECTOR.STRAIGHT, Inches(1), Inches(5), Inches(4), Inches(5))
    slide.shapes.add_picture(io.BytesIO(PNG_BYTES), Inches(6), Inches(1), Inches(1), Inches(1))

    agenda = prs.slides.add_slide(prs.slide_layouts[1])
    agenda.shapes.title.text = "Agenda"

    buffer = io.BytesIO()
    prs.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def client() -> TestClient:
    """Create a test client for the FastAPI app."""
    from pptxdom.api.main import app

    return TestClient(app)
