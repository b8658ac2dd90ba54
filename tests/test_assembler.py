"""
Test cases for building the output PDF.
"""

import io

import pytest
from pypdf import PdfReader
from pypdf.generic import IndirectObject, NameObject, NumberObject

from pdf_rasterizer.assembler import DocumentAssembler, ObjectStore, assemble_document, image_name
from pdf_rasterizer.encoder import encode_jpeg
from pdf_rasterizer.exceptions import AssemblyError
from pdf_rasterizer.types import EncodedPage


def _encoded(index, width, height):
    shade = (index * 60) % 256
    data = encode_jpeg(bytes([shade, 255 - shade, 90]) * (width * height), width, height)
    return EncodedPage(index=index, width=width, height=height, data=data)


@pytest.fixture()
def pages():
    return [_encoded(0, 40, 20), _encoded(1, 20, 40), _encoded(2, 30, 30)]


def test_output_has_one_page_per_input_in_order(pages):
    reader = PdfReader(io.BytesIO(assemble_document(pages, 72)))

    assert len(reader.pages) == 3
    sizes = [(float(page.mediabox.width), float(page.mediabox.height)) for page in reader.pages]
    assert sizes == [(40.0, 20.0), (20.0, 40.0), (30.0, 30.0)]


def test_page_size_follows_dpi():
    data = assemble_document([_encoded(0, 150, 300)], 150)
    page = PdfReader(io.BytesIO(data)).pages[0]

    assert float(page.mediabox.width) == pytest.approx(72.0)
    assert float(page.mediabox.height) == pytest.approx(144.0)
    assert page.mediabox.left == 0 and page.mediabox.bottom == 0


def test_each_page_draws_its_own_image(pages):
    reader = PdfReader(io.BytesIO(assemble_document(pages, 72)))

    for position, (page, source) in enumerate(zip(reader.pages, pages)):
        name = f"/Im{position}"
        xobjects = page["/Resources"]["/XObject"]
        assert list(xobjects.keys()) == [name]

        image = xobjects[name].get_object()
        assert image["/Subtype"] == "/Image"
        assert image["/Filter"] == "/DCTDecode"
        assert image["/ColorSpace"] == "/DeviceRGB"
        assert image["/BitsPerComponent"] == 8
        assert (image["/Width"], image["/Height"]) == (source.width, source.height)
        assert image._data == source.data

        content = page["/Contents"].get_object().get_data().decode("ascii")
        assert content == f"q\n{source.width} 0 0 {source.height} 0 0 cm\n{name} Do\nQ"


def test_pages_point_at_the_page_tree(pages):
    assembler = DocumentAssembler(72)
    assembler.add_pages(pages)
    reader = PdfReader(io.BytesIO(assembler.finish()))

    root = reader.trailer["/Root"]
    tree_ref = root.raw_get("/Pages")
    tree = tree_ref.get_object()
    assert tree["/Type"] == "/Pages"
    assert tree["/Count"] == 3
    assert [kid.idnum for kid in tree.raw_get("/Kids")] == [ref.idnum for ref in assembler.page_refs]
    for page in reader.pages:
        assert page.raw_get("/Parent").idnum == tree_ref.idnum


def test_header_and_trailer(pages):
    data = assemble_document(pages, 72)

    assert data.startswith(b"%PDF-1.5\n")
    assert b"\nxref\n0 " in data
    assert data.rstrip().endswith(b"%%EOF")


def test_layouts_are_recorded(pages):
    assembler = DocumentAssembler(144)
    assembler.add_pages(pages)

    assert assembler.page_count == 3
    assert [(layout.width, layout.height) for layout in assembler.layouts] == [
        pytest.approx((20.0, 10.0)),
        pytest.approx((10.0, 20.0)),
        pytest.approx((15.0, 15.0)),
    ]


def test_pages_must_arrive_in_order(pages):
    assembler = DocumentAssembler(72)
    with pytest.raises(AssemblyError, match="expected 0, got 1"):
        assembler.add_page(pages[1])


def test_empty_image_is_rejected():
    assembler = DocumentAssembler(72)
    with pytest.raises(AssemblyError, match="no image data"):
        assembler.add_page(EncodedPage(index=0, width=10, height=10, data=b""))


def test_document_without_pages_is_rejected():
    with pytest.raises(AssemblyError, match="without pages"):
        DocumentAssembler(72).finish()


def test_finished_document_cannot_be_reused(pages):
    assembler = DocumentAssembler(72)
    assembler.add_page(pages[0])
    assembler.finish()

    with pytest.raises(AssemblyError, match="already been finished"):
        assembler.add_page(pages[1])
    with pytest.raises(AssemblyError, match="already been finished"):
        assembler.finish()


def test_invalid_dpi_is_rejected():
    with pytest.raises(ValueError):
        DocumentAssembler(0)


def test_image_names():
    assert image_name(0) == "/Im0"
    assert image_name(12) == "/Im12"


class TestObjectStore:
    """Test cases for the object table."""

    def test_allocate_returns_handles_in_order(self):
        store = ObjectStore()
        first = store.allocate(NumberObject(1))
        second = store.allocate(NumberObject(2))

        assert (first.idnum, second.idnum) == (1, 2)
        assert first.get_object() == 1
        assert second.get_object() == 2
        assert len(store) == 2

    def test_reserved_object_must_be_filled(self):
        store = ObjectStore()
        ref = store.reserve()
        root = store.allocate(NumberObject(0))

        with pytest.raises(AssemblyError, match="never defined"):
            store.get_object(ref)
        with pytest.raises(AssemblyError, match="never defined"):
            store.serialize(root)

    def test_fill_resolves_reservation(self):
        store = ObjectStore()
        ref = store.reserve()
        store.fill(ref, NameObject("/Filled"))

        assert ref.get_object() == "/Filled"
        with pytest.raises(AssemblyError, match="already defined"):
            store.fill(ref, NameObject("/Again"))

    def test_foreign_reference_is_rejected(self):
        store = ObjectStore()
        store.allocate(NumberObject(1))

        with pytest.raises(AssemblyError, match="does not belong"):
            store.get_object(IndirectObject(1, 0, ObjectStore()))
        with pytest.raises(AssemblyError, match="does not belong"):
            store.get_object(IndirectObject(5, 0, store))
