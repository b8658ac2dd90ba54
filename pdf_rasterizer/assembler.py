"""Minimal PDF reconstruction from encoded page images.

The assembler never touches the source document's object graph. For every
page, in order, it creates an image XObject holding the JPEG bytes
verbatim, a placement stream drawing that image over the whole page, a
resource dictionary naming the image, and the page dictionary itself. It
then adds the page tree, back-fills each page's ``/Parent``, adds the
catalog and serializes the result with a classic cross-reference table.

Every object reference is the handle returned when the object was
allocated; references are never derived from allocation order.
"""

from __future__ import annotations

import io
import logging
from typing import Iterable

from pypdf import PdfReader
from pypdf.generic import (
    ArrayObject,
    DictionaryObject,
    FloatObject,
    IndirectObject,
    NameObject,
    NullObject,
    NumberObject,
    PdfObject,
    StreamObject,
)

from .exceptions import AssemblyError
from .geometry import Unit, format_number, page_layout
from .options import PDF_VERSION
from .types import EncodedPage, PageLayout

_LOGGER = logging.getLogger("pdf_rasterizer.assembler")

__all__ = ["ObjectStore", "DocumentAssembler", "assemble_document", "image_name"]


class ObjectStore:
    """Object table with an id allocator.

    Ids are handed out sequentially starting at 1. ``allocate`` and
    ``reserve`` both return the real :class:`IndirectObject` handle for the
    new id; a reserved id must be filled before serialization.
    """

    def __init__(self) -> None:
        self._objects: list[PdfObject | None] = []

    def __len__(self) -> int:
        return len(self._objects)

    def allocate(self, obj: PdfObject) -> IndirectObject:
        self._objects.append(obj)
        return IndirectObject(len(self._objects), 0, self)

    def reserve(self) -> IndirectObject:
        self._objects.append(None)
        return IndirectObject(len(self._objects), 0, self)

    def fill(self, ref: IndirectObject, obj: PdfObject) -> None:
        slot = self._slot(ref)
        if self._objects[slot] is not None:
            raise AssemblyError(f"Object {ref.idnum} is already defined")
        self._objects[slot] = obj

    def get_object(self, ref: IndirectObject) -> PdfObject:
        obj = self._objects[self._slot(ref)]
        if obj is None:
            raise AssemblyError(f"Object {ref.idnum} was reserved but never defined")
        return obj

    def _slot(self, ref: IndirectObject) -> int:
        if ref.pdf is not self or not 1 <= ref.idnum <= len(self._objects):
            raise AssemblyError(f"Reference {ref.idnum} {ref.generation} R does not belong to this document")
        return ref.idnum - 1

    def serialize(self, root: IndirectObject, version: str = PDF_VERSION) -> bytes:
        """Write the whole table as a PDF file with *root* as the catalog."""

        self._slot(root)
        buffer = io.BytesIO()
        buffer.write(f"%PDF-{version}\n".encode("ascii"))
        # Binary marker so transports treat the file as binary.
        buffer.write(b"%\xe2\xe3\xcf\xd3\n")

        offsets: list[int] = []
        for idnum, obj in enumerate(self._objects, start=1):
            if obj is None:
                raise AssemblyError(f"Object {idnum} was reserved but never defined")
            offsets.append(buffer.tell())
            buffer.write(f"{idnum} 0 obj\n".encode("ascii"))
            obj.write_to_stream(buffer)
            buffer.write(b"\nendobj\n")

        xref_offset = buffer.tell()
        buffer.write(f"xref\n0 {len(offsets) + 1}\n".encode("ascii"))
        buffer.write(b"0000000000 65535 f \n")
        for offset in offsets:
            buffer.write(f"{offset:010d} 00000 n \n".encode("ascii"))

        trailer = DictionaryObject(
            {
                NameObject("/Size"): NumberObject(len(offsets) + 1),
                NameObject("/Root"): root,
            }
        )
        buffer.write(b"trailer\n")
        trailer.write_to_stream(buffer)
        buffer.write(f"\nstartxref\n{xref_offset}\n%%EOF\n".encode("ascii"))
        return buffer.getvalue()


def image_name(position: int) -> NameObject:
    """Resource name of the image drawn on the page at *position*."""

    return NameObject(f"/Im{position}")


def _image_stream(page: EncodedPage) -> StreamObject:
    stream = StreamObject()
    stream.update(
        {
            NameObject("/Type"): NameObject("/XObject"),
            NameObject("/Subtype"): NameObject("/Image"),
            NameObject("/Width"): NumberObject(page.width),
            NameObject("/Height"): NumberObject(page.height),
            NameObject("/ColorSpace"): NameObject("/DeviceRGB"),
            NameObject("/BitsPerComponent"): NumberObject(8),
            NameObject("/Filter"): NameObject("/DCTDecode"),
        }
    )
    stream._data = page.data
    return stream


def _placement_stream(name: NameObject, width: float, height: float) -> StreamObject:
    content = f"q\n{format_number(width)} 0 0 {format_number(height)} 0 0 cm\n{name} Do\nQ"
    stream = StreamObject()
    stream._data = content.encode("ascii")
    return stream


class DocumentAssembler:
    """Build a brand-new PDF from pages supplied in index order.

    Single-owner and single-threaded: the object store, allocation order and
    the parent back-fill all live on this instance for one run.
    """

    def __init__(
        self,
        dpi: int,
        *,
        verify: bool = True,
        version: str = PDF_VERSION,
    ) -> None:
        if dpi <= 0:
            raise ValueError("dpi must be a positive integer")
        self.dpi = dpi
        self.verify = verify
        self.version = version
        self._store = ObjectStore()
        self._page_refs: list[IndirectObject] = []
        self._layouts: list[PageLayout] = []
        self._finished = False

    @property
    def page_count(self) -> int:
        return len(self._page_refs)

    @property
    def page_refs(self) -> list[IndirectObject]:
        return list(self._page_refs)

    @property
    def layouts(self) -> list[PageLayout]:
        return list(self._layouts)

    def add_page(self, page: EncodedPage) -> IndirectObject:
        """Add the objects for *page* and return its page dictionary handle."""

        self._ensure_open()
        position = len(self._page_refs)
        if page.index != position:
            raise AssemblyError(
                f"Pages must be added in index order: expected {position}, got {page.index}"
            )
        if page.width <= 0 or page.height <= 0 or not page.data:
            raise AssemblyError(f"Page {position + 1} has no image data")

        layout = page_layout(position, page.width, page.height, self.dpi, Unit.POINT)
        name = image_name(position)
        try:
            image_ref = self._store.allocate(_image_stream(page))
            content_ref = self._store.allocate(_placement_stream(name, layout.width, layout.height))
            resources_ref = self._store.allocate(
                DictionaryObject(
                    {NameObject("/XObject"): DictionaryObject({name: image_ref})}
                )
            )
            page_ref = self._store.allocate(
                DictionaryObject(
                    {
                        NameObject("/Type"): NameObject("/Page"),
                        NameObject("/MediaBox"): ArrayObject(
                            [
                                NumberObject(0),
                                NumberObject(0),
                                FloatObject(format_number(layout.width)),
                                FloatObject(format_number(layout.height)),
                            ]
                        ),
                        NameObject("/Contents"): content_ref,
                        NameObject("/Resources"): resources_ref,
                        # Back-filled once the page tree exists.
                        NameObject("/Parent"): NullObject(),
                    }
                )
            )
        except AssemblyError:
            raise
        except Exception as exc:
            raise AssemblyError(f"Failed to build objects for page {position + 1}: {exc}") from exc

        self._page_refs.append(page_ref)
        self._layouts.append(layout)
        _LOGGER.debug(
            "Added page %d as object %d (%.2fx%.2f pt)",
            position + 1,
            page_ref.idnum,
            layout.width,
            layout.height,
        )
        return page_ref

    def add_pages(self, pages: Iterable[EncodedPage]) -> None:
        for page in pages:
            self.add_page(page)

    def finish(self) -> bytes:
        """Create the page tree and catalog, then serialize the document."""

        self._ensure_open()
        self._finished = True
        if not self._page_refs:
            raise AssemblyError("Cannot build a PDF without pages")

        try:
            pages_ref = self._store.reserve()
            self._store.fill(
                pages_ref,
                DictionaryObject(
                    {
                        NameObject("/Type"): NameObject("/Pages"),
                        NameObject("/Kids"): ArrayObject(self._page_refs),
                        NameObject("/Count"): NumberObject(len(self._page_refs)),
                    }
                ),
            )
            for page_ref in self._page_refs:
                page_dict = self._store.get_object(page_ref)
                page_dict[NameObject("/Parent")] = pages_ref

            catalog_ref = self._store.allocate(
                DictionaryObject(
                    {
                        NameObject("/Type"): NameObject("/Catalog"),
                        NameObject("/Pages"): pages_ref,
                    }
                )
            )
            data = self._store.serialize(catalog_ref, self.version)
        except AssemblyError:
            raise
        except Exception as exc:
            raise AssemblyError(f"Failed to serialize PDF: {exc}") from exc

        _LOGGER.info(
            "Assembled %d page(s) into %d objects (%d bytes)",
            len(self._page_refs),
            len(self._store),
            len(data),
        )
        if self.verify:
            verify_document(data, len(self._page_refs))
        return data

    def _ensure_open(self) -> None:
        if self._finished:
            raise AssemblyError("Document has already been finished")


def verify_document(data: bytes, page_count: int) -> None:
    """Re-read *data* with pypdf and check it holds *page_count* pages."""

    try:
        reader = PdfReader(io.BytesIO(data))
        found = len(reader.pages)
    except Exception as exc:
        raise AssemblyError(f"Generated PDF cannot be read back: {exc}") from exc
    if found != page_count:
        raise AssemblyError(f"Generated PDF has {found} page(s), expected {page_count}")


def assemble_document(pages: Iterable[EncodedPage], dpi: int, *, verify: bool = True) -> bytes:
    """Assemble ordered *pages* into PDF bytes in one call."""

    assembler = DocumentAssembler(dpi, verify=verify)
    assembler.add_pages(pages)
    return assembler.finish()
