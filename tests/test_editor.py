"""Tests for the admin editing session."""

import asyncio
from datetime import date

import pytest

from bookshelf.core.editor import DEFAULT_COVER_URL, DEFAULT_PDF_URL, EditorSession
from bookshelf.core.errors import BookNotFound, IOFailure, ValidationFailure
from bookshelf.core.ingest import FileHandle, PreviewRegistry, decode_embedded
from bookshelf.core.store import CatalogStore, DeleteBook, SetBooks

from .conftest import make_book

MiB = 1024 * 1024


def _png(name="cover.png", content=b"\x89PNG") -> FileHandle:
    return FileHandle.from_bytes(name, "image/png", content)


def _pdf(content=b"%PDF-1.7") -> FileHandle:
    return FileHandle.from_bytes("libro.pdf", "application/pdf", content)


def _failing(media_type: str) -> FileHandle:
    async def _read() -> bytes:
        raise OSError("disk went away")

    return FileHandle(name="broken", media_type=media_type, size=10, reader=_read)


def _fill(editor: EditorSession) -> None:
    editor.select_category("Educación Primaria")
    editor.select_subcategory("Geografía")
    editor.form.title = "Mapas y Países"
    editor.form.author = "Prof. Lucía Gómez"
    editor.form.description = "Un recorrido por los continentes"
    editor.form.pages = 64


@pytest.fixture
def store():
    s = CatalogStore()
    s.dispatch(SetBooks([make_book("1")]))
    return s


def test_save_new_book_with_files(store):
    with EditorSession(store) as editor:
        editor.open()
        _fill(editor)
        editor.attach_cover(_png())
        editor.attach_document(_pdf())
        assert editor.document_name == "libro.pdf"
        book = asyncio.run(editor.save())

    assert store.state.books[-1] == book
    assert book.id not in {"1"}
    assert book.upload_date == date.today().isoformat()
    assert book.cover_url == DEFAULT_COVER_URL
    assert book.pdf_url == DEFAULT_PDF_URL
    assert decode_embedded(book.cover_data) == ("image/png", b"\x89PNG")
    assert decode_embedded(book.pdf_data) == ("application/pdf", b"%PDF-1.7")
    assert book.is_valid()


def test_save_with_urls_only(store):
    editor = EditorSession(store)
    editor.open()
    _fill(editor)
    editor.form.cover_url = "https://example.com/mapas.jpg"
    editor.form.pdf_url = "https://example.com/mapas.pdf"
    book = asyncio.run(editor.save())
    assert book.cover_data is None
    assert book.display_url("cover") == "https://example.com/mapas.jpg"


def test_edit_keeps_id_upload_date_and_embedded_content(store):
    original = make_book("5", cover_data="data:image/png;base64,AAAA", upload_date="2023-12-24")
    store.dispatch(SetBooks([make_book("1"), original, make_book("9")]))
    editor = EditorSession(store)
    editor.open(original)
    assert editor.cover_display == "data:image/png;base64,AAAA"
    editor.form.title = "Rayuela (edición aniversario)"
    book = asyncio.run(editor.save())

    assert [b.id for b in store.state.books] == ["1", "5", "9"]
    assert book.id == "5"
    assert book.upload_date == "2023-12-24"
    assert book.cover_data == "data:image/png;base64,AAAA"
    assert store.state.books[1].title == "Rayuela (edición aniversario)"


def test_category_change_resets_subcategory(store):
    editor = EditorSession(store)
    editor.select_category("Literatura General")
    editor.select_subcategory("Romance")
    editor.select_category("Educación Primaria")
    assert editor.form.subcategory == ""


def test_subcategory_outside_taxonomy_rejected(store):
    editor = EditorSession(store)
    editor.select_category("Literatura General")
    with pytest.raises(ValidationFailure):
        editor.select_subcategory("Matemáticas")
    with pytest.raises(ValidationFailure):
        editor.select_category("Poesía")


def test_missing_fields_rejected_without_dispatch(store):
    before = store.state
    editor = EditorSession(store)
    editor.open()
    editor.form.title = "Sin autor"
    with pytest.raises(ValidationFailure):
        asyncio.run(editor.save())
    assert store.state is before


def test_cover_and_document_required(store):
    editor = EditorSession(store)
    editor.open()
    _fill(editor)
    with pytest.raises(ValidationFailure, match="cover"):
        asyncio.run(editor.save())
    editor.form.cover_url = "https://example.com/c.jpg"
    with pytest.raises(ValidationFailure, match="PDF"):
        asyncio.run(editor.save())


def test_oversized_cover_rejected_and_previous_selection_kept(store):
    registry = PreviewRegistry()
    editor = EditorSession(store, registry)
    first = editor.attach_cover(_png())
    big = FileHandle(name="big.png", media_type="image/png", size=6 * MiB, reader=_png().reader)
    with pytest.raises(ValidationFailure):
        editor.attach_cover(big)
    assert editor.cover_preview is first
    assert registry.live == 1


def test_wrong_document_type_rejected(store):
    editor = EditorSession(store)
    with pytest.raises(ValidationFailure):
        editor.attach_document(_png())
    assert editor.document_file is None


def test_replacing_cover_releases_previous_preview(store):
    registry = PreviewRegistry()
    editor = EditorSession(store, registry)
    first = editor.attach_cover(_png("a.png"))
    second = editor.attach_cover(_png("b.png"))
    assert registry.live == 1
    assert registry.get(first.url) is None
    assert registry.get(second.url) is second
    editor.remove_cover()
    assert registry.live == 0


def test_close_and_save_release_previews(store):
    registry = PreviewRegistry()
    editor = EditorSession(store, registry)
    editor.open()
    _fill(editor)
    editor.attach_cover(_png())
    editor.form.pdf_url = "https://example.com/x.pdf"
    asyncio.run(editor.save())
    assert registry.live == 0

    editor.attach_cover(_png())
    editor.close()
    assert registry.live == 0


def test_encode_failure_aborts_save(store):
    before = store.state
    editor = EditorSession(store)
    editor.open()
    _fill(editor)
    editor.form.cover_url = "https://example.com/c.jpg"
    editor.attach_document(_failing("application/pdf"))
    with pytest.raises(IOFailure):
        asyncio.run(editor.save())
    assert store.state is before


def test_stale_encode_is_discarded(store):
    editor = EditorSession(store)
    editor.open()
    _fill(editor)
    editor.form.pdf_url = "https://example.com/x.pdf"
    newer = _png("newer.png", b"newer")

    async def _slow_read() -> bytes:
        # The user picks another file while this read is pending.
        editor.attach_cover(newer)
        return b"older"

    editor.attach_cover(FileHandle(name="older.png", media_type="image/png", size=5, reader=_slow_read))
    book = asyncio.run(editor.save())
    assert decode_embedded(book.cover_data)[1] == b"newer"


def test_generated_ids_are_unique(store):
    ids = set()
    for _ in range(3):
        editor = EditorSession(store)
        editor.open()
        _fill(editor)
        editor.form.cover_url = "https://example.com/c.jpg"
        editor.form.pdf_url = "https://example.com/x.pdf"
        ids.add(asyncio.run(editor.save()).id)
    assert len(ids) == 3
    assert len(store.state.books) == 4


def test_book_deleted_during_encode_is_not_reported_saved(store):
    before = store.state
    editor = EditorSession(store)
    editor.open(store.state.books[0])

    async def _read_then_delete() -> bytes:
        store.dispatch(DeleteBook("1"))
        return b"\x89PNG"

    editor.attach_cover(FileHandle(name="c.png", media_type="image/png", size=4, reader=_read_then_delete))
    with pytest.raises(BookNotFound):
        asyncio.run(editor.save())
    assert store.state.books == ()
    assert before.books[0].id == "1"
