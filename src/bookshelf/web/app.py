"""FastAPI web application for Bookshelf."""

from __future__ import annotations

import os
from datetime import datetime, timezone

from dotenv import load_dotenv

import structlog
import uvicorn
from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from ..core.editor import EditorSession
from ..core.errors import BookNotFound, IOFailure, ValidationFailure
from ..core.ingest import FileHandle, decode_embedded
from ..core.library import Library
from ..core.models import Book, CATEGORIES, category_filter_options
from ..core.reader import ReaderSession
from ..core.router import navigate, open_book, resolve_view
from ..core.stats import catalog_stats, recent_books
from ..core.store import DeleteBook, SetSearchTerm, SetSelectedCategory, View

load_dotenv()

log = structlog.get_logger()

# Embedded content can be tens of MB; summaries link to it instead.
_EMBEDDED_FIELDS = ("coverData", "pdfData")


def _summary(book: Book) -> dict:
    data = book.to_dict()
    for key in _EMBEDDED_FIELDS:
        data.pop(key, None)
    data["coverDisplayUrl"] = f"/api/books/{book.id}/cover" if book.cover_data else book.cover_url
    data["hasEmbeddedPdf"] = book.pdf_data is not None
    return data


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def _to_handle(upload: UploadFile) -> FileHandle:
    """Adapt a multipart upload to the ingestion file shape."""
    if upload.size is not None:
        return FileHandle(
            name=upload.filename or "upload",
            media_type=upload.content_type or "application/octet-stream",
            size=upload.size,
            reader=upload.read,
        )
    content = await upload.read()
    return FileHandle.from_bytes(
        upload.filename or "upload", upload.content_type or "application/octet-stream", content
    )


def _has_file(upload: UploadFile | None) -> bool:
    return upload is not None and bool(upload.filename)


async def _fill_and_save(
    editor: EditorSession,
    title: str,
    author: str,
    description: str,
    category: str,
    subcategory: str,
    cover_url: str,
    pdf_url: str,
    pages: int | None,
    cover: UploadFile | None,
    pdf: UploadFile | None,
) -> Book:
    editor.select_category(category)
    editor.select_subcategory(subcategory)
    form = editor.form
    form.title = title.strip()
    form.author = author.strip()
    form.description = description.strip()
    form.cover_url = cover_url.strip()
    form.pdf_url = pdf_url.strip()
    form.pages = pages
    if _has_file(cover):
        editor.attach_cover(await _to_handle(cover))
    if _has_file(pdf):
        editor.attach_document(await _to_handle(pdf))
    return await editor.save()


def create_app(library: Library | None = None) -> FastAPI:
    if library is None:
        library = Library.open()

    app = FastAPI(title="Bookshelf", docs_url=None, redoc_url=None)
    app.state.library = library

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    @app.exception_handler(ValidationFailure)
    async def validation_failed(request: Request, exc: ValidationFailure):
        return _error(str(exc), 400)

    @app.exception_handler(BookNotFound)
    async def book_not_found(request: Request, exc: BookNotFound):
        return _error("Book not found.", 404)

    @app.exception_handler(IOFailure)
    async def io_failed(request: Request, exc: IOFailure):
        log.error("request_io_failure", path=request.url.path, error=str(exc))
        return _error("Could not read or store the file. Please try again.", 500)

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": "0.1.0",
            "environment": os.environ.get("ENV", "dev"),
            "books": len(library.state.books),
        }

    @app.get("/api/state")
    async def state():
        s = library.state
        return {
            "view": resolve_view(s).value,
            "storedView": s.current_view.value,
            "isAuthenticated": s.is_authenticated,
            "searchTerm": s.search_term,
            "selectedCategory": s.selected_category,
            "currentBook": _summary(s.current_book) if s.current_book else None,
            "categories": {cat: list(subs) for cat, subs in CATEGORIES.items()},
            "categoryOptions": category_filter_options(),
        }

    @app.post("/api/view")
    async def set_view(request: Request):
        body = await request.json()
        view = str(body.get("view", ""))
        if view not in {v.value for v in View}:
            return _error(f"Unknown view: {view}", 400)
        navigate(library.store, view)
        return {"view": resolve_view(library.state).value}

    @app.get("/api/books")
    async def list_books(q: str | None = None, category: str | None = None):
        if q is not None:
            library.store.dispatch(SetSearchTerm(q))
        if category is not None:
            library.store.dispatch(SetSelectedCategory(category))
        books = library.visible_books()
        return {"total": len(books), "books": [_summary(b) for b in books]}

    @app.get("/api/books/{book_id}")
    async def get_book(book_id: str):
        book = library.find(book_id)
        if book is None:
            return _error("Book not found.", 404)
        return book.to_dict()

    @app.get("/api/books/{book_id}/cover")
    async def get_cover(book_id: str):
        book = library.find(book_id)
        if book is None or not book.cover_data:
            return _error("No embedded cover.", 404)
        try:
            media_type, content = decode_embedded(book.cover_data)
        except ValueError:
            log.warning("embedded_cover_unreadable", book_id=book_id)
            return _error("No embedded cover.", 404)
        return Response(content=content, media_type=media_type)

    @app.post("/api/books/{book_id}/open")
    async def open_for_reading(book_id: str):
        book = library.find(book_id)
        if book is None:
            return _error("Book not found.", 404)
        open_book(library.store, book)
        return {"view": resolve_view(library.state).value, "book": _summary(book)}

    @app.get("/api/reader")
    async def reader(page: int = 1):
        book = library.state.current_book
        if book is None:
            return _error("No book selected.", 404)
        session = ReaderSession(book)
        session.go_to(page)
        return {
            "book": _summary(book),
            "page": session.current_page,
            "totalPages": session.total_pages,
            "progress": round(session.progress, 1),
            "chapters": [{"number": c.number, "page": c.page} for c in session.chapters],
            "documentUrl": "/api/reader/download" if book.pdf_data else session.document_url,
            "downloadable": book.pdf_data is not None,
        }

    @app.get("/api/reader/download")
    async def download_document():
        book = library.state.current_book
        if book is None:
            return _error("No book selected.", 404)
        try:
            document = ReaderSession(book).download()
        except ValueError:
            log.warning("embedded_document_unreadable", book_id=book.id)
            document = None
        if document is None:
            return _error("This book has no embedded document.", 404)
        media_type, content = document
        return Response(
            content=content,
            media_type=media_type,
            headers={"Content-Disposition": f'attachment; filename="{book.id}.pdf"'},
        )

    @app.get("/api/stats")
    async def stats():
        books = library.state.books
        s = catalog_stats(books)
        return {
            "totalBooks": s.total_books,
            "totalPages": s.total_pages,
            "authors": s.authors,
            "byCategory": s.by_category,
            "bySubcategory": [
                {"category": cat, "subcategory": sub, "count": n}
                for (cat, sub), n in s.by_subcategory.items()
            ],
            "recent": [_summary(b) for b in recent_books(books)],
        }

    @app.post("/api/login")
    async def login(request: Request):
        body = await request.json()
        username = str(body.get("username", ""))
        password = str(body.get("password", ""))
        if not library.login(username, password):
            return _error("Invalid credentials.", 401)
        return {"view": resolve_view(library.state).value}

    @app.post("/api/logout")
    async def logout():
        library.logout()
        return {"view": resolve_view(library.state).value}

    def _forbidden() -> JSONResponse | None:
        if not library.state.is_authenticated:
            return _error("Administrator login required.", 403)
        return None

    @app.post("/api/admin/books")
    async def create_book(
        title: str = Form(""),
        author: str = Form(""),
        description: str = Form(""),
        category: str = Form(""),
        subcategory: str = Form(""),
        cover_url: str = Form(""),
        pdf_url: str = Form(""),
        pages: int | None = Form(None),
        cover: UploadFile | None = File(None),
        pdf: UploadFile | None = File(None),
    ):
        denied = _forbidden()
        if denied is not None:
            return denied
        with library.editor() as editor:
            editor.open()
            book = await _fill_and_save(
                editor, title, author, description, category, subcategory,
                cover_url, pdf_url, pages, cover, pdf,
            )
        return JSONResponse(_summary(book), status_code=201)

    @app.put("/api/admin/books/{book_id}")
    async def update_book(
        book_id: str,
        title: str = Form(""),
        author: str = Form(""),
        description: str = Form(""),
        category: str = Form(""),
        subcategory: str = Form(""),
        cover_url: str = Form(""),
        pdf_url: str = Form(""),
        pages: int | None = Form(None),
        cover: UploadFile | None = File(None),
        pdf: UploadFile | None = File(None),
    ):
        denied = _forbidden()
        if denied is not None:
            return denied
        existing = library.find(book_id)
        if existing is None:
            return _error("Book not found.", 404)
        with library.editor() as editor:
            editor.open(existing)
            book = await _fill_and_save(
                editor, title, author, description, category, subcategory,
                cover_url, pdf_url, pages, cover, pdf,
            )
        return _summary(book)

    @app.delete("/api/admin/books/{book_id}")
    async def delete_book(book_id: str):
        denied = _forbidden()
        if denied is not None:
            return denied
        if library.find(book_id) is None:
            return _error("Book not found.", 404)
        library.store.dispatch(DeleteBook(book_id))
        log.info("book_deleted", book_id=book_id)
        return {"status": "ok"}

    return app


def main():
    port = int(os.environ.get("PORT", "8000"))
    is_dev = os.environ.get("ENV", "dev") == "dev"
    uvicorn.run(
        "bookshelf.web.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=port,
        reload=is_dev,
    )
