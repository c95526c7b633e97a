"""Example records loaded when storage holds no catalog yet."""

from __future__ import annotations

from .models import Book

_COVER = "https://images.unsplash.com/photo-{}?w=300&h=400&fit=crop"


def seed_books() -> list[Book]:
    return [
        Book(
            id="1",
            title="El Quijote",
            author="Miguel de Cervantes",
            description="La historia del ingenioso hidalgo Don Quijote de la Mancha",
            category="Literatura General",
            subcategory="Clásicos",
            cover_url=_COVER.format("1544716278-ca5e3f4abd8c"),
            pdf_url="/mock-pdfs/quijote.pdf",
            upload_date="2024-01-15",
            pages=863,
        ),
        Book(
            id="2",
            title="Cien Años de Soledad",
            author="Gabriel García Márquez",
            description="La saga de la familia Buendía en el pueblo ficticio de Macondo",
            category="Literatura General",
            subcategory="Literatura Latinoamericana",
            cover_url=_COVER.format("1512820790803-83ca734da794"),
            pdf_url="/mock-pdfs/cien-anos.pdf",
            upload_date="2024-01-10",
            pages=417,
        ),
        Book(
            id="3",
            title="La Casa de los Espíritus",
            author="Isabel Allende",
            description="Una saga familiar que abarca varias generaciones",
            category="Literatura General",
            subcategory="Literatura Latinoamericana",
            cover_url=_COVER.format("1481627834876-b7833e8f5570"),
            pdf_url="/mock-pdfs/casa-espiritus.pdf",
            upload_date="2024-01-05",
            pages=433,
        ),
        Book(
            id="4",
            title="Pedro Páramo",
            author="Juan Rulfo",
            description="Un hombre viaja a Comala en busca de su padre y encuentra un pueblo de fantasmas",
            category="Literatura General",
            subcategory="Literatura Latinoamericana",
            cover_url=_COVER.format("1495446815901-a7297e633e8d"),
            pdf_url="/mock-pdfs/pedro-paramo.pdf",
            upload_date="2024-01-20",
            pages=124,
        ),
        Book(
            id="5",
            title="Matemáticas Divertidas",
            author="Prof. Ana Martínez",
            description="Aprende matemáticas básicas con ejercicios y juegos",
            category="Educación Primaria",
            subcategory="Matemáticas",
            cover_url=_COVER.format("1606092195730-5d7b9af1efc5"),
            pdf_url="/mock-pdfs/matematicas-1.pdf",
            upload_date="2024-02-01",
            pages=120,
        ),
        Book(
            id="6",
            title="Números y Operaciones",
            author="Dr. Carlos Ruiz",
            description="Suma, resta, multiplicación y división",
            category="Educación Primaria",
            subcategory="Matemáticas",
            cover_url=_COVER.format("1635070041078-e363dbe005cb"),
            pdf_url="/mock-pdfs/numeros-operaciones.pdf",
            upload_date="2024-02-05",
            pages=95,
        ),
        Book(
            id="7",
            title="Mi Primer Libro de Ciencias",
            author="Dra. María López",
            description="Experimentos simples y conceptos básicos de ciencias naturales",
            category="Educación Primaria",
            subcategory="Ciencias",
            cover_url=_COVER.format("1507003211169-0a1dd7228f2d"),
            pdf_url="/mock-pdfs/ciencias-primaria.pdf",
            upload_date="2024-02-10",
            pages=80,
        ),
        Book(
            id="8",
            title="Aprendiendo a Leer y Escribir",
            author="Lic. Carmen Silva",
            description="Métodos y ejercicios para desarrollar la lectoescritura",
            category="Educación Primaria",
            subcategory="Lenguaje",
            cover_url=_COVER.format("1456513080510-7bf3a84b82f8"),
            pdf_url="/mock-pdfs/lectoescritura.pdf",
            upload_date="2024-02-15",
            pages=150,
        ),
        Book(
            id="9",
            title="Cuentos de la Abuela",
            author="Rosa Montero",
            description="Historias tradicionales y cuentos populares para niños",
            category="Educación Primaria",
            subcategory="Cuentos Infantiles",
            cover_url=_COVER.format("1507003211169-0a1dd7228f2d"),
            pdf_url="/mock-pdfs/cuentos-abuela.pdf",
            upload_date="2024-02-25",
            pages=60,
        ),
        Book(
            id="10",
            title="Cuaderno de Actividades",
            author="Equipo Editorial Educativo",
            description="Ejercicios, juegos y actividades para reforzar el aprendizaje",
            category="Educación Primaria",
            subcategory="Actividades",
            cover_url=_COVER.format("1434056886845-dac89ffe9b56"),
            pdf_url="/mock-pdfs/actividades.pdf",
            upload_date="2024-03-01",
            pages=100,
        ),
    ]
