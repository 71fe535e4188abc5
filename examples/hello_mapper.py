"""Minimal hello-world demo: map an entity, compile a criteria chain."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from datetime import date
from pathlib import Path

# Allow running directly from the repo without installing the package.
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from esodm.core.convert import NumberRangePropertyValueConverter, Range  # noqa: E402
from esodm.core.criteria import where  # noqa: E402
from esodm.core.esodm import ESODM  # noqa: E402
from esodm.core.mapping import Document, describe_dataclass  # noqa: E402


@dataclass
class Book:
    id: str | None
    title: str
    published: date
    pages: Range | None = None


def main() -> int:
    esodm = ESODM.create(config={"mapping": {"store_null_values": False}})
    esodm.register_entity(
        describe_dataclass(Book, converters={"pages": NumberRangePropertyValueConverter("pages")})
    )

    book = Book(id=None, title="Dune", published=date(1965, 8, 1), pages=Range.closed(1, 412))
    document = esodm.serialize(book)
    print("document:", json.dumps(document))

    stored = Document(document, id="b-42", version=3)
    print("read back:", esodm.deserialize(stored, Book))

    esodm.backfill_identifier(book, "b-42")
    print("back-filled:", book)

    chain = where("title").contains("dun").and_("published").between("1960-01-01", "1970-12-31").or_("tag").in_(["sf", "classic"])
    print("query:", json.dumps(esodm.compile(chain).to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
