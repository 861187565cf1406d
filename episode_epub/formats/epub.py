import logging
import os

from ebooklib import epub

from ..helpers import safe_filename, xml_safe
from ..sanitize import GENERATOR


logger = logging.getLogger(__name__)

stylesheet = r"""
body { line-height: 1.6; }
p { margin: 0 0 1em 0; text-indent: 2em; }
img { max-width: 100%; }
""".strip()


def make_epub(
    author,
    title,
    chapters,
    cover_image=None,
    out_dir=".",
    identifier=None,
    language="zh-TW",
):
    """
    Write `chapters`, a sequence of (title, xhtml document) pairs, out as
    {title}.epub in `out_dir`. Returns the path written.

    The book is written to a temporary file first, so a failure partway
    through never leaves a broken {title}.epub behind.
    """
    author = xml_safe(author)
    title = xml_safe(title)

    book = epub.EpubBook()
    book.set_identifier(xml_safe(identifier or title))
    book.set_title(title)
    book.set_language(language)
    book.add_author(author)
    # replaces ebooklib's own generator entry
    book.set_unique_metadata(
        "OPF", "generator", "", {"name": "generator", "content": GENERATOR}
    )

    book.add_item(
        epub.EpubItem(
            uid="style",
            file_name="stylesheet.css",
            media_type="text/css",
            content=stylesheet,
        )
    )

    if cover_image is not None:
        book.set_cover("cover.jpg", cover_image, create_page=False)

    pages = []
    toc = []
    for n, (chapter_title, xhtml) in enumerate(chapters):
        # a plain EpubItem is written out byte for byte; EpubHtml would
        # rebuild the document around the <body>'s child elements only
        page = epub.EpubItem(
            uid="page-{}".format(n),
            file_name="{}.xhtml".format(n),
            media_type="application/xhtml+xml",
            content=xhtml.encode("utf-8"),
        )
        book.add_item(page)
        pages.append(page)
        toc.append(epub.Link(page.file_name, xml_safe(chapter_title), page.id))

    book.toc = toc
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav"] + pages

    out_path = os.path.join(out_dir, "{}.epub".format(safe_filename(title)))
    logger.debug("Writing %d chapter(s) to %s", len(pages), out_path)
    part_path = out_path + ".part"
    try:
        epub.write_epub(part_path, book, {})
        os.replace(part_path, out_path)
    except BaseException:
        if os.path.exists(part_path):
            os.unlink(part_path)
        raise
    return out_path
