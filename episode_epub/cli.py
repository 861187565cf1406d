import argparse
import logging
import sys

from . import __version__
from .client import BASE_URL, Client, make_session
from .episode import (
    PAGE_MARKER,
    collect_cover_image,
    get_about_page,
    parse_author_name,
    parse_story_links,
    request_cover_image,
    resolve_stories,
    walk_story,
)
from .errors import EpisodeError
from .formats import make_epub
from .sanitize import WrapperPolicy, XhtmlSanitizer


logger = logging.getLogger(__name__)


def ask_author_id():
    return input("Which author(ID) interests you? ").strip()


def ask_select_story(stories):
    print("Which story do you want to read? Or enter `q` to exit")
    for i, story in enumerate(stories, 1):
        print("{}) {} ({} {})".format(i, story.title, story.page_count, PAGE_MARKER))

    while True:
        choice = input("> ").strip()
        if choice == "q":
            sys.exit(1)
        if choice.isdecimal() and 1 <= int(choice) <= len(stories):
            return stories[int(choice) - 1]
        print("Try again")


def run(
    client,
    author_id,
    select_story=ask_select_story,
    sanitizer=None,
    out_dir=".",
    strict=False,
):
    """
    Export one of an author's stories. Returns the path of the book written.
    """
    if sanitizer is None:
        sanitizer = XhtmlSanitizer()

    about_page = get_about_page(client, author_id)
    author = parse_author_name(about_page)
    print("Let's see what stories {}({}) has ...".format(author, author_id))

    links = parse_story_links(about_page, client.base_url)
    if not links:
        raise EpisodeError("{} hasn't published any stories".format(author))
    story = select_story(resolve_stories(client, links))
    logger.info("Downloading %s (%d page(s))", story.title, story.page_count)

    cover = request_cover_image(client, story.id)
    walk = walk_story(client, story, sanitizer, strict=strict)
    if not walk.chapters:
        raise walk.error
    if not walk.complete:
        print(
            "Failed to download page {}; skipped the rest. The book has {} of {} "
            "pages.".format(walk.stopped_at, len(walk.chapters), story.page_count),
            file=sys.stderr,
        )

    return make_epub(
        author,
        story.title,
        walk.chapters,
        cover_image=collect_cover_image(cover),
        out_dir=out_dir,
        identifier=story.id,
    )


def build_parser():
    parser = argparse.ArgumentParser(
        prog="episode-epub", description="Save a story from episode.cc as an EPUB."
    )
    parser.add_argument("author_id", nargs="?")
    parser.add_argument("--out-dir", "-o", default=".")
    parser.add_argument("--base-url", default=BASE_URL)

    g = parser.add_mutually_exclusive_group()
    g.add_argument("--cache-dir", default=".webcache")
    g.add_argument("--no-cache", dest="cache_dir", action="store_const", const=None)

    parser.add_argument(
        "--unwrap-styling",
        dest="policy",
        action="store_const",
        const=WrapperPolicy.UNWRAP,
        default=WrapperPolicy.DROP,
        help="keep the text inside <font>/<b>/<span> instead of dropping it",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="treat unknown fields in page data as an error",
    )

    g = parser.add_mutually_exclusive_group()
    g.add_argument("--verbose", "-v", action="store_true")
    g.add_argument("--quiet", "-q", action="store_true")
    parser.add_argument(
        "--version", action="version", version="episode-epub {}".format(__version__)
    )
    return parser


def configure_logging(verbose, quiet):
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    client = Client(make_session(cache_dir=args.cache_dir), base_url=args.base_url)
    try:
        author_id = args.author_id or ask_author_id()
        out_path = run(
            client,
            author_id,
            sanitizer=XhtmlSanitizer(args.policy),
            out_dir=args.out_dir,
            strict=args.strict,
        )
    except EpisodeError as e:
        print("ERROR: {}".format(e), file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print("ERROR: couldn't write the book: {}".format(e), file=sys.stderr)
        sys.exit(1)
    except (EOFError, KeyboardInterrupt):
        sys.exit(1)

    print("Output in {}".format(out_path))
