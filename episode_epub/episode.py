import logging
import re
from urllib.parse import urljoin, urlparse

from .client import result, soupify_request
from .errors import (
    DeserializationError,
    FetchError,
    HttpStatusError,
    MissingAuthorName,
    MissingStoryId,
    ParseError,
)
from .helpers import stripright
from .models import PagePayload, StoryInfo, WalkResult


logger = logging.getLogger(__name__)

PAGE_MARKER = "頁"

# /content/coverimage/{id}.{extension}
cover_re = re.compile(r"/coverimage/([A-Za-z0-9]+)\.[^/]+$")


################################################################################
### author profile


def get_about_page(client, author_id):
    url = client.url("about", author_id)
    try:
        return soupify_request(client.get(url), url)
    except HttpStatusError as e:
        raise HttpStatusError(
            url, e.status_code, 'Author "{}" does not exist!'.format(author_id)
        ) from e


def parse_author_name(doc):
    # the title reads "關於 <name>"
    title = doc.find("title")
    bits = title.get_text().split() if title is not None else []
    if len(bits) < 2:
        raise MissingAuthorName("Failed to parse author name")
    return bits[1]


def parse_story_links(doc, base_url):
    """
    (title, url) for each story listed on an author's profile, in page order.
    """
    links = []
    for div in doc.select("div.stystory"):
        a = div.find("a", href=True)
        title = next(div.stripped_strings, None)
        if a is None or title is None:
            raise ParseError("Story entry without a link: {}".format(div))
        links.append((title, urljoin(base_url + "/", a["href"])))
    return links


################################################################################
### page range


def page_url(story_url, index):
    return "{}/{}".format(stripright(story_url, "/"), index)


def extract_story_id(doc):
    """
    The story's id, taken from its cover image's filename.
    """
    for img in doc.find_all("img"):
        src = img.get("src")
        if not src:
            continue
        m = cover_re.search(urlparse(src).path)
        if m:
            return m.group(1).upper()
    raise MissingStoryId("Couldn't find the story's cover image")


def _is_float_left(div):
    style = div.get("style", "").replace(" ", "").lower()
    return stripright(style, ";") == "float:left"


def extract_page_count(doc):
    """
    How many pages a story has, read from the "N 頁" pager text.

    Short stories have no pager at all, so no pager means one page.
    """
    unparseable = []
    for div in doc.find_all("div", style=True):
        if not _is_float_left(div):
            continue
        text = div.get_text()
        if PAGE_MARKER not in text:
            continue
        token = text.split()[0]
        try:
            return max(int(token), 1)
        except ValueError:
            unparseable.append(text.strip())

    if unparseable:
        logger.warning("Couldn't read a page count from %r; assuming 1", unparseable)
    return 1


def resolve_story(title, url, doc):
    return StoryInfo(
        title=title,
        id=extract_story_id(doc),
        source_url=url,
        page_count=extract_page_count(doc),
    )


def resolve_stories(client, links):
    """
    Look at the first page of every story, all at once.
    """
    reqs = [client.get(page_url(url, 0)) for _, url in links]
    stories = []
    for (title, url), req in zip(links, reqs):
        story = resolve_story(title, url, soupify_request(req, page_url(url, 0)))
        logger.debug("Resolved %r", story)
        stories.append(story)
    return stories


################################################################################
### pages


def fetch_page(client, story, index, strict=False):
    url = client.url("Reading", "GetPage")
    form = {
        "SID": story.id,
        "PID": str(index),
        "StoryPW": "",
        "PagePW": "",
        "CountHit": "true",
    }
    r = result(client.post(url, form, referer=story.source_url), url)
    try:
        data = r.json()
    except ValueError as e:
        raise DeserializationError(
            "Page {} of {} isn't JSON: {}".format(index, story.id, e), url
        ) from e
    try:
        return PagePayload.from_json(data, strict=strict)
    except DeserializationError as e:
        raise DeserializationError("Page {}: {}".format(index, e), url) from e


def walk_story(client, story, sanitizer, strict=False):
    """
    Download and sanitize every page of a story, in order.

    Stops at the first page that can't be fetched and returns whatever came
    before it.
    """
    chapters = []
    for index in range(story.page_count):
        try:
            payload = fetch_page(client, story, index, strict=strict)
        except FetchError as e:
            logger.warning(
                "Failed to download page %d (%s). Skipping the remaining %d page(s).",
                index,
                e,
                story.page_count - index,
            )
            return WalkResult(tuple(chapters), index, e)

        logger.info("Page %d/%d: %s", index + 1, story.page_count, payload.title)
        chapters.append(sanitizer.chapter(payload))
    return WalkResult(tuple(chapters), None, None)


################################################################################
### cover


def request_cover_image(client, story_id):
    url = client.url("content", "coverimage", "{}.jpg".format(story_id))
    return client.get(url), url


def collect_cover_image(pending):
    """
    The cover's bytes, or None if there isn't one we can get.
    """
    req, url = pending
    try:
        return result(req, url).content
    except FetchError as e:
        logger.info("No cover image: %s", e)
        return None


def download_cover_image(client, story_id):
    return collect_cover_image(request_cover_image(client, story_id))
