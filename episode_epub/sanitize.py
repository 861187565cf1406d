"""
Turns the loosely-formed HTML of a story page into strict XHTML.

The site's editor emits unquoted attributes, stray presentational tags and
the occasional unclosed element; EPUB readers want well-formed XML. Pages are
parsed with html5lib, which recovers from anything, and then serialized back
out by hand so that every attribute is quoted and every element closed.
"""
from collections import namedtuple
import enum
import re
from xml.sax.saxutils import escape

from bs4.element import Comment, NavigableString, PreformattedString, Tag
import jinja2

from .helpers import soupify, xml_safe
from .models import SanitizedChapter


GENERATOR = "episode-epub"

# presentational wrappers the site sprinkles everywhere
STYLING_TAGS = frozenset(["font", "b", "span"])

VOID_TAGS = frozenset(
    [
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    ]
)

_xml_name_re = re.compile(r"^[A-Za-z_][A-Za-z0-9_.-]*$")


page_format = r"""
<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops">
<head>
  <meta charset="utf-8" />
  <meta name="generator" content="{{ generator }}" />
  <title>{{ title }}</title>
  <link rel="stylesheet" type="text/css" href="stylesheet.css" />
</head>
<body>
{{ body|safe }}
</body>
</html>
""".strip()

_env = jinja2.Environment(undefined=jinja2.StrictUndefined, autoescape=True)
_page_template = _env.from_string(page_format)


class WrapperPolicy(enum.Enum):
    # skip a styling wrapper along with everything inside it
    DROP = "drop"
    # skip only the wrapper's own tags, keeping its children
    UNWRAP = "unwrap"


class NodeKind(enum.Enum):
    ELEMENT = "element"
    TEXT = "text"


def node_kind(node):
    if isinstance(node, Tag):
        return NodeKind.ELEMENT
    # comments, doctypes, CDATA and friends are all PreformattedStrings
    if isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
        return NodeKind.TEXT
    raise AssertionError("Unexpected node in page body: {!r}".format(node))


def xml_text(s):
    # only "&", "<" and the ">" closing a "]]>" are markup in character data
    s = xml_safe(s).replace("&", "&amp;").replace("<", "&lt;")
    return s.replace("]]>", "]]&gt;")


def xml_attr(s):
    return escape(xml_safe(s), {'"': "&quot;"})


def start_tag(tag, close=False):
    attrs = "".join(
        ' {}="{}"'.format(name, xml_attr(value))
        for name, value in tag.attrs.items()
        if _xml_name_re.match(name)
    )
    return "<{}{}{}>".format(tag.name, attrs, " /" if close else "")


_End = namedtuple("_End", ["name"])


def parse_fragment(html):
    # Wrapping in <body> keeps things like a leading <style> from being
    # hoisted into an implied <head>.
    soup = soupify("<body>{}</body>".format(html), multi_valued_attributes=None)
    root = soup.body
    for comment in root.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    return root


class XhtmlSanitizer(object):
    def __init__(self, policy=WrapperPolicy.DROP):
        self.policy = policy

    def __repr__(self):
        return "XhtmlSanitizer({})".format(self.policy)

    def sanitize_fragment(self, html):
        """
        Re-serialize a fragment of HTML as well-formed XHTML.

        Nodes are visited depth-first in document order. Styling wrappers
        (see STYLING_TAGS) are handled according to the policy; with the
        default, DROP, any text inside them is lost.
        """
        bits = []
        stack = list(reversed(parse_fragment(html).contents))
        while stack:
            node = stack.pop()
            if isinstance(node, _End):
                bits.append("</{}>".format(node.name))
                continue

            if node_kind(node) is NodeKind.TEXT:
                bits.append(xml_text(str(node)))
                continue

            if node.name in STYLING_TAGS:
                if self.policy is WrapperPolicy.UNWRAP:
                    stack.extend(reversed(node.contents))
                continue

            if not _xml_name_re.match(node.name):
                # html5lib accepts tag names XML can't express; keep the content
                stack.extend(reversed(node.contents))
                continue

            if node.name == "br":
                bits.append("<br />")
            elif node.name in VOID_TAGS:
                bits.append(start_tag(node, close=True))
            else:
                bits.append(start_tag(node))
                stack.append(_End(node.name))
                stack.extend(reversed(node.contents))
        return "".join(bits)

    def render(self, title, html):
        return _page_template.render(
            generator=GENERATOR,
            title=xml_safe(title),
            body=self.sanitize_fragment(html),
        )

    def chapter(self, payload):
        return SanitizedChapter(
            payload.title, self.render(payload.title, payload.htmlbody)
        )
