from collections import namedtuple

from .errors import DeserializationError


StoryInfo = namedtuple("StoryInfo", ["title", "id", "source_url", "page_count"])

SanitizedChapter = namedtuple("SanitizedChapter", ["title", "xhtml"])


class WalkResult(namedtuple("WalkResult", ["chapters", "stopped_at", "error"])):
    """
    The pages of a story that were downloaded, in order.

    If a page failed, `stopped_at` is its index and `error` what went wrong;
    `chapters` then holds exactly the pages before it.
    """

    __slots__ = ()

    @property
    def complete(self):
        return self.stopped_at is None


# (json key, attribute, type) for every field the GetPage endpoint returns
PAGE_FIELDS = [
    ("FC", "fc", str),
    ("FC1", "fc1", str),
    ("FC2", "fc2", str),
    ("BG", "bg", str),
    ("VMOBISHIFT", "vmobishift", str),
    ("PARABGOP", "parabgop", str),
    ("IMAGESOURCE", "imagesource", str),
    ("EMBEDIMGSOURCE", "embedimgsource", str),
    ("PHOTOGRAPHER", "photographer", str),
    ("DMMODEL", "dmmodel", str),
    ("IDENT", "ident", int),
    ("HEIGHT", "height", int),
    ("HTMLBODY", "htmlbody", str),
    ("TITLE", "title", str),
    ("VRTPTITLE", "vrtptitle", int),
    ("PAGELOCK", "pagelock", int),
    ("PWHINT", "pwhint", str),
    ("KEYINPUT", "keyinput", int),
    ("PAGEACCESSTYPE", "pageaccesstype", int),
    ("MyPRAISE", "mypraise", int),
    ("PRAISECOUNT", "praisecount", int),
    ("UID", "uid", str),
    ("TODAYHITS", "todayhits", str),
    ("TOTALHITS", "totalhits", str),
    ("RATE", "rate", str),
    ("COMMENTSIZE", "commentsize", int),
    ("GATHERST", "gatherst", int),
    ("PLUGINDATA", "plugindata", str),
    ("StoryPWpass", "story_pw_pass", bool),
]


def _has_type(value, kind):
    # bool is a subclass of int, but true/false is never a number here
    if kind is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, kind)


class PagePayload(namedtuple("PagePayload", [attr for _, attr, _ in PAGE_FIELDS])):
    """
    One page of a story, as returned by the GetPage endpoint.

    Only `title` and `htmlbody` matter for building a book; the rest is kept
    so that a change in the endpoint's shape is noticed.
    """

    __slots__ = ()

    @classmethod
    def from_json(cls, data, strict=False):
        if not isinstance(data, dict):
            raise DeserializationError(
                "Expected a JSON object, got {}".format(type(data).__name__)
            )

        values = {}
        for key, attr, kind in PAGE_FIELDS:
            if key not in data:
                raise DeserializationError("Missing field {!r}".format(key))
            value = data[key]
            if not _has_type(value, kind):
                raise DeserializationError(
                    "Field {!r} should be {}, got {!r}".format(
                        key, kind.__name__, value
                    )
                )
            values[attr] = value

        if strict:
            unknown = sorted(set(data) - {key for key, _, _ in PAGE_FIELDS})
            if unknown:
                raise DeserializationError(
                    "Unexpected field(s): {}".format(", ".join(unknown))
                )

        return cls(**values)
