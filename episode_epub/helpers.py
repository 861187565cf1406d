from functools import partial
import random
import re

from bs4 import BeautifulSoup


soupify = partial(BeautifulSoup, features="html5lib")


USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14.1; rv:120.0) Gecko/20100101 Firefox/120.0",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0",
]


def random_user_agent():
    return random.choice(USER_AGENTS)


def is_success(status_code):
    # requests' Response.ok is true for redirects too
    return 200 <= status_code < 300


_xml_illegal_re = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def xml_safe(s):
    """Remove the characters XML 1.0 has no way to represent, escaped or not."""
    return _xml_illegal_re.sub("", s)


_unsafe_filename_re = re.compile(r'[\x00-\x1f/\\:*?"<>|]+')


def safe_filename(s):
    s = _unsafe_filename_re.sub("_", s).strip().strip(".")
    return s or "untitled"


def stripright(s, end):
    return s[: -len(end)] if s.endswith(end) else s
