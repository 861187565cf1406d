import logging

from cachecontrol import CacheControl
from cachecontrol.caches import FileCache
from cachecontrol.heuristics import ExpiresAfter
import requests
from requests_futures.sessions import FuturesSession

from .errors import HttpStatusError, TransportError
from .helpers import is_success, random_user_agent, soupify


logger = logging.getLogger(__name__)

BASE_URL = "https://episode.cc"


def make_session(user_agent=None, cache_dir=".webcache"):
    """
    A session with a randomized user agent, optionally caching GETs on disk
    for an hour.
    """
    session = requests.Session()
    session.headers["User-Agent"] = user_agent or random_user_agent()
    logger.debug("Using user agent %r", session.headers["User-Agent"])
    if cache_dir is not None:
        session = CacheControl(
            session, heuristic=ExpiresAfter(hours=1), cache=FileCache(cache_dir)
        )
    return session


class Client(object):
    """
    Everything that talks to the site goes through one of these.

    Requests are issued on a thread pool and handed back as futures; use
    `result` or `soupify_request` to collect them. Redirects are never
    followed: the site redirects when it won't serve what was asked for, so
    a 3xx is reported like any other failure status.
    """

    def __init__(self, session=None, base_url=BASE_URL, max_workers=5):
        if session is None:
            session = make_session()
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.futures = FuturesSession(session=session, max_workers=max_workers)

    def url(self, *parts):
        return "/".join([self.base_url] + [str(p).strip("/") for p in parts])

    def get(self, url):
        logger.debug("GET %s", url)
        return self.futures.get(url, allow_redirects=False)

    def post(self, url, data, referer):
        logger.debug("POST %s %r", url, data)
        return self.futures.post(
            url, data=data, headers={"Referer": referer}, allow_redirects=False
        )

    def __repr__(self):
        return "Client({!r})".format(self.base_url)


def result(req, url):
    try:
        r = req.result()
    except requests.RequestException as e:
        raise TransportError("Failed to send request to {}: {}".format(url, e), url) from e
    if not is_success(r.status_code):
        raise HttpStatusError(url, r.status_code)
    return r


def soupify_request(req, url):
    return soupify(result(req, url).text)
