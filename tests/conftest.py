import json
from urllib.parse import parse_qs

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from episode_epub.client import Client


BASE = "https://episode.test"


class FakeAdapter(BaseAdapter):
    """
    Answers requests from a table of canned responses instead of the network.

    Routes map (method, url) to (status, body, headers) or to a callable
    taking the prepared request and returning one. Unknown URLs fail the way
    an unreachable host would.
    """

    def __init__(self):
        super().__init__()
        self.routes = {}
        self.sent = []

    def add(self, method, url, status=200, body=b"", headers=None):
        self.routes[(method, url)] = (status, body, headers or {})

    def send(self, request, **kwargs):
        self.sent.append(request)
        route = self.routes.get((request.method, request.url))
        if route is None:
            raise requests.ConnectionError(
                "no route to {}".format(request.url), request=request
            )
        if callable(route):
            route = route(request)
        status, body, headers = route

        r = requests.Response()
        r.status_code = status
        r._content = body.encode("utf-8") if isinstance(body, str) else body
        r._content_consumed = True
        r.headers = CaseInsensitiveDict(headers)
        r.encoding = "utf-8"
        r.url = request.url
        r.request = request
        return r

    def close(self):
        pass


def page_json(title, body, **overrides):
    d = {
        "FC": "#000",
        "FC1": "",
        "FC2": "",
        "BG": "#fff",
        "VMOBISHIFT": "",
        "PARABGOP": "",
        "IMAGESOURCE": "",
        "EMBEDIMGSOURCE": "",
        "PHOTOGRAPHER": "",
        "DMMODEL": "",
        "IDENT": 0,
        "HEIGHT": 0,
        "HTMLBODY": body,
        "TITLE": title,
        "VRTPTITLE": 0,
        "PAGELOCK": 0,
        "PWHINT": "",
        "KEYINPUT": 0,
        "PAGEACCESSTYPE": 0,
        "MyPRAISE": 0,
        "PRAISECOUNT": 3,
        "UID": "someone",
        "TODAYHITS": "1",
        "TOTALHITS": "100",
        "RATE": "",
        "COMMENTSIZE": 0,
        "GATHERST": 0,
        "PLUGINDATA": "",
        "StoryPWpass": True,
    }
    d.update(overrides)
    return d


def about_html(name, stories):
    entries = "\n".join(
        '<div class="stystory"><a href="/{}">{}</a><span>2023/01/01</span></div>'.format(
            path, title
        )
        for title, path in stories
    )
    return """<!DOCTYPE html>
<html><head><title>關於 {}</title></head>
<body><div id="stories">{}</div></body></html>""".format(
        name, entries
    )


def first_page_html(story_id, page_count=None):
    pager = ""
    if page_count is not None:
        pager = '<div style="float:left">{} 頁</div>'.format(page_count)
    return """<!DOCTYPE html>
<html><head><title>story</title></head>
<body>
<img class="roundcorner" src="" />
<img class="roundcorner" src="/content/coverimage/{}.jpg?637000" />
<div style="float:left">作者</div>
{}
</body></html>""".format(
        story_id.lower(), pager
    )


class FakeSite(object):
    def __init__(self, adapter, base=BASE):
        self.adapter = adapter
        self.base = base
        self.pages = {}
        adapter.routes[("POST", base + "/Reading/GetPage")] = self._get_page

    def author(self, author_id, name, stories, status=200):
        self.adapter.add(
            "GET", "{}/about/{}".format(self.base, author_id), status, about_html(name, stories)
        )

    def story(self, path, story_id, page_count=None, status=200):
        self.adapter.add(
            "GET",
            "{}/{}/0".format(self.base, path),
            status,
            first_page_html(story_id, page_count),
        )

    def page(self, story_id, index, title, body, status=200):
        self.pages[(story_id, str(index))] = (
            status,
            json.dumps(page_json(title, body)),
            {"Content-Type": "application/json; charset=utf-8"},
        )

    def cover(self, story_id, content, status=200):
        self.adapter.add(
            "GET",
            "{}/content/coverimage/{}.jpg".format(self.base, story_id),
            status,
            content,
        )

    def _get_page(self, request):
        form = parse_qs(request.body, keep_blank_values=True)
        key = (form["SID"][0], form["PID"][0])
        if key not in self.pages:
            return (404, "", {})
        return self.pages[key]


@pytest.fixture
def adapter():
    return FakeAdapter()


@pytest.fixture
def client(adapter):
    session = requests.Session()
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return Client(session, base_url=BASE)


@pytest.fixture
def site(adapter):
    return FakeSite(adapter)
