class EpisodeError(Exception):
    """
    Base class for everything that can go wrong talking to episode.cc.
    """


class FetchError(EpisodeError, IOError):
    def __init__(self, message, url=None):
        super().__init__(message)
        self.url = url


class TransportError(FetchError):
    pass


class HttpStatusError(FetchError):
    def __init__(self, url, status_code, message=None):
        if message is None:
            message = "Error on {}: {}".format(url, status_code)
        super().__init__(message, url)
        self.status_code = status_code


class DeserializationError(FetchError):
    pass


class ParseError(EpisodeError, ValueError):
    pass


class MissingStoryId(ParseError):
    pass


class MissingAuthorName(ParseError):
    pass
