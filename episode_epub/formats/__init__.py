from .epub import make_epub
