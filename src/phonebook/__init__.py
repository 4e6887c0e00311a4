"""phonebook -- declarative trees of HTTP request definitions.

A book is a tree of named chapters (``api.users.posts``). Every node adds a
URL fragment, default request data and default transport options; requests
issued anywhere in the tree merge those contributions from the root down and
hand the result to a pluggable transport.

Typical use::

    import phonebook

    book = phonebook.open(url_fragment="/api", restful=True)
    book.add_chapter("users", url_fragment="/users")
    book.users.define("search", url_fragment="/search", method="GET")

    book.users.get(data={"id": 42})      # GET /api/users/42
    book.users.search({"q": "ada"})      # GET /api/users/search?q=ada

Modules:
    book: the request tree (:class:`Phonebook`, :class:`Route`).
    defaults: static or computed default mappings.
    urls: URL fragment joining and placeholder substitution.
    transport: collaborators that execute prepared requests.
    loader: build books from JSON/YAML definition files.
    config: transport settings from flags, environment and project file.
    app: the ``phonebook`` command line.
"""

__version__ = "1.0.0"

from phonebook.book import Phonebook, Route, open  # noqa: E402

__all__ = ["Phonebook", "Route", "open", "__version__"]
