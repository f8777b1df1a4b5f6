"""Common literal values shared across mdlive.

Server routes, defaults, and file names live here so the CLI, the config
loader, the server, and the tests agree on them.

Examples
--------
>>> from mdlive import _constants
>>> _constants.RELOAD_PATH
'/reload'
>>> _constants.DEFAULT_PORT
8080
"""

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
DEFAULT_POLL_INTERVAL = 0.25
DEFAULT_RELOAD_TIMEOUT = 25.0
DEFAULT_PYGMENTS_STYLE = "monokai"
DEFAULT_CONFIG_FILENAME = "mdlive.yaml"

INDEX_PATHS = frozenset({"/", "/index.html"})
STYLESHEET_PATH = "/style.css"
RELOAD_PATH = "/reload"
VERSION_PATH = "/version"

SSE_RETRY_MS = 500
