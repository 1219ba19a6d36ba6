"""Configuration constants for the static and todo servers."""

HOST: str = "0.0.0.0"
PORT: int = 8080
STATIC_DIR: str = "static"
STATIC_PREFIX: str = "/static/"
TEMPLATES_DIR: str = "templates"
TODO_TEMPLATE: str = "todo.html"
DEFAULT_TODO_ITEMS: tuple[str, ...] = ("顔を洗う", "朝食を食べる", "歯を磨く")

SERVER_NAME: str = "tinyweb/0.1"
BUFFER_SIZE: int = 4096
SOCKET_TIMEOUT_SECS: int = 5
ACCEPT_TIMEOUT_SECS: float = 0.2
LINGER_TIMEOUT_SECS: float = 0.5
MAX_HEADER_BYTES: int = 16_384
MAX_BODY_BYTES: int = 65_536
MAX_TARGET_LENGTH: int = 2048
MAX_KEEPALIVE_REQUESTS: int = 100
LOG_FORMAT: str = "plain"
