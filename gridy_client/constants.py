"""
Constants for the Gridy ID client library.
Header names and formats must match the Gridy ID service byte for byte.
"""

# HTTP Headers
HEADER_API_USER = "x-gridy-apiuser"
HEADER_UTC_TIME = "x-gridy-utctime"
HEADER_CNONCE = "x-gridy-cnonce"
HEADER_AUTHORIZATION = "Authorization"
HEADER_USER_AGENT = "User-Agent"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_ACCEPT = "Accept"

# Header templates (user, signature) and (timestamp, nonce)
AUTH_HEADER_TEMPLATE = (
    "gridy-hmac: apiuser={},"
    "signedheaders=x-gridy-utctime;x-gridy-cnonce,"
    "algorithm=gridy-hmac512,"
    "signature={}"
)
SIGNED_HEADERS_TEMPLATE = "x-gridy-utctime: {}\nx-gridy-cnonce: {}"

# Content types
JSON_UTF8 = "application/json; charset=utf-8"
JSON = "application/json"

# Named environments
HOST_PRODUCTION = "https://api.gridy.io/prod"
HOST_UAT = "https://uat.gridy.io/uat"
HOST_SETTINGS = [
    {"url": HOST_PRODUCTION, "description": "Production"},
    {"url": HOST_UAT, "description": "User acceptance testing"},
]

API_VERSION = "1.0.0"
CLIENT_VERSION = "0.5.0"
DEFAULT_USER_AGENT = f"gridy-python-client-v{CLIENT_VERSION}"

# Default configuration values
DEFAULT_CONFIG = {
    'host': HOST_PRODUCTION,
    'user_agent': DEFAULT_USER_AGENT,
    'debug': False,
    'timeout': 30,              # HTTP timeout in seconds
}

NONCE_BYTES = 16
