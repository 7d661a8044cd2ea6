TCP_HOST = "127.0.0.1"
TCP_PORT = 12345
SOURCE_HOST = "127.0.0.1"
SOURCE_PORT = 0

PACKET_SIZE = 1500
NCONN = 254

# reserved for a request/response mode that does not exist yet
REQRES = False
NFLIGHT = 1024

PROFILE_PREFIX = ""
PROFILE_PERIOD = 300
STATS_INTERVAL = 5

LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
