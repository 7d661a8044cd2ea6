from tcp.state import ConfigError


def make_payload(size: int) -> bytes:
    """Allocate the payload every write pump sends.

    Content is irrelevant, only the length is measured. The result is an
    immutable ``bytes`` so all pumps can share it without locking.
    """
    if size <= 0:
        raise ConfigError(f"payload size must be positive, got {size}")
    return bytes(size)
