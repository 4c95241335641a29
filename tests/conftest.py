import pytest

from gift_exchange.exchange import GiftExchange
from gift_exchange.sessions import SessionRegistry

FIXED_NOW = 1_000_000


class IdentityRng:
    """Random source whose shuffle never moves anything."""

    def shuffle(self, seq):
        return None


@pytest.fixture
def exchange():
    return GiftExchange(SessionRegistry(), clock=lambda: FIXED_NOW)


@pytest.fixture
def lobby(exchange):
    """A session hosted by ``host`` with Alice (the host) and Bob joined."""
    code = exchange.create_session("host").payload["code"]
    alice = exchange.join_session("host", code, "Alice").payload["userId"]
    bob = exchange.join_session("bob-conn", code, "Bob").payload["userId"]
    return code, {"Alice": alice, "Bob": bob}


def submit_all(exchange, code, users):
    for name, user_id in users.items():
        connection = "host" if name == "Alice" else f"{name.lower()}-conn"
        result = exchange.submit_gift(connection, code, user_id, f"From {name}", f"secret of {name}")
        assert result.ok, result.error
