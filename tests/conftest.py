"""Shared fixtures for all tests."""
import asyncio
import socket
import subprocess
import sys
import time

import pytest

from dealers_choice.managers.game_manager import game_manager


@pytest.fixture(autouse=True)
def _ensure_event_loop():
    """Give every test a fresh default event loop.

    PokerGame creates an asyncio.Lock in __init__; on older interpreters that
    binds to the current loop, which asyncio.run() in a previous test closed.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield
    loop.close()


@pytest.fixture
def clean_games():
    """Empty the global game registry before and after a test."""
    game_manager._games.clear()
    yield game_manager
    game_manager._games.clear()


@pytest.fixture(scope="session")
def live_server():
    """Start a real uvicorn process on port 18000; yield; stop it."""
    port = 18000
    proc = subprocess.Popen(
        [
            sys.executable, "-m", "uvicorn", "dealers_choice.main:app",
            "--host", "127.0.0.1",
            "--port", str(port),
            "--log-level", "warning",
        ],
    )
    # Poll until port is accepting connections (up to 6 s)
    deadline = time.time() + 6
    while time.time() < deadline:
        try:
            s = socket.create_connection(("127.0.0.1", port), timeout=0.5)
            s.close()
            break
        except OSError:
            time.sleep(0.2)
    else:
        proc.terminate()
        raise RuntimeError("uvicorn did not start in time on port 18000")

    yield proc

    proc.terminate()
    proc.wait()
