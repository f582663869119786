"""Shared fixtures and utilities for integration tests."""

import socket
import subprocess
import sys
import time
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def kill_process_on_port(port: int) -> None:
    """Kill any process listening on the specified port.

    This prevents zombie servers from previous test runs from blocking new tests.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.settimeout(1)
    try:
        in_use = sock.connect_ex(('127.0.0.1', port)) == 0
    finally:
        sock.close()
    if not in_use:
        return

    try:
        subprocess.run(f'fuser -k {port}/tcp', shell=True, check=False, capture_output=True)
    except OSError:
        return
    time.sleep(0.5)


def wait_for_server(port: int, timeout: float = 5.0) -> bool:
    """Wait for server to start accepting connections.

    Returns True if server is ready, False if timeout.
    """
    start_time = time.time()
    while time.time() - start_time < timeout:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(0.5)
        try:
            if sock.connect_ex(('127.0.0.1', port)) == 0:
                return True
        finally:
            sock.close()
        time.sleep(0.1)
    return False


def create_server_fixture(port: int, *extra_args: str, ready_port: int = None):
    """Factory function to create a server fixture for a given port."""
    @pytest.fixture
    def server_fixture():
        kill_process_on_port(port)
        if ready_port is not None:
            kill_process_on_port(ready_port)

        proc = subprocess.Popen(
            [sys.executable, "-m", "server.main",
             "--host", "127.0.0.1", "--port", str(port),
             "--config-dir", str(PROJECT_ROOT / "config"), *extra_args],
            cwd=str(PROJECT_ROOT),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )

        if not wait_for_server(ready_port or port, timeout=15.0):
            poll_result = proc.poll()
            if poll_result is not None:
                _, stderr = proc.communicate(timeout=2)
                stderr_text = stderr.decode().strip() if stderr else "No stderr"
                error_msg = f"Server process exited with code {poll_result}. stderr: {stderr_text}"
            else:
                error_msg = "Server did not start accepting connections in time"
                proc.terminate()
                try:
                    proc.wait(timeout=2)
                except subprocess.TimeoutExpired:
                    proc.kill()
                    proc.wait()
            pytest.fail(f"Server failed to start on port {port}: {error_msg}")

        yield proc

        proc.terminate()
        try:
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()

    return server_fixture


server_pairs_18015 = create_server_fixture(18015)
server_solo_18016 = create_server_fixture(18016, "--mode", "solo")
server_websocket_18017 = create_server_fixture(18017, "--ws-port", "18018", ready_port=18018)
