"""Mock NDM telnet server for unit testing."""

import socket
import threading
import time
from typing import Callable
from xml.sax.saxutils import quoteattr


def frame(
    body: str = "",
    code: int = 0,
    continued: bool = False,
    message: str = "",
) -> str:
    """Build a response frame as the server sends it."""
    return (
        f'<response code="0x{code:08x}" continued="{"yes" if continued else "no"}" '
        f"message={quoteattr(message)}>{body}</response>\r\n"
    )


class MockNdmServer:
    """Mock telnet server answering commands with response frames."""

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 0,  # 0 = random port
        prompt: str = "(config)> ",
        username: str = "admin",
        password: str = "secret",
        chunk_delay: float = 0.0,
    ) -> None:
        """Initialize mock server.

        Parameters
        ----------
        host : str, optional
            Bind host, by default "127.0.0.1"
        port : int, optional
            Bind port (0 for random), by default 0
        prompt : str, optional
            Shell prompt, by default "(config)> "
        username : str, optional
            Accepted user name, by default "admin"
        password : str, optional
            Accepted password, by default "secret"
        chunk_delay : float, optional
            Pause between the chunks a handler returns, by default 0.0
        """
        self.host = host
        self.port = port
        self.prompt = prompt
        self.username = username
        self.password = password
        self.chunk_delay = chunk_delay

        self.socket: socket.socket | None = None
        self.server_thread: threading.Thread | None = None
        self.running = False
        self.actual_port: int | None = None
        self.command_handler: Callable[[str], list[str]] | None = None
        self.commands: list[str] = []

    def set_command_handler(self, handler: Callable[[str], list[str]]) -> None:
        """Set command handler returning the frames to send for a command."""
        self.command_handler = handler

    def start(self) -> int:
        """Start the mock server.

        Returns
        -------
        int
            Actual port number
        """
        self.socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.socket.bind((self.host, self.port))
        self.socket.listen(1)
        self.actual_port = self.socket.getsockname()[1]
        self.running = True

        self.server_thread = threading.Thread(target=self._server_loop, daemon=True)
        self.server_thread.start()

        return self.actual_port

    def stop(self) -> None:
        """Stop the mock server."""
        self.running = False
        if self.socket:
            try:
                # Wakes up a pending accept() on Linux
                self.socket.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            try:
                self.socket.close()
            except OSError:
                pass

        if self.server_thread:
            self.server_thread.join(timeout=1.0)

    def _server_loop(self) -> None:
        while self.running:
            try:
                conn, _ = self.socket.accept()
            except OSError:
                break
            self._handle_client(conn)

    def _readline(self, reader) -> str:
        line = reader.readline()
        if not line:
            raise EOFError
        return line.decode().strip()

    def _handle_client(self, conn: socket.socket) -> None:
        reader = conn.makefile("rb")
        try:
            conn.sendall(b"login: ")
            username = self._readline(reader)

            conn.sendall(b"Password: ")
            password = self._readline(reader)

            if (username, password) != (self.username, self.password):
                conn.sendall(b"\r\nLogin incorrect\r\n")
                return

            conn.sendall(self.prompt.encode())

            while self.running:
                command = self._readline(reader)
                self.commands.append(command)

                if self.command_handler:
                    frames = self.command_handler(command)
                else:
                    frames = [frame()]

                for item in frames:
                    conn.sendall(item.encode())
                    if self.chunk_delay:
                        time.sleep(self.chunk_delay)
                conn.sendall(self.prompt.encode())

        except (EOFError, OSError):
            pass
        finally:
            reader.close()
            conn.close()

    def __enter__(self) -> "MockNdmServer":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
