"""Interactive OAuth setup.

Runs a one-shot local HTTP listener on the redirect URI, sends the user to
the provider's consent page, and waits for the redirect carrying the
authorization code. The listener lives in a background thread and hands
the code to the main flow through a single-slot queue.
"""

import html
import logging
import queue
import sys
import threading
import webbrowser
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import parse_qs, urlparse

from .config import SHUTDOWN_TIMEOUT, Config
from .errors import SetupError
from .oauth import authorization_url, exchange_code
from .tokens import save_tokens

logger = logging.getLogger(__name__)

PAGE = "<html><body><h2>{title}</h2><p>You can close this tab.</p></body></html>"


def _make_handler(callback_path: str, codes: "queue.Queue[str]") -> type:
    """Build a request handler bound to one callback path and result slot."""

    class CallbackHandler(BaseHTTPRequestHandler):
        def do_GET(self):
            url = urlparse(self.path)
            if url.path != callback_path:
                self.send_error(404)
                return

            qs = parse_qs(url.query)
            code = qs.get("code", [""])[0]
            error = qs.get("error", [""])[0]

            if code:
                title = "Authorization successful!"
            elif error:
                title = f"Error: {html.escape(error)}"
            else:
                title = "Error: no code received"

            body = PAGE.format(title=title).encode()
            self.send_response(200)
            self.send_header("Content-Type", "text/html; charset=utf-8")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

            # Only the first callback counts
            if codes.empty():
                codes.put_nowait(code)

        def log_message(self, format, *args):
            logger.debug("callback: " + format, *args)

    return CallbackHandler


class CallbackListener:
    """Bounded-lifetime HTTP listener for the OAuth redirect.

    Usage:
        with CallbackListener(config.redirect_uri) as listener:
            ...
            code = listener.wait()
    """

    def __init__(self, redirect_uri: str):
        url = urlparse(redirect_uri)
        self.host = url.hostname or "localhost"
        self.port = url.port or 80
        self.path = url.path or "/"
        self._codes: "queue.Queue[str]" = queue.Queue(maxsize=1)
        self._server: Optional[HTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Bind and start serving in a background thread."""
        handler = _make_handler(self.path, self._codes)
        try:
            self._server = HTTPServer((self.host, self.port), handler)
        except OSError as e:
            raise SetupError(f"Could not listen on {self.host}:{self.port}: {e}") from e
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        logger.debug("Listening for OAuth callback on %s:%d%s", self.host, self.port, self.path)

    def wait(self, timeout: Optional[float] = None) -> str:
        """Block until the callback fires.

        Returns:
            The authorization code, or "" if the callback carried none.

        Raises:
            SetupError: If `timeout` elapses first.
        """
        try:
            return self._codes.get(timeout=timeout)
        except queue.Empty:
            raise SetupError("Timed out waiting for the authorization callback.") from None

    def shutdown(self, timeout: float = SHUTDOWN_TIMEOUT) -> None:
        """Stop the listener, waiting at most `timeout` seconds."""
        if self._server is None:
            return
        stopper = threading.Thread(target=self._server.shutdown, daemon=True)
        stopper.start()
        stopper.join(timeout)
        if stopper.is_alive():
            logger.debug("Listener did not stop within %.1fs", timeout)
        self._server.server_close()
        self._server = None

    def __enter__(self) -> "CallbackListener":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()


def run_setup(
    config: Config,
    open_browser: Callable[[str], bool] = webbrowser.open,
    wait_timeout: Optional[float] = None,
) -> Path:
    """Authorize this client and persist the resulting tokens.

    Args:
        config: Credentials, endpoints and cache directory.
        open_browser: Opens the consent page. Failure is not fatal.
        wait_timeout: Seconds to wait for the callback. None waits forever.

    Returns:
        Path of the written token file.

    Raises:
        SetupError: If no authorization code was received.
        TokenExchangeError: If the code could not be exchanged.
    """
    url = authorization_url(config)

    with CallbackListener(config.redirect_uri) as listener:
        print("Opening browser for Oura authorization...")
        print("If the browser doesn't open, visit:")
        print(url)
        try:
            opened = open_browser(url)
        except webbrowser.Error as e:
            print(f"Could not open browser automatically: {e}", file=sys.stderr)
            opened = False
        if not opened:
            print("Please open the URL above manually.")

        code = listener.wait(wait_timeout)

    if not code:
        raise SetupError("No authorization code received.")

    tokens = exchange_code(config, code)
    save_tokens(config.token_path, tokens)
    return config.token_path
