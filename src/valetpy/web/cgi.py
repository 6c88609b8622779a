"""Front-controller execution over CGI.

The front controller runs as a ``php-cgi`` child process whose working
directory is the script's own directory. The serving process never
changes its own working directory.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from valetpy.domain.types import DynamicDecision
from valetpy.errors import FrontControllerError

logger = logging.getLogger(__name__)

GATEWAY_INTERFACE = "CGI/1.1"
SERVER_SOFTWARE = "valetpy"
# Inherited from the serving process so php-cgi can find its own libraries.
_PASSTHROUGH_ENV = ("PATH", "LANG", "LC_ALL", "PHPRC", "PHP_INI_SCAN_DIR", "TMPDIR")


@dataclass
class CgiRequest:
    """The parts of the HTTP request a front controller needs."""

    method: str
    request_uri: str
    query_string: str
    host: str
    port: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    remote_addr: str = "127.0.0.1"
    scheme: str = "http"


@dataclass
class CgiResponse:
    """Parsed CGI output."""

    status: int
    headers: list[tuple[str, str]]
    body: bytes


def script_name(decision: DynamicDecision) -> str:
    """URL path of the front controller relative to its document root."""
    try:
        relative = decision.front_controller_path.relative_to(decision.document_root)
    except ValueError:
        return f"/{decision.front_controller_path.name}"
    return f"/{relative.as_posix()}"


def build_environ(decision: DynamicDecision, request: CgiRequest) -> dict[str, str]:
    """Build the CGI/1.1 environment for *decision*."""
    environ = {key: os.environ[key] for key in _PASSTHROUGH_ENV if key in os.environ}
    environ.update(
        {
            "GATEWAY_INTERFACE": GATEWAY_INTERFACE,
            "SERVER_SOFTWARE": SERVER_SOFTWARE,
            "SERVER_PROTOCOL": "HTTP/1.1",
            "SERVER_NAME": request.host,
            "SERVER_PORT": str(request.port),
            "SERVER_ADDR": "127.0.0.1",
            "REMOTE_ADDR": request.remote_addr,
            "REQUEST_SCHEME": request.scheme,
            "REQUEST_METHOD": request.method.upper(),
            "REQUEST_URI": request.request_uri,
            "QUERY_STRING": request.query_string,
            "DOCUMENT_ROOT": str(decision.document_root),
            "SCRIPT_FILENAME": str(decision.front_controller_path),
            "SCRIPT_NAME": script_name(decision),
            "PHP_SELF": decision.uri,
            # php-cgi refuses to run without this when force-cgi-redirect is on.
            "REDIRECT_STATUS": "200",
        }
    )
    if request.scheme == "https":
        environ["HTTPS"] = "on"

    for name, value in request.headers.items():
        key = name.upper().replace("-", "_")
        if key == "CONTENT_TYPE":
            environ["CONTENT_TYPE"] = value
        elif key == "CONTENT_LENGTH":
            continue
        elif key != "PROXY":  # httpoxy
            environ[f"HTTP_{key}"] = value
    environ["CONTENT_LENGTH"] = str(len(request.body)) if request.body else ""
    return environ


def parse_cgi_output(raw: bytes) -> CgiResponse:
    """Split CGI stdout into status, headers, and body.

    A ``Status`` header sets the status code; a ``Location`` header without
    one implies 302.
    """
    head, body = raw, b""
    for separator in (b"\r\n\r\n", b"\n\n"):
        index = raw.find(separator)
        if index != -1:
            head, body = raw[:index], raw[index + len(separator) :]
            break

    status: int | None = None
    headers: list[tuple[str, str]] = []
    for line in head.decode("latin-1").splitlines():
        if not line.strip() or ":" not in line:
            continue
        name, _, value = line.partition(":")
        name, value = name.strip(), value.strip()
        if name.lower() == "status":
            try:
                status = int(value.split()[0])
            except (IndexError, ValueError):
                logger.warning("Ignoring malformed CGI Status header: %r", value)
            continue
        headers.append((name, value))

    if status is None:
        has_location = any(name.lower() == "location" for name, _ in headers)
        status = 302 if has_location else 200
    return CgiResponse(status=status, headers=headers, body=body)


def run_front_controller(
    decision: DynamicDecision,
    request: CgiRequest,
    *,
    php_cgi: str = "php-cgi",
    timeout: float = 60.0,
) -> CgiResponse:
    """Execute the front controller and return its parsed response.

    Raises FrontControllerError if the CGI binary is missing, times out,
    or exits non-zero without producing output.
    """
    script: Path = decision.front_controller_path
    environ = build_environ(decision, request)
    try:
        result = subprocess.run(
            [php_cgi],
            input=request.body,
            capture_output=True,
            cwd=decision.working_dir,
            env=environ,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as exc:
        msg = f"CGI binary not found: {php_cgi}"
        raise FrontControllerError(msg, script=script) from exc
    except subprocess.TimeoutExpired as exc:
        msg = f"{script} did not finish within {timeout:g}s"
        raise FrontControllerError(msg, script=script) from exc
    except OSError as exc:
        msg = f"Could not run {php_cgi}: {exc}"
        raise FrontControllerError(msg, script=script) from exc

    if result.stderr:
        logger.warning("%s stderr: %s", script, result.stderr.decode("utf-8", "replace").strip())
    if result.returncode != 0 and not result.stdout:
        msg = f"{php_cgi} exited with status {result.returncode} for {script}"
        raise FrontControllerError(msg, script=script)
    return parse_cgi_output(result.stdout)
