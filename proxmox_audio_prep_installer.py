#!/usr/bin/env python3
"""
Proxmox Audio Prep Installer

Fetches the latest proxmox_audio_prep.py from GitHub and runs it.
The default branch (main or master) is detected with a lightweight probe. The
script is downloaded to a private temporary directory that is always removed
afterwards, optionally installed to /usr/local/sbin/proxmox-audio-prep for
later runs (set INSTALL_LOCAL=0 to skip), and then executed. The installer
exits with the provisioning script's exit status.

Usage:
  curl -fsSL <raw url>/proxmox_audio_prep_installer.py | sudo python3 -
"""

import logging
import os
import shutil
import signal
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Any, Optional, Sequence

import click
import pyfiglet
import requests
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

# ------------------------------
# Configuration
# ------------------------------
REPO = "jarcos-al/airplayer-dependecies-installer"
RAW_BASE_URL = "https://raw.githubusercontent.com"
BRANCH_CANDIDATES = ("main", "master")
SCRIPT_NAME = "proxmox_audio_prep.py"
INSTALL_PATH = "/usr/local/sbin/proxmox-audio-prep"
SCRIPT_MODE = 0o755
CHILD_SIGNALS = (signal.SIGINT, signal.SIGTERM, signal.SIGHUP)

PROBE_TIMEOUT = 10  # seconds
DOWNLOAD_TIMEOUT = 30  # seconds

LOG_FORMAT = "%(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# ------------------------------
# Nord‑Themed Styles & Console Setup
# ------------------------------
console = Console(highlight=False)
logger = logging.getLogger("proxmox_audio_prep_installer")


def print_header(text: str) -> None:
    """Print a striking ASCII art header using pyfiglet."""
    ascii_art = pyfiglet.figlet_format(text, font="slant")
    console.print(ascii_art, style="bold #88C0D0", markup=False)


def print_step(text: str) -> None:
    """Print a step description."""
    console.print(f"[#88C0D0]• {escape(text)}[/#88C0D0]")


def print_success(text: str) -> None:
    """Print a success message."""
    console.print(f"[bold #8FBCBB]✓ {escape(text)}[/bold #8FBCBB]")


def print_warning(text: str) -> None:
    """Print a warning message."""
    console.print(f"[bold #EBCB8B]⚠ {escape(text)}[/bold #EBCB8B]")


def print_error(text: str) -> None:
    """Print an error message."""
    console.print(f"[bold #BF616A]✗ {escape(text)}[/bold #BF616A]")


def setup_logging(debug: bool = False) -> None:
    handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)


# ------------------------------
# Errors
# ------------------------------
class SetupError(Exception):
    """Base exception for installer errors."""

    pass


class DownloadError(SetupError):
    """Raised when the provisioning script cannot be downloaded."""

    pass


class InstallError(SetupError):
    """Raised when the local copy cannot be installed."""

    pass


# ------------------------------
# Fetching
# ------------------------------
def script_url(repo: str, branch: str, name: str = SCRIPT_NAME) -> str:
    return f"{RAW_BASE_URL}/{repo}/{branch}/{name}"


def detect_branch(repo: str) -> str:
    """
    Return the first branch candidate if the script exists there, else the second.

    The probe never fails the run; any error simply selects the fallback.
    """
    primary, fallback = BRANCH_CANDIDATES
    url = script_url(repo, primary)
    try:
        response = requests.head(url, timeout=PROBE_TIMEOUT, allow_redirects=True)
        if response.ok:
            return primary
        logger.debug(f"Probe {url} returned HTTP {response.status_code}")
    except requests.RequestException as e:
        logger.debug(f"Probe {url} failed: {e}")
    return fallback


def download_script(url: str, dest: Path) -> Path:
    """
    Download url to dest and mark it executable.

    Raises:
        DownloadError: On any network or HTTP failure
    """
    logger.debug(f"GET {url}")
    try:
        response = requests.get(url, timeout=DOWNLOAD_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        raise DownloadError(f"Could not download {url}: {e}") from e

    dest.write_bytes(response.content)
    os.chmod(dest, SCRIPT_MODE)
    logger.debug(f"Saved {len(response.content)} bytes to {dest}")
    return dest


def install_local_copy(src: Path, install_path: str) -> Path:
    """
    Copy the downloaded script to install_path so it can be run again offline.

    Raises:
        InstallError: If the copy cannot be written
    """
    target = Path(install_path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, target)
        os.chmod(target, SCRIPT_MODE)
    except OSError as e:
        raise InstallError(f"Could not install {target}: {e}") from e
    return target


def run_script(script: Path, args: Sequence[str] = ()) -> int:
    """
    Run the provisioning script with this interpreter and return its exit status.

    While the child runs, termination signals are ignored here so that
    Ctrl-C or a signal to the process group reaches the provisioner alone
    and its own cleanup finishes. A child killed by signal N yields 128 + N.
    """
    cmd = [sys.executable, str(script), *args]
    logger.debug(f"Executing: {' '.join(cmd)}")
    process = subprocess.Popen(cmd)
    previous = {sig: signal.signal(sig, signal.SIG_IGN) for sig in CHILD_SIGNALS}
    try:
        returncode = process.wait()
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
    if returncode < 0:
        return 128 - returncode
    return returncode


def bootstrap(
    repo: str,
    branch: Optional[str],
    install_local: bool,
    install_path: str,
    script_args: Sequence[str] = (),
) -> int:
    """
    Fetch the provisioning script, optionally install it, and run it.

    Returns:
        The provisioning script's exit status
    """
    branch = branch or detect_branch(repo)
    url = script_url(repo, branch)

    print_header("Audio Prep")
    console.print(f"Repo:   [bold #D8DEE9]{escape(repo)}[/bold #D8DEE9]")
    console.print(f"Branch: [bold #D8DEE9]{escape(branch)}[/bold #D8DEE9]")
    console.print()

    with tempfile.TemporaryDirectory(prefix="proxmox-audio-prep.") as tmp:
        script = Path(tmp) / SCRIPT_NAME
        print_step(f"Downloading {SCRIPT_NAME}...")
        download_script(url, script)

        if install_local:
            print_step(f"Installing local copy in {install_path}")
            install_local_copy(script, install_path)
            print_success(f"You can now run: {install_path}")

        print_step("Running script...")
        return run_script(script, script_args)


# ------------------------------
# Signal Handling
# ------------------------------
def signal_handler(signum: int, frame: Optional[Any]) -> None:
    try:
        sig_name = signal.Signals(signum).name
    except ValueError:
        sig_name = f"signal {signum}"
    print_warning(f"Process interrupted by {sig_name}. Cleaning up...")
    sys.exit(128 + signum)


def install_local_enabled(value: Optional[str]) -> bool:
    """Only the exact value "1" turns the local copy on."""
    return value == "1"


# ------------------------------
# Main CLI Entry Point with Click
# ------------------------------
@click.command(
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False}
)
@click.option("--repo", default=REPO, show_default=True, help="GitHub repository (owner/name)")
@click.option("--branch", default=None, help="Branch to fetch from (detected when omitted)")
@click.option(
    "--install-local",
    default="1",
    envvar="INSTALL_LOCAL",
    show_default=True,
    callback=lambda ctx, param, value: install_local_enabled(value),
    help="1 also installs the script to --install-path; any other value skips it (env: INSTALL_LOCAL)",
)
@click.option("--install-path", default=INSTALL_PATH, show_default=True, help="Where to install the local copy")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.argument("script_args", nargs=-1, type=click.UNPROCESSED)
def main(
    repo: str,
    branch: Optional[str],
    install_local: bool,
    install_path: str,
    debug: bool,
    script_args: Sequence[str],
) -> None:
    """Download proxmox_audio_prep.py and run it, passing SCRIPT_ARGS through."""
    for sig in CHILD_SIGNALS:
        signal.signal(sig, signal_handler)
    setup_logging(debug)

    try:
        code = bootstrap(repo, branch, install_local, install_path, script_args)
    except SetupError as e:
        print_error(str(e))
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
