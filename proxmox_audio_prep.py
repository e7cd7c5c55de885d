#!/usr/bin/env python3
"""
Proxmox Audio Prep (root-friendly)
--------------------------------------------------

Idempotent audio preparation for Proxmox VE and other Debian-based hosts.
This utility performs the following operations:
  • Ensures the 'audio' group exists and that root belongs to it
  • Installs ALSA tooling and useful diagnostics (alsa-utils, pciutils)
  • Reports the sound cards the kernel and ALSA can see
  • Keeps snd_usb_audio from stealing ALSA index 0 (stable card ordering)
  • Recommends a reboot only when something actually changed

Every step checks the current state first, so running the script again on a
prepared host changes nothing. Existing configuration files are backed up
before they are modified. Everything that happens is appended to the run log.

Note: This script requires root privileges.

Usage:
  sudo python3 proxmox_audio_prep.py [--strict] [--debug]

Version: 1.1.0
"""

# ----------------------------------------------------------------
# Imports
# ----------------------------------------------------------------
import datetime
import logging
import os
import shutil
import signal
import subprocess
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Set, Tuple

import click
import pyfiglet
from rich.box import ROUNDED
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text
from rich.traceback import install as install_rich_traceback

# Install rich traceback handler for better error reporting
install_rich_traceback(show_locals=True)

# ----------------------------------------------------------------
# Configuration & Constants
# ----------------------------------------------------------------
APP_NAME = "Audio Prep"
APP_SUBTITLE = "Proxmox ALSA Preparation"
VERSION = "1.1.0"

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Stages in execution order, used for the status report
STAGES = (
    "root_check",
    "audio_group",
    "packages",
    "sound_cards",
    "modprobe_order",
    "summary",
)


@dataclass
class Config:
    """Run configuration. Every field can be overridden from the command line."""

    LOG_FILE: str = "/tmp/proxmox-audio-prep.log"
    MODPROBE_CONF: str = "/etc/modprobe.d/alsa-base.conf"
    MODPROBE_LINE: str = "options snd_usb_audio index=-2"
    CONF_MODE: int = 0o644
    AUDIO_GROUP: str = "audio"
    AUDIO_USER: str = "root"
    CARDS_FILE: str = "/proc/asound/cards"
    DEBIAN_VERSION_FILE: str = "/etc/debian_version"
    COMMAND_TIMEOUT: int = 600  # seconds
    DIAG_TIMEOUT: int = 30  # seconds
    STRICT: bool = False
    DEBUG: bool = False

    # (package, representative executable)
    PACKAGES: List[Tuple[str, str]] = field(
        default_factory=lambda: [
            ("alsa-utils", "aplay"),
            ("pciutils", "lspci"),
            # Ships no executable. 'true' always resolves, so the firmware is
            # only installed by hand on hosts that need it.
            ("firmware-sof-signed", "true"),
        ]
    )


# ----------------------------------------------------------------
# Nord-Themed Colors
# ----------------------------------------------------------------
class NordColors:
    """Nord color palette for consistent theming throughout the application."""

    POLAR_NIGHT_4 = "#4C566A"
    SNOW_STORM_1 = "#D8DEE9"
    SNOW_STORM_2 = "#E5E9F0"
    FROST_1 = "#8FBCBB"
    FROST_2 = "#88C0D0"
    FROST_3 = "#81A1C1"
    FROST_4 = "#5E81AC"
    RED = "#BF616A"
    YELLOW = "#EBCB8B"
    GREEN = "#A3BE8C"


console = Console(highlight=False)

logger = logging.getLogger("proxmox_audio_prep")
logger.addHandler(logging.NullHandler())


# ----------------------------------------------------------------
# Custom Exceptions
# ----------------------------------------------------------------
class SetupError(Exception):
    """Base exception for setup errors."""

    pass


class ExecutionError(SetupError):
    """Raised when command execution fails."""

    pass


class PermissionError(SetupError):
    """Raised when insufficient permissions are detected."""

    pass


# ----------------------------------------------------------------
# Run Context
# ----------------------------------------------------------------
@dataclass
class RunContext:
    """
    State shared by the stages of a single run.

    Attributes:
        config: The run configuration
        apt_updated: Whether the package cache was refreshed during this run
        needs_reboot: Whether a change was made that calls for a reboot or re-login
        backed_up: Files already backed up during this run
        changes: Human-readable list of every mutation performed
        issues: Human-readable list of every degraded or failed step
        status: Per-stage status for the final report
    """

    config: Config = field(default_factory=Config)
    apt_updated: bool = False
    needs_reboot: bool = False
    backed_up: Set[str] = field(default_factory=set)
    changes: List[str] = field(default_factory=list)
    issues: List[str] = field(default_factory=list)
    status: Dict[str, Dict[str, str]] = field(
        default_factory=lambda: {
            stage: {"status": "pending", "message": ""} for stage in STAGES
        }
    )

    def record_change(self, description: str, reboot: bool = True) -> None:
        self.changes.append(description)
        if reboot:
            self.needs_reboot = True
        logger.debug(f"Change recorded: {description}")

    def record_issue(self, description: str) -> None:
        if description not in self.issues:
            self.issues.append(description)

    def set_status(self, stage: str, status: str, message: str = "") -> None:
        self.status[stage] = {"status": status, "message": message}


# ----------------------------------------------------------------
# Logging and Console Helpers
# ----------------------------------------------------------------
@contextmanager
def log_session(log_file: str, debug: bool = False) -> Iterator[logging.Logger]:
    """
    Attach the run log (and, with debug, a Rich console handler) for the
    duration of the block. Handlers are flushed and closed on every exit path.

    Args:
        log_file: Path of the run log, opened in append mode
        debug: Whether to echo DEBUG records (commands and their output) to the console

    Yields:
        The configured logger
    """
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    file_handler.setLevel(logging.DEBUG)
    handlers: List[logging.Handler] = [file_handler]

    if debug:
        rich_handler = RichHandler(
            console=console, rich_tracebacks=True, markup=False, show_path=False
        )
        rich_handler.setLevel(logging.DEBUG)
        # Everything above DEBUG is already printed by the print_* helpers
        rich_handler.addFilter(lambda record: record.levelno == logging.DEBUG)
        handlers.append(rich_handler)

    previous_level = logger.level
    logger.setLevel(logging.DEBUG)
    for handler in handlers:
        logger.addHandler(handler)

    logger.info(f"===== {APP_NAME} v{VERSION} run started =====")
    try:
        yield logger
    finally:
        logger.info(f"===== {APP_NAME} run finished =====")
        for handler in handlers:
            handler.flush()
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(previous_level)


def create_header() -> Panel:
    """
    Create an ASCII art header using Pyfiglet with a Nord-themed gradient.

    Returns:
        Panel: A Rich Panel containing the styled header.
    """
    ascii_art = ""
    for font in ("slant", "small", "standard"):
        try:
            ascii_art = pyfiglet.Figlet(font=font, width=60).renderText(APP_NAME)
            if ascii_art.strip():
                break
        except pyfiglet.FontNotFound:
            continue

    if not ascii_art.strip():
        ascii_art = f"=== {APP_NAME} ===\n"

    lines = [line for line in ascii_art.splitlines() if line.strip()]
    colors = [
        NordColors.FROST_1,
        NordColors.FROST_2,
        NordColors.FROST_3,
        NordColors.FROST_4,
    ]

    styled_text = ""
    for i, line in enumerate(lines):
        color = colors[i % len(colors)]
        escaped_line = line.replace("[", "\\[").replace("]", "\\]")
        styled_text += f"[bold {color}]{escaped_line}[/]\n"

    border = f"[{NordColors.FROST_3}]{'━' * 40}[/]"
    return Panel(
        Text.from_markup(f"{border}\n{styled_text}{border}"),
        border_style=Style(color=NordColors.FROST_1),
        padding=(1, 2),
        box=ROUNDED,
        title=f"[bold {NordColors.SNOW_STORM_2}]v{VERSION}[/]",
        title_align="right",
        subtitle=f"[bold {NordColors.SNOW_STORM_1}]{APP_SUBTITLE}[/]",
        subtitle_align="center",
    )


def print_message(
    text: str, style: str = NordColors.FROST_2, prefix: str = "•"
) -> None:
    """
    Print a styled message to the console.

    Args:
        text: The message to print
        style: The color to use
        prefix: Symbol to prefix the message with
    """
    console.print(f"[{style}]{prefix} {escape(text)}[/{style}]")


def print_step(text: str) -> None:
    """Print an informational step and log it."""
    print_message(text, NordColors.FROST_3, "➜")
    logger.info(text)


def print_success(text: str) -> None:
    """Print a success message and log it."""
    print_message(text, NordColors.GREEN, "✓")
    logger.info(f"SUCCESS: {text}")


def print_warning(text: str) -> None:
    """Print a warning message and log it."""
    print_message(text, NordColors.YELLOW, "⚠")
    logger.warning(text)


def print_error(text: str) -> None:
    """Print an error message and log it."""
    print_message(text, NordColors.RED, "✗")
    logger.error(text)


def print_section(title: str) -> None:
    """
    Print a section header with a decorative separator.

    Args:
        title: The section title to display
    """
    console.print()
    console.print(f"[bold {NordColors.FROST_1}]== {title.upper()} ==[/]")
    console.print(f"[{NordColors.FROST_3}]{'─' * 60}[/]")
    logger.info(f"--- {title} ---")


def status_report(ctx: RunContext) -> None:
    """Display a table with the outcome of every stage of the run."""
    icons = {
        "success": "✓",
        "warning": "⚠",
        "failed": "✗",
        "pending": "?",
        "in_progress": "⋯",
    }
    styles = {
        "success": NordColors.GREEN,
        "warning": NordColors.YELLOW,
        "failed": NordColors.RED,
    }

    table = Table(
        show_header=True,
        header_style=f"bold {NordColors.FROST_1}",
        border_style=NordColors.FROST_3,
        box=ROUNDED,
        title=f"[bold {NordColors.FROST_2}]Audio Prep Status[/]",
        title_justify="center",
        expand=True,
    )
    table.add_column("Stage", style=f"bold {NordColors.FROST_2}")
    table.add_column("Status", justify="center")
    table.add_column("Message", style=NordColors.SNOW_STORM_1, ratio=3)

    for stage, data in ctx.status.items():
        st = data["status"]
        style = styles.get(st, NordColors.POLAR_NIGHT_4)
        table.add_row(
            stage.replace("_", " ").title(),
            f"[{style}]{icons.get(st, '?')} {st.upper()}[/]",
            data["message"],
        )
        logger.info(f"Status {stage}: {st} {data['message']}".rstrip())

    console.print(table)


# ----------------------------------------------------------------
# Command Execution Helpers
# ----------------------------------------------------------------
def run_command(
    cmd: List[str],
    env: Optional[Dict[str, str]] = None,
    check: bool = True,
    timeout: Optional[int] = None,
) -> subprocess.CompletedProcess:
    """
    Execute a system command, writing its output to the run log.

    Args:
        cmd: Command to execute
        env: Environment variables
        check: Whether to raise an exception on non-zero exit
        timeout: Command timeout in seconds

    Returns:
        subprocess.CompletedProcess object

    Raises:
        ExecutionError: If the command cannot be run, times out, or fails with check=True
    """
    cmd_str = " ".join(cmd)
    logger.debug(f"Executing: {cmd_str}")
    try:
        result = subprocess.run(
            cmd,
            env=env or os.environ.copy(),
            check=False,
            text=True,
            capture_output=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        raise ExecutionError(f"Command timed out after {timeout} seconds: {cmd_str}")
    except OSError as e:
        raise ExecutionError(f"Error executing command: {cmd_str}: {e}")

    if result.stdout and result.stdout.strip():
        logger.debug(f"stdout ({cmd[0]}):\n{result.stdout.rstrip()}")
    if result.stderr and result.stderr.strip():
        logger.debug(f"stderr ({cmd[0]}):\n{result.stderr.rstrip()}")

    if check and result.returncode != 0:
        error_msg = f"Command failed (code {result.returncode}): {cmd_str}"
        if result.stderr and result.stderr.strip():
            error_msg += f"\nError: {result.stderr.strip()}"
        raise ExecutionError(error_msg)
    return result


def apt_env() -> Dict[str, str]:
    env = os.environ.copy()
    env["DEBIAN_FRONTEND"] = "noninteractive"
    return env


# ----------------------------------------------------------------
# Utility Functions
# ----------------------------------------------------------------
class Utils:
    """Utility methods for common operations."""

    @staticmethod
    def command_exists(cmd: str) -> bool:
        """
        Check if a command exists in the system PATH.

        Args:
            cmd: Command name to check

        Returns:
            True if the command exists, False otherwise
        """
        return shutil.which(cmd) is not None

    @staticmethod
    def is_debian_like(config: Config) -> bool:
        """Whether the host looks like Debian and has apt-get available."""
        return os.path.isfile(config.DEBIAN_VERSION_FILE) and Utils.command_exists(
            "apt-get"
        )

    @staticmethod
    def backup_file(fp: str) -> Optional[str]:
        """
        Backup a file with a timestamp suffix, preserving its metadata.

        Args:
            fp: Path to the file to backup

        Returns:
            Path to the backup file, or None if there was nothing to back up
        """
        if not os.path.isfile(fp):
            return None
        ts = datetime.datetime.now().strftime("%Y%m%d%H%M%S")
        backup = f"{fp}.bak.{ts}"
        shutil.copy2(fp, backup)
        logger.info(f"Backed up {fp} to {backup}")
        return backup


def backup_once(ctx: RunContext, path: Path) -> Optional[str]:
    """Back up path unless it was already backed up during this run."""
    key = str(path)
    if key in ctx.backed_up:
        return None
    backup = Utils.backup_file(key)
    if backup:
        ctx.backed_up.add(key)
        print_step(f"Backup: {path} -> {backup}")
    return backup


def ensure_line_in_file(ctx: RunContext, line: str, path: Path) -> bool:
    """
    Append line to path unless an identical whole line is already present.

    The file is created if missing. An existing file is backed up before it
    is first modified in a run, and its content is never rewritten. Matching
    is done on raw bytes, so files in any encoding are handled.

    Returns:
        True if the line was appended, False if it was already there
    """
    encoded = line.encode("utf-8")
    existed = path.exists()
    content = path.read_bytes() if existed else b""
    if encoded in content.splitlines():
        return False

    if existed:
        backup_once(ctx, path)
    else:
        path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("ab") as f:
        if content and not content.endswith(b"\n"):
            f.write(b"\n")
        f.write(encoded + b"\n")
    return True


# ----------------------------------------------------------------
# Stages
# ----------------------------------------------------------------
def check_root() -> None:
    """
    Ensure the script runs as root.

    Raises:
        PermissionError: If not running as root
    """
    if os.geteuid() != 0:
        print_error("Run this script as root.")
        raise PermissionError("This script must run with root privileges")
    logger.info("Root privileges confirmed.")


def group_exists(group: str) -> bool:
    return run_command(["getent", "group", group], check=False).returncode == 0


def user_in_group(user: str, group: str) -> bool:
    result = run_command(["id", "-nG", user], check=False)
    return result.returncode == 0 and group in result.stdout.split()


def ensure_audio_group_and_membership(ctx: RunContext) -> None:
    """Make sure the audio group exists and the configured user belongs to it."""
    group = ctx.config.AUDIO_GROUP
    user = ctx.config.AUDIO_USER

    if not group_exists(group):
        print_step(f"Group '{group}' not found. Creating...")
        try:
            run_command(["groupadd", group])
            print_success(f"Group '{group}' created.")
            ctx.record_change(f"created group '{group}'")
        except ExecutionError as e:
            logger.debug(str(e))
            print_warning(f"Could not create group '{group}' (continuing).")
            ctx.record_issue(f"group '{group}' could not be created")

    if user_in_group(user, group):
        print_step(f"User '{user}' already belongs to group '{group}'.")
        return

    print_step(f"Adding user '{user}' to group '{group}'...")
    try:
        run_command(["usermod", "-aG", group, user])
        print_success(f"User '{user}' added to group '{group}'.")
        ctx.record_change(f"added user '{user}' to group '{group}'")
    except ExecutionError as e:
        logger.debug(str(e))
        print_warning(f"Could not add {user} to group '{group}' (continuing).")
        ctx.record_issue(f"user '{user}' could not be added to group '{group}'")


def maybe_apt_update(ctx: RunContext) -> None:
    """Refresh the apt cache, at most once per run."""
    if ctx.apt_updated:
        return
    print_step("Updating package cache...")
    try:
        run_command(
            ["apt-get", "update", "-y"],
            env=apt_env(),
            timeout=ctx.config.COMMAND_TIMEOUT,
        )
    except ExecutionError as e:
        logger.debug(str(e))
        print_warning("Could not update apt cache (continuing).")
        ctx.record_issue("apt cache refresh failed")
    ctx.apt_updated = True


def install_package(ctx: RunContext, pkg: str, cmd: Optional[str] = None) -> bool:
    """
    Install pkg with apt-get unless its representative executable is on PATH.

    Args:
        ctx: Run context
        pkg: Debian package name
        cmd: Executable whose presence means the package is installed (defaults to pkg)

    Returns:
        True if the package is present afterwards, False otherwise
    """
    cmd = cmd or pkg

    if Utils.command_exists(cmd):
        print_step(f"Package '{pkg}' already installed (cmd '{cmd}' found).")
        return True

    if not Utils.is_debian_like(ctx.config):
        print_warning(
            f"Non Debian-like system or apt-get missing. Skipping install of '{pkg}'."
        )
        ctx.record_issue(f"'{pkg}' skipped: host is not Debian-like")
        return False

    print_step(f"Installing package '{pkg}'...")
    maybe_apt_update(ctx)
    try:
        run_command(
            ["apt-get", "install", "-y", pkg],
            env=apt_env(),
            timeout=ctx.config.COMMAND_TIMEOUT,
        )
    except ExecutionError as e:
        logger.debug(str(e))
        print_error(f"Could not install '{pkg}'. Please install it manually.")
        ctx.record_issue(f"'{pkg}' could not be installed")
        return False

    print_success(f"Package '{pkg}' installed.")
    ctx.record_change(f"installed package '{pkg}'", reboot=False)
    return True


def install_packages(ctx: RunContext) -> None:
    for pkg, cmd in ctx.config.PACKAGES:
        install_package(ctx, pkg, cmd)


def check_alsa_cards(ctx: RunContext) -> None:
    """Report whether ALSA sees any sound card at all."""
    if not Utils.command_exists("aplay"):
        print_warning("aplay not available (alsa-utils missing?).")
        return

    try:
        result = run_command(
            ["aplay", "-l"], check=False, timeout=ctx.config.DIAG_TIMEOUT
        )
    except ExecutionError as e:
        print_warning(f"Could not query ALSA: {e}")
        return
    output = f"{result.stdout or ''}{result.stderr or ''}"
    if "no soundcards found" in output.lower():
        print_warning("No sound cards detected by ALSA (aplay reports none).")
    else:
        print_success("ALSA reports sound card(s) present.")


def show_cards(ctx: RunContext) -> None:
    """Print the kernel's sound card list and, when available, aplay -l."""
    cards_file = ctx.config.CARDS_FILE
    print_step(f"Sound cards ({cards_file}):")
    try:
        cards = Path(cards_file).read_text(encoding="utf-8", errors="replace")
    except OSError:
        print_warning(f"Cannot read {cards_file}")
        ctx.record_issue(f"{cards_file} is not readable")
    else:
        console.print(cards.rstrip() or "(empty)", style=NordColors.SNOW_STORM_1, markup=False)
        logger.info(f"{cards_file}:\n{cards.rstrip()}")

    if Utils.command_exists("aplay"):
        print_step("aplay -l:")
        try:
            result = run_command(
                ["aplay", "-l"], check=False, timeout=ctx.config.DIAG_TIMEOUT
            )
        except ExecutionError as e:
            logger.debug(str(e))
            return
        output = (result.stdout or result.stderr or "").rstrip()
        if output:
            console.print(output, style=NordColors.SNOW_STORM_1, markup=False)


def detect_sound_cards(ctx: RunContext) -> None:
    check_alsa_cards(ctx)
    show_cards(ctx)


def write_modprobe_order(ctx: RunContext) -> None:
    """Keep snd_usb_audio from grabbing ALSA card index 0."""
    target = Path(ctx.config.MODPROBE_CONF)
    line = ctx.config.MODPROBE_LINE

    if ensure_line_in_file(ctx, line, target):
        os.chmod(target, ctx.config.CONF_MODE)
        print_success(f"Updated {target}: added '{line}'")
        ctx.record_change(f"added '{line}' to {target}")
    else:
        print_step(f"No change: '{line}' already present in {target}")


def print_summary(ctx: RunContext) -> None:
    show_cards(ctx)
    if ctx.needs_reboot:
        print_warning("Some changes may require reboot (or re-login) to apply cleanly.")
        print_warning("Recommended: reboot the node if this is a dedicated box.")
    else:
        print_success("Done. No reboot required.")


# ----------------------------------------------------------------
# Main Orchestration
# ----------------------------------------------------------------
class AudioPrepSetup:
    """Runs the preparation stages in order against one RunContext."""

    def __init__(self, ctx: RunContext) -> None:
        self.ctx = ctx
        self.start_time = time.time()

    def run_stage(
        self, name: str, title: str, func: Callable[[RunContext], Any]
    ) -> None:
        """
        Run one stage, recording its outcome. Failures are logged and never
        stop the remaining stages.

        Args:
            name: Stage key in the status table
            title: Section title shown to the operator
            func: Stage function taking the run context
        """
        print_section(title)
        self.ctx.set_status(name, "in_progress")
        issues_before = len(self.ctx.issues)
        try:
            func(self.ctx)
        except (SetupError, OSError, ValueError) as e:
            print_error(f"{title} failed: {e}")
            self.ctx.record_issue(f"{name}: {e}")
            self.ctx.set_status(name, "failed", str(e))
            return

        new_issues = self.ctx.issues[issues_before:]
        if new_issues:
            self.ctx.set_status(name, "warning", "; ".join(new_issues))
        else:
            self.ctx.set_status(name, "success")

    def run(self) -> int:
        """
        Run the complete preparation.

        Returns:
            int: Exit code (0 on reaching the end, 1 if not root, 2 in strict
            mode when any stage degraded)
        """
        ctx = self.ctx
        cfg = ctx.config
        console.print(create_header())

        try:
            check_root()
        except PermissionError as e:
            ctx.set_status("root_check", "failed", str(e))
            return 1
        ctx.set_status("root_check", "success", "running as root")

        with log_session(cfg.LOG_FILE, debug=cfg.DEBUG):
            print_step("Starting Proxmox audio preparation (root-friendly)...")
            print_step(f"Log: {cfg.LOG_FILE}")

            self.run_stage("audio_group", "Audio group membership", ensure_audio_group_and_membership)
            self.run_stage("packages", "Packages", install_packages)
            self.run_stage("sound_cards", "Sound card detection", detect_sound_cards)
            self.run_stage("modprobe_order", "ALSA card order", write_modprobe_order)
            self.run_stage("summary", "Summary", print_summary)

            status_report(ctx)
            elapsed = time.time() - self.start_time
            logger.info(
                f"Run finished in {elapsed:.1f}s with {len(ctx.changes)} change(s) "
                f"and {len(ctx.issues)} issue(s)"
            )
            print_success(f"Completed. Check log at: {cfg.LOG_FILE}")

        if cfg.STRICT and ctx.issues:
            return 2
        return 0


# ----------------------------------------------------------------
# Signal Handling
# ----------------------------------------------------------------
def signal_handler(signum: int, frame: Optional[Any]) -> None:
    """
    Turn termination signals into a normal exit so open resources are
    released by their context managers.

    Args:
        signum: Signal number
        frame: Current stack frame
    """
    try:
        sig_name = signal.Signals(signum).name
    except ValueError:
        sig_name = f"signal {signum}"
    print_warning(f"Process interrupted by {sig_name}")
    sys.exit(128 + signum)


def setup_signal_handlers() -> None:
    for sig in (signal.SIGINT, signal.SIGTERM, signal.SIGHUP):
        try:
            signal.signal(sig, signal_handler)
        except (AttributeError, ValueError):
            pass


# ----------------------------------------------------------------
# Main CLI Entry Point with Click
# ----------------------------------------------------------------
@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--log-file", default=Config.LOG_FILE, show_default=True, help="Run log (appended to)")
@click.option("--config-file", default=Config.MODPROBE_CONF, show_default=True, help="modprobe file to update")
@click.option("--user", default=Config.AUDIO_USER, show_default=True, help="User to add to the audio group")
@click.option("--group", default=Config.AUDIO_GROUP, show_default=True, help="Audio group name")
@click.option("--strict", is_flag=True, help="Exit with status 2 if any step degraded or failed")
@click.option("--debug", is_flag=True, help="Echo commands and their output to the console")
@click.version_option(version=VERSION)
def main(
    log_file: str, config_file: str, user: str, group: str, strict: bool, debug: bool
) -> None:
    """Prepare a Proxmox/Debian host for ALSA audio."""
    setup_signal_handlers()
    config = Config(
        LOG_FILE=log_file,
        MODPROBE_CONF=config_file,
        AUDIO_USER=user,
        AUDIO_GROUP=group,
        STRICT=strict,
        DEBUG=debug,
    )
    sys.exit(AudioPrepSetup(RunContext(config=config)).run())


if __name__ == "__main__":
    main()
