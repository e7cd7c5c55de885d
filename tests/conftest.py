from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

import pytest

import proxmox_audio_prep as pap

PACKAGE_COMMANDS = {
    "alsa-utils": "aplay",
    "pciutils": "lspci",
    "firmware-sof-signed": "true",
}

APLAY_OUTPUT = (
    "**** List of PLAYBACK Hardware Devices ****\n"
    "card 0: PCH [HDA Intel PCH], device 0: ALC887-VD Analog [ALC887-VD Analog]\n"
)
CARDS = " 0 [PCH            ]: HDA-Intel - HDA Intel PCH\n"


class FakeHost:
    """Stands in for the commands the provisioner runs against the host."""

    def __init__(
        self,
        executables: Iterable[str] = ("apt-get", "true"),
        groups: Iterable[str] = (),
        memberships: Optional[Dict[str, Set[str]]] = None,
        fail: Iterable[str] = (),
        missing: Iterable[str] = (),
        hang: Iterable[str] = (),
        aplay_output: str = APLAY_OUTPUT,
    ) -> None:
        self.executables = set(executables)
        self.groups = set(groups)
        self.memberships = memberships if memberships is not None else {}
        self.fail = list(fail)
        self.missing = set(missing)
        self.hang = list(hang)
        self.timeouts: Dict[str, Optional[int]] = {}
        self.aplay_output = aplay_output
        self.calls: List[List[str]] = []

    def which(self, cmd: str) -> bool:
        return cmd in self.executables

    def run(self, cmd, env=None, check=True, timeout=None):
        cmd = list(cmd)
        self.calls.append(cmd)
        cmd_str = " ".join(cmd)
        self.timeouts[cmd_str] = timeout
        if any(cmd_str.startswith(prefix) for prefix in self.hang):
            raise pap.ExecutionError(f"Command timed out after {timeout} seconds: {cmd_str}")
        if cmd[0] in self.missing:
            raise pap.ExecutionError(f"Error executing command: {cmd_str}: not found")

        rc, out, err = 0, "", ""
        if any(cmd_str.startswith(prefix) for prefix in self.fail):
            rc, err = 100, "E: simulated failure"
        elif cmd[0] == "getent":
            rc = 0 if cmd[2] in self.groups else 2
            out = f"{cmd[2]}:x:29:\n" if rc == 0 else ""
        elif cmd[0] == "id":
            user = cmd[2]
            out = " ".join([user] + sorted(self.memberships.get(user, set()))) + "\n"
        elif cmd[0] == "groupadd":
            self.groups.add(cmd[1])
        elif cmd[0] == "usermod":
            self.memberships.setdefault(cmd[3], set()).add(cmd[2])
        elif cmd[:2] == ["apt-get", "install"]:
            self.executables.add(PACKAGE_COMMANDS.get(cmd[3], cmd[3]))
        elif cmd[0] == "aplay":
            out = self.aplay_output

        if check and rc != 0:
            raise pap.ExecutionError(f"Command failed (code {rc}): {cmd_str}")
        return subprocess.CompletedProcess(cmd, rc, out, err)

    def commands(self, name: str) -> List[List[str]]:
        return [c for c in self.calls if c[0] == name]

    @property
    def mutations(self) -> List[List[str]]:
        return [
            c
            for c in self.calls
            if c[0] in ("groupadd", "usermod") or c[:2] == ["apt-get", "install"]
        ]


@pytest.fixture
def config(tmp_path: Path) -> pap.Config:
    debian_version = tmp_path / "debian_version"
    debian_version.write_text("12.5\n")
    cards = tmp_path / "cards"
    cards.write_text(CARDS)
    return pap.Config(
        LOG_FILE=str(tmp_path / "log" / "proxmox-audio-prep.log"),
        MODPROBE_CONF=str(tmp_path / "modprobe.d" / "alsa-base.conf"),
        CARDS_FILE=str(cards),
        DEBIAN_VERSION_FILE=str(debian_version),
    )


@pytest.fixture
def ctx(config: pap.Config) -> pap.RunContext:
    return pap.RunContext(config=config)


@pytest.fixture
def host(monkeypatch) -> FakeHost:
    fake = FakeHost()
    monkeypatch.setattr(pap, "run_command", fake.run)
    monkeypatch.setattr(pap.Utils, "command_exists", fake.which)
    monkeypatch.setattr(pap.os, "geteuid", lambda: 0)
    monkeypatch.setattr(pap.signal, "signal", lambda *args: None)
    return fake
