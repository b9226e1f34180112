"""
chip-tool wrapper.

Commissioning (PASE/CASE, certificates, discovery) is done entirely by the
chip-tool binary. We only run it, wait for it, and keep its output.
chip-tool owns everything inside the storage directory.
"""

import logging
import shlex
import subprocess
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class CommissioningResult:
    """Outcome of a chip-tool run."""
    succeeded: bool
    output: str = ""
    returncode: Optional[int] = None
    command: List[str] = field(default_factory=list)

    @property
    def command_line(self) -> str:
        return shlex.join(self.command)


class ChipTool:
    """
    Runs chip-tool pairing commands.

    Calls block until chip-tool exits. Device discovery can take several
    seconds and there is no timeout.
    """

    def __init__(self, binary: str = "chip-tool", storage_path: str = "/var/lib/matter2mqtt"):
        self.binary = binary
        self.storage_path = storage_path

    def pair(self, node_id: int, pairing_code: str) -> CommissioningResult:
        """Commission a device with a QR or manual pairing code."""
        return self._run(
            "pairing", "code", str(node_id), pairing_code,
            "--storage-directory", self.storage_path,
        )

    def unpair(self, node_id: int) -> CommissioningResult:
        """Remove a device's fabric from this controller."""
        return self._run(
            "pairing", "unpair", str(node_id),
            "--storage-directory", self.storage_path,
        )

    def _run(self, *args: str) -> CommissioningResult:
        command = [self.binary, *args]
        logger.info(f"Running {shlex.join(command)}")

        try:
            proc = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        # ValueError: an argument with an embedded NUL byte
        except (OSError, ValueError) as e:
            logger.error(f"Could not start {self.binary}: {e}")
            return CommissioningResult(succeeded=False, output=str(e), command=command)

        result = CommissioningResult(
            succeeded=proc.returncode == 0,
            output=proc.stdout or "",
            returncode=proc.returncode,
            command=command,
        )

        if not result.succeeded:
            logger.error(
                f"chip-tool {args[1]} failed (exit {proc.returncode})\n"
                f"Command: {result.command_line}\n"
                f"Output:\n{result.output}"
            )
        else:
            logger.debug(f"chip-tool {args[1]} output:\n{result.output}")

        return result
