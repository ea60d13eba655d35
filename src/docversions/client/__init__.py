import asyncio
import json
import subprocess
from typing import Any, List

from ..utils.exceptions import RegistryQueryError, ShellCommandError
from ..utils.logger import LogMe


class BaseRegistryClient:
    def __init__(self):
        """
        The BaseRegistryClient class executes the shell commands used to query a package registry.

        Registry tools (``yarn``, ``npm``) are invoked as subprocesses and their standard output is
        decoded as JSON. Credentials passed on the command line are redacted before anything is logged.
        """
        self.log = LogMe(self.__class__.__name__)

    @staticmethod
    def _sanitize_command(command: List[str]) -> List[str]:
        """Sanitizes sensitive data in the command list."""
        sensitive_keys = {"_authToken", "_auth", "_password", "token", "password"}
        sanitized = []
        for part in command:
            if "=" in part and any(part.split("=", 1)[0].endswith(key) for key in sensitive_keys):
                key, _ = part.split("=", 1)
                sanitized.append(f"{key}=<REDACTED_CREDENTIAL>")
            elif "@" in part and "://" in part:
                scheme, rest = part.split("://", 1)
                sanitized.append(f"{scheme}://<REDACTED_CREDENTIAL>@{rest.split('@', 1)[1]}")
            else:
                sanitized.append(part)
        return sanitized

    async def execute(self, command: List[str]) -> str:
        """
        Asynchronously executes a shell command using subprocess and returns the output.

        :param command: A list representing the command and its arguments to be executed.
        :type command: :py:obj:`~typing.List` [:py:class:`str`]
        :return: The standard output of the executed command decoded as a string.
        :rtype: :py:class:`str`
        :raises ShellCommandError: If the command cannot be started or exits with a non-zero code.
        """
        sanitized_command_str = " ".join(self._sanitize_command(command))
        self.log.debug(f"Attempting to execute {sanitized_command_str} command asynchronously")
        try:
            process = await asyncio.create_subprocess_exec(
                *command, stdout=subprocess.PIPE, stderr=subprocess.PIPE
            )
            stdout, stderr = await process.communicate()
        except OSError as e:
            raise ShellCommandError(
                "OSError encountered executing command.",
                command=sanitized_command_str,
                error_msg=str(e),
            )
        if process.returncode != 0:
            raise ShellCommandError(
                "Command execution failed.",
                command=sanitized_command_str,
                error=stderr.decode(errors="replace").strip(),
                return_code=process.returncode,
            )
        self.log.info("Command executed as expected with zero exit code status.")
        return stdout.decode(errors="replace").strip()

    def execute_sync(self, command: List[str]) -> str:
        """
        Identical to ``execute``, but blocks until the command completes.

        :param command: A list representing the command and its arguments to be executed.
        :type command: :py:obj:`~typing.List` [:py:class:`str`]
        :return: The standard output of the executed command decoded as a string.
        :rtype: :py:class:`str`
        :raises ShellCommandError: If the command cannot be started or exits with a non-zero code.
        """
        sanitized_command_str = " ".join(self._sanitize_command(command))
        self.log.debug(f"Attempting to execute {sanitized_command_str} command (no async).")
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            raise ShellCommandError(
                "Command execution failed.",
                command=sanitized_command_str,
                error=e.stderr.decode("utf-8", errors="replace").strip(),
                return_code=e.returncode,
            )
        except OSError as e:
            raise ShellCommandError(
                "OSError encountered executing command.",
                command=sanitized_command_str,
                error_msg=str(e),
            )
        return result.stdout.decode("utf-8", errors="replace").strip()

    @staticmethod
    def _decode(output: str, command: List[str]) -> Any:
        """Decodes command output as JSON, falling back to its first non-empty line."""
        try:
            return json.loads(output)
        except json.JSONDecodeError:
            pass
        # yarn prints one JSON document per line; the payload is the first one
        first_line = next((line for line in output.splitlines() if line.strip()), "")
        try:
            return json.loads(first_line)
        except json.JSONDecodeError as e:
            raise RegistryQueryError(
                "Failed parsing JSON response from registry command",
                command=" ".join(BaseRegistryClient._sanitize_command(command)),
                error_msg=str(e),
            )

    async def fetch_json(self, command: List[str]) -> Any:
        """
        Runs a registry command and decodes its output as JSON.

        :param command: The registry command to execute.
        :type command: :py:obj:`~typing.List` [:py:class:`str`]
        :return: The decoded JSON payload.
        :rtype: :py:obj:`~typing.Any`
        :raises RegistryQueryError: If the command fails or its output is not valid JSON.
        """
        self.log.debug("Attempting to fetch JSON.")
        try:
            output = await self.execute(command)
        except ShellCommandError as e:
            raise RegistryQueryError(
                "Registry command failed.", error_msg=str(e), return_code=e.context.get("return_code")
            )
        payload = self._decode(output, command)
        self.log.info("Retrieved valid JSON response from registry command.")
        return payload

    def fetch_json_sync(self, command: List[str]) -> Any:
        """Blocking variant of :meth:`fetch_json`."""
        self.log.debug("Attempting to fetch JSON (no async).")
        try:
            output = self.execute_sync(command)
        except ShellCommandError as e:
            raise RegistryQueryError(
                "Registry command failed.", error_msg=str(e), return_code=e.context.get("return_code")
            )
        return self._decode(output, command)
